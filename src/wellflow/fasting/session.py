"""Fasting session state machine.

A fast is either Idle or Active(started_at). Ending an active fast produces
a FastingSession for the history. Progress figures are derived from
``now - started_at`` on every call, so the display tick can be dropped or
delayed without any effect on the recorded data.

Start times are not validated against the clock: a start in the future is
accepted and simply yields a negative elapsed time and duration.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Optional

from wellflow.fasting.stages import StageInfo, classify_stage
from wellflow.tracking.models import FastingSession, require_timestamp
from wellflow.tracking.timeutils import MS_PER_HOUR, format_duration

FASTING_GOAL_HOURS = 16


class FastingAlreadyActiveError(ValueError):
    """Raised when starting a fast while another one is running."""

    def __init__(self, started_at: int):
        super().__init__(f"a fast is already active (started at {started_at})")
        self.started_at = started_at


@dataclass(frozen=True)
class FastingProgress:
    """Readout of an active fast at a given instant."""

    started_at: int
    now: int

    @property
    def elapsed_ms(self) -> int:
        return self.now - self.started_at

    @property
    def elapsed_hours(self) -> float:
        return self.elapsed_ms / MS_PER_HOUR

    @property
    def percentage(self) -> float:
        """Progress toward the fixed goal, capped at 100."""
        return min(100.0, self.elapsed_hours / FASTING_GOAL_HOURS * 100)

    @property
    def stage(self) -> StageInfo:
        return classify_stage(self.elapsed_hours)

    @property
    def elapsed_label(self) -> str:
        return format_duration(self.elapsed_ms)

    def to_dict(self) -> dict[str, Any]:
        return {
            "started_at": self.started_at,
            "elapsed_ms": self.elapsed_ms,
            "elapsed": self.elapsed_label,
            "elapsed_hours": round(self.elapsed_hours, 2),
            "percentage": round(self.percentage, 1),
            "goal_hours": FASTING_GOAL_HOURS,
            "stage": self.stage.name,
            "stage_description": self.stage.description,
        }


@dataclass
class FastingState:
    """The current fast. Exactly one instance exists per dataset."""

    is_active: bool = False
    started_at: Optional[int] = None

    def __post_init__(self) -> None:
        if self.is_active and self.started_at is None:
            raise ValueError("an active fast needs a start time")
        if not self.is_active and self.started_at is not None:
            raise ValueError("an idle fast cannot carry a start time")

    def start(self, at: int) -> None:
        """Move from Idle to Active(at).

        Raises:
            FastingAlreadyActiveError: If a fast is already running
        """
        if self.is_active:
            raise FastingAlreadyActiveError(self.started_at)  # type: ignore[arg-type]
        self.is_active = True
        self.started_at = at

    def restart(self, at: int) -> None:
        """Start a fast at `at`, overwriting any running start time."""
        self.is_active = True
        self.started_at = at

    def end(self, now: int) -> Optional[FastingSession]:
        """Move from Active to Idle and return the completed session.

        Ending an idle fast is a no-op that returns None.
        """
        if not self.is_active or self.started_at is None:
            return None

        session = FastingSession(
            id=str(uuid.uuid4()),
            started_at=self.started_at,
            ended_at=now,
            duration_ms=now - self.started_at,
        )
        self.is_active = False
        self.started_at = None
        return session

    def progress(self, now: int) -> Optional[FastingProgress]:
        """Return the progress readout, or None while idle."""
        if not self.is_active or self.started_at is None:
            return None
        return FastingProgress(started_at=self.started_at, now=now)

    def to_dict(self) -> dict[str, Any]:
        return {"isActive": self.is_active, "startTime": self.started_at}

    @classmethod
    def from_dict(cls, data: Any) -> "FastingState":
        if not isinstance(data, dict):
            raise ValueError("fasting state must be an object")
        is_active = data.get("isActive")
        if not isinstance(is_active, bool):
            raise ValueError(f"'isActive' must be a boolean, got {is_active!r}")
        started_at = None
        if data.get("startTime") is not None:
            started_at = require_timestamp(data, "startTime")
        return cls(is_active=is_active, started_at=started_at)
