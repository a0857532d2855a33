"""Data models for the calorie ledger and fasting tracker.

Each model knows how to serialize itself to the JSON shape used by the state
store and by export files. The keys (``dob``, ``manualLimit``, ``startTime``...)
are the ones used by the wellflow mobile app, so backups move freely between
the two.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Optional


class Gender(Enum):
    """Gender used by the BMR equation."""
    MALE = "male"
    FEMALE = "female"


class LogKind(Enum):
    """Kind of calorie log entry."""
    FOOD = "food"
    ACTIVITY = "activity"


class ActivityType(Enum):
    """Activity subtypes offered when logging burned calories."""
    WALKING = "Walking"
    RUNNING = "Running"
    BIKING = "Biking"
    HIIT = "HIIT"
    DAILY_CHORES = "Daily Chores"
    OTHERS = "Others"


def require_number(data: dict, key: str) -> float:
    value = data[key]
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"'{key}' must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"'{key}' must be finite, got {value!r}")
    return value


def require_str(data: dict, key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"'{key}' must be a string, got {value!r}")
    return value


def require_timestamp(data: dict, key: str) -> int:
    return int(require_number(data, key))


@dataclass
class UserProfile:
    """The single local user profile."""

    name: str = "New User"
    date_of_birth: date = date(1990, 1, 1)
    height_cm: float = 175.0
    weight_kg: float = 70.0
    gender: Gender = Gender.MALE
    address: str = ""
    manual_daily_limit: Optional[float] = None

    def __post_init__(self) -> None:
        if isinstance(self.gender, str):
            self.gender = Gender(self.gender.lower())
        if not math.isfinite(self.height_cm) or self.height_cm <= 0:
            raise ValueError(f"height_cm must be positive, got {self.height_cm}")
        if not math.isfinite(self.weight_kg) or self.weight_kg <= 0:
            raise ValueError(f"weight_kg must be positive, got {self.weight_kg}")
        if self.manual_daily_limit is not None and (
            not math.isfinite(self.manual_daily_limit) or self.manual_daily_limit <= 0
        ):
            raise ValueError(
                f"manual_daily_limit must be positive when set, got {self.manual_daily_limit}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "dob": self.date_of_birth.isoformat(),
            "height": self.height_cm,
            "weight": self.weight_kg,
            "gender": self.gender.value,
            "address": self.address,
            "manualLimit": self.manual_daily_limit,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "UserProfile":
        """Build a profile from its stored form.

        Raises:
            ValueError: If any field is missing, mistyped or out of range
        """
        if not isinstance(data, dict):
            raise ValueError("profile record must be an object")
        try:
            manual_limit = data.get("manualLimit")
            if manual_limit:
                manual_limit = require_number(data, "manualLimit")
            # Like the mobile app, a falsy limit (0, "") means "not set"; so does a negative one
            if not manual_limit or manual_limit <= 0:
                manual_limit = None
            address = data.get("address") or ""
            if not isinstance(address, str):
                raise ValueError("'address' must be a string")
            return cls(
                name=require_str(data, "name"),
                date_of_birth=date.fromisoformat(require_str(data, "dob")[:10]),
                height_cm=require_number(data, "height"),
                weight_kg=require_number(data, "weight"),
                gender=Gender(require_str(data, "gender").lower()),
                address=address,
                manual_daily_limit=manual_limit,
            )
        except KeyError as exc:
            raise ValueError(f"profile record is missing {exc}") from exc


@dataclass(frozen=True)
class LogEntry:
    """A single food or activity entry. Immutable once created."""

    id: str
    kind: LogKind
    label: str
    calories: float
    occurred_at: int
    activity_type: Optional[ActivityType] = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.calories) or self.calories < 0:
            raise ValueError(f"calories must be a non-negative number, got {self.calories}")
        if self.kind == LogKind.ACTIVITY and self.activity_type is None:
            raise ValueError("activity entries require an activity_type")
        if self.kind == LogKind.FOOD and self.activity_type is not None:
            raise ValueError("food entries cannot carry an activity_type")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.kind.value,
            "name": self.label,
            "calories": self.calories,
            "timestamp": self.occurred_at,
        }
        if self.activity_type is not None:
            data["activityType"] = self.activity_type.value
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "LogEntry":
        if not isinstance(data, dict):
            raise ValueError("log entry must be an object")
        try:
            kind = LogKind(require_str(data, "type"))
            activity_type = None
            if kind == LogKind.ACTIVITY:
                raw = data.get("activityType") or data.get("name")
                activity_type = ActivityType(raw)
            return cls(
                id=require_str(data, "id"),
                kind=kind,
                label=require_str(data, "name"),
                calories=require_number(data, "calories"),
                occurred_at=require_timestamp(data, "timestamp"),
                activity_type=activity_type,
            )
        except KeyError as exc:
            raise ValueError(f"log entry is missing {exc}") from exc


@dataclass(frozen=True)
class FastingSession:
    """A completed fast. Created only when an active fast is ended."""

    id: str
    started_at: int
    ended_at: int
    duration_ms: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "startTime": self.started_at,
            "endTime": self.ended_at,
            "duration": self.duration_ms,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "FastingSession":
        if not isinstance(data, dict):
            raise ValueError("fasting session must be an object")
        try:
            return cls(
                id=require_str(data, "id"),
                started_at=require_timestamp(data, "startTime"),
                ended_at=require_timestamp(data, "endTime"),
                duration_ms=require_timestamp(data, "duration"),
            )
        except KeyError as exc:
            raise ValueError(f"fasting session is missing {exc}") from exc
