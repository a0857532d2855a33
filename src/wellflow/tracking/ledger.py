"""Calorie ledger: today's consumed, burned, net and remaining calories.

Every figure is derived on access from the raw log entries, the daily limit
and "now". Nothing is cached, so a summary can never drift from the entries
it was built from.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Iterable, Optional

from wellflow.tracking.models import ActivityType, LogEntry, LogKind
from wellflow.tracking.timeutils import is_same_calendar_day, now_ms

# Remaining calories at or below this share of the limit trigger the alert
NEAR_LIMIT_FRACTION = 0.10

# Divisor floor for limits that are zero or negative (implausible BMR inputs)
MIN_DAILY_LIMIT = 1.0


def todays_logs(logs: Iterable[LogEntry], now: int) -> list[LogEntry]:
    """Return entries that fall on the same local calendar day as now."""
    return [entry for entry in logs if is_same_calendar_day(entry.occurred_at, now)]


@dataclass(frozen=True)
class DailySummary:
    """Derived calorie figures for one calendar day.

    Attributes:
        entries: The day's log entries, newest first
        daily_limit: Effective daily limit as configured (may be <= 0)
    """

    entries: tuple[LogEntry, ...]
    daily_limit: float

    @property
    def usable_limit(self) -> float:
        """Daily limit for the ratio figures; MIN_DAILY_LIMIT stands in for a limit <= 0."""
        return self.daily_limit if self.daily_limit > 0 else MIN_DAILY_LIMIT

    @property
    def consumed(self) -> float:
        return sum(e.calories for e in self.entries if e.kind == LogKind.FOOD)

    @property
    def burned(self) -> float:
        return sum(e.calories for e in self.entries if e.kind == LogKind.ACTIVITY)

    @property
    def net(self) -> float:
        return self.consumed - self.burned

    @property
    def remaining(self) -> float:
        return self.usable_limit - self.net

    @property
    def percentage_of_limit(self) -> float:
        """Net calories as a percentage of the limit.

        Not clamped: values above 100 mean the limit was exceeded and
        negative values mean more was burned than eaten. Renderers clamp.
        """
        return self.net / self.usable_limit * 100

    @property
    def is_over_or_near_limit(self) -> bool:
        remaining = self.remaining
        return remaining <= NEAR_LIMIT_FRACTION * self.usable_limit or remaining < 0

    @property
    def status_label(self) -> str:
        return "Over Limit!" if self.remaining < 0 else "kcal left"

    def to_dict(self) -> dict:
        return {
            "consumed": self.consumed,
            "burned": self.burned,
            "net": self.net,
            "daily_limit": self.daily_limit,
            "remaining": self.remaining,
            "percentage_of_limit": round(self.percentage_of_limit, 1),
            "is_over_or_near_limit": self.is_over_or_near_limit,
            "entry_count": len(self.entries),
        }


def summarize_day(logs: Iterable[LogEntry], daily_limit: float, now: int) -> DailySummary:
    """Build the summary for the calendar day containing now."""
    return DailySummary(entries=tuple(todays_logs(logs, now)), daily_limit=daily_limit)


def new_log_entry(
    kind: LogKind,
    label: str,
    calories: float,
    activity_type: Optional[ActivityType] = None,
    now: Optional[int] = None,
) -> LogEntry:
    """Create a log entry with a fresh id and the current timestamp.

    Raises:
        ValueError: If calories are negative or kind and activity_type disagree
    """
    return LogEntry(
        id=str(uuid.uuid4()),
        kind=kind,
        label=label,
        calories=calories,
        occurred_at=now if now is not None else now_ms(),
        activity_type=activity_type,
    )


def prepend_log(logs: list[LogEntry], entry: LogEntry) -> list[LogEntry]:
    """Return a new list with entry at the front (newest first)."""
    return [entry, *logs]


def remove_log(logs: list[LogEntry], log_id: str) -> list[LogEntry]:
    """Return a new list without the first entry whose id is log_id.

    Removing an unknown id leaves the collection unchanged.
    """
    for index, entry in enumerate(logs):
        if entry.id == log_id:
            return logs[:index] + logs[index + 1:]
    return list(logs)
