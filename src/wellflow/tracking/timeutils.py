"""Time helpers shared by the calorie ledger and the fasting tracker.

All timestamps handled by wellflow are integer epoch milliseconds. Calendar
comparisons are made in local time, since "today" means the user's today.
"""

from __future__ import annotations

import time
from datetime import date, datetime
from typing import Optional

MS_PER_SECOND = 1000
MS_PER_HOUR = 3_600_000


def now_ms() -> int:
    """Return the current time as epoch milliseconds."""
    return int(time.time() * MS_PER_SECOND)


def to_local_datetime(timestamp_ms: int) -> datetime:
    """Convert epoch milliseconds to a naive local datetime."""
    return datetime.fromtimestamp(timestamp_ms / MS_PER_SECOND)


def from_local_datetime(value: datetime) -> int:
    """Convert a datetime (naive values are taken as local time) to epoch ms."""
    return int(value.timestamp() * MS_PER_SECOND)


def age(date_of_birth: date, as_of: Optional[date] = None) -> int:
    """Return whole years between date_of_birth and as_of.

    The count ticks over on the birthday itself. Future birth dates are not
    validated and produce zero or negative ages.

    Args:
        date_of_birth: Birth date
        as_of: Reference date (default: today)

    Returns:
        Age in years
    """
    if as_of is None:
        as_of = date.today()

    years = as_of.year - date_of_birth.year
    if (as_of.month, as_of.day) < (date_of_birth.month, date_of_birth.day):
        years -= 1
    return years


def is_same_calendar_day(t1: int, t2: int) -> bool:
    """Return True if both timestamps fall on the same local calendar day."""
    return to_local_datetime(t1).date() == to_local_datetime(t2).date()


def format_duration(duration_ms: int) -> str:
    """Format a millisecond count as HH:MM:SS.

    Floors to the whole second. Hours are not capped, so 30 hours renders as
    "30:00:00". Negative durations render as "00:00:00".
    """
    total_seconds = max(0, int(duration_ms) // MS_PER_SECOND)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
