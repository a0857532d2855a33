"""Calorie tracking module.

Key components:
- Data models for the profile, log entries and fasting sessions
- Time helpers (age, local calendar-day bucketing, duration formatting)
- Calorie ledger deriving today's consumed/burned/net/remaining figures
"""

from __future__ import annotations

from wellflow.tracking.models import (
    ActivityType,
    FastingSession,
    Gender,
    LogEntry,
    LogKind,
    UserProfile,
)

__all__ = [
    "ActivityType",
    "FastingSession",
    "Gender",
    "LogEntry",
    "LogKind",
    "UserProfile",
]
