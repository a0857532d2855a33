"""Application state and the operations that mutate it.

``AppState`` is the explicit in-memory view of everything wellflow tracks.
``WellnessTracker`` applies each mutation to the state and then hands the
changed record to the store right away, so there is never unsaved state.
The store is optional, which keeps the tracker usable in memory alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from wellflow.db.store import StateStore
from wellflow.fasting.session import FastingProgress, FastingState
from wellflow.profiles.body_calc import calculate_bmr, effective_daily_limit
from wellflow.tracking.ledger import (
    DailySummary,
    new_log_entry,
    prepend_log,
    remove_log,
    summarize_day,
)
from wellflow.tracking.models import (
    ActivityType,
    FastingSession,
    LogEntry,
    LogKind,
    UserProfile,
)
from wellflow.tracking.timeutils import is_same_calendar_day, now_ms, to_local_datetime

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    """Everything the tracker holds in memory."""

    profile: UserProfile = field(default_factory=UserProfile)
    logs: list[LogEntry] = field(default_factory=list)
    fasting_history: list[FastingSession] = field(default_factory=list)
    fasting: FastingState = field(default_factory=FastingState)
    last_reset: int = field(default_factory=now_ms)

    @classmethod
    def load(cls, store: StateStore, now: Optional[int] = None) -> "AppState":
        """Read every record from the store, defaulting where needed."""
        return cls(
            profile=store.load_profile(),
            logs=store.load_logs(),
            fasting_history=store.load_fasting_history(),
            fasting=store.load_fasting_state(),
            last_reset=store.load_last_reset(now),
        )


class WellnessTracker:
    """Calorie and fasting operations over an AppState."""

    def __init__(self, state: AppState, store: Optional[StateStore] = None):
        self.state = state
        self.store = store

    @classmethod
    def open(cls, store: StateStore, now: Optional[int] = None) -> "WellnessTracker":
        """Load state from the store and run the startup day-boundary check."""
        tracker = cls(AppState.load(store, now), store)
        tracker.check_day_boundary(now)
        return tracker

    def reload(self, now: Optional[int] = None) -> None:
        """Discard in-memory state and read everything from the store again."""
        if self.store is None:
            return
        self.state = AppState.load(self.store, now)

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def save_profile(self, profile: UserProfile) -> None:
        """Replace the profile wholesale."""
        self.state.profile = profile
        if self.store is not None:
            self.store.save_profile(profile)
        logger.info("Profile saved for %s", profile.name)

    def bmr(self, as_of: Optional[date] = None) -> float:
        return calculate_bmr(self.state.profile, as_of)

    def daily_limit(self, as_of: Optional[date] = None) -> float:
        return effective_daily_limit(self.state.profile, as_of)

    # ------------------------------------------------------------------
    # Calorie ledger
    # ------------------------------------------------------------------

    def add_log(
        self,
        kind: LogKind,
        label: str,
        calories: float,
        activity_type: Optional[ActivityType] = None,
        now: Optional[int] = None,
    ) -> LogEntry:
        """Create an entry stamped with now and put it at the front of the logs."""
        entry = new_log_entry(kind, label, calories, activity_type, now)
        self.state.logs = prepend_log(self.state.logs, entry)
        self._save_logs()
        logger.info("Logged %s '%s' (%s kcal)", kind.value, label, calories)
        return entry

    def add_food(self, label: str, calories: float, now: Optional[int] = None) -> LogEntry:
        return self.add_log(LogKind.FOOD, label, calories, now=now)

    def add_activity(
        self,
        activity_type: ActivityType,
        calories: float,
        label: Optional[str] = None,
        now: Optional[int] = None,
    ) -> LogEntry:
        return self.add_log(
            LogKind.ACTIVITY, label or activity_type.value, calories, activity_type, now
        )

    def delete_log(self, log_id: str) -> bool:
        """Delete the entry with log_id. Returns False (and saves nothing) if absent."""
        remaining = remove_log(self.state.logs, log_id)
        if len(remaining) == len(self.state.logs):
            return False
        self.state.logs = remaining
        self._save_logs()
        logger.info("Deleted log entry %s", log_id)
        return True

    def daily_summary(self, now: Optional[int] = None) -> DailySummary:
        if now is None:
            now = now_ms()
        as_of = to_local_datetime(now).date()
        return summarize_day(self.state.logs, self.daily_limit(as_of), now)

    def _save_logs(self) -> None:
        if self.store is not None:
            self.store.save_logs(self.state.logs)

    # ------------------------------------------------------------------
    # Fasting
    # ------------------------------------------------------------------

    def start_fast(self, at: Optional[int] = None, restart: bool = False) -> FastingState:
        """Start a fast at `at` (default: now).

        Raises:
            FastingAlreadyActiveError: If a fast is running and restart is False
        """
        if at is None:
            at = now_ms()
        if restart:
            self.state.fasting.restart(at)
        else:
            self.state.fasting.start(at)
        if self.store is not None:
            self.store.save_fasting_state(self.state.fasting)
        logger.info("Fast started at %s", at)
        return self.state.fasting

    def end_fast(self, now: Optional[int] = None) -> Optional[FastingSession]:
        """End the running fast and record it. A no-op when no fast is running."""
        if now is None:
            now = now_ms()
        session = self.state.fasting.end(now)
        if session is None:
            return None

        self.state.fasting_history = [session, *self.state.fasting_history]
        if self.store is not None:
            self.store.save_fasting_history(self.state.fasting_history)
            self.store.save_fasting_state(self.state.fasting)
        logger.info("Fast ended after %s ms", session.duration_ms)
        return session

    def fasting_progress(self, now: Optional[int] = None) -> Optional[FastingProgress]:
        return self.state.fasting.progress(now if now is not None else now_ms())

    # ------------------------------------------------------------------
    # Day boundary
    # ------------------------------------------------------------------

    def check_day_boundary(self, now: Optional[int] = None) -> bool:
        """Move the day-boundary marker forward if the local day has changed.

        Returns:
            True if a new day was detected and the marker updated
        """
        if now is None:
            now = now_ms()
        if is_same_calendar_day(now, self.state.last_reset):
            return False

        self.state.last_reset = now
        if self.store is not None:
            self.store.save_last_reset(now)
        logger.info("New day detected, boundary marker moved to %s", now)
        return True
