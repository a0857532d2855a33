"""Tests for WellnessTracker operations and their persistence."""

from __future__ import annotations

from datetime import date

import pytest
from conftest import local_ms

from wellflow.fasting.session import FastingAlreadyActiveError
from wellflow.tracking.models import ActivityType, Gender, LogKind, UserProfile
from wellflow.tracking.state import AppState, WellnessTracker
from wellflow.tracking.timeutils import MS_PER_HOUR


class TestCalorieOperations:
    """Tests for adding, deleting and summarizing log entries."""

    def test_add_food_and_activity(self, tracker, noon) -> None:
        tracker.save_profile(UserProfile(manual_daily_limit=2000))
        tracker.add_food("Pasta", 500, now=noon)
        tracker.add_activity(ActivityType.RUNNING, 200, now=noon + 1000)

        summary = tracker.daily_summary(now=noon + 2000)
        assert summary.consumed == 500
        assert summary.burned == 200
        assert summary.net == 300
        assert summary.remaining == 1700

    def test_newest_first(self, tracker, noon) -> None:
        first = tracker.add_food("Breakfast", 300, now=noon)
        second = tracker.add_food("Lunch", 600, now=noon + 1)
        assert tracker.state.logs == [second, first]

    def test_activity_label_defaults_to_type(self, tracker, noon) -> None:
        entry = tracker.add_activity(ActivityType.DAILY_CHORES, 80, now=noon)
        assert entry.label == "Daily Chores"
        assert entry.kind == LogKind.ACTIVITY

    def test_mutations_are_persisted(self, tracker, store, noon) -> None:
        entry = tracker.add_food("Apple", 95, now=noon)
        assert store.load_logs() == [entry]

        assert tracker.delete_log(entry.id)
        assert store.load_logs() == []

    def test_delete_unknown_id(self, tracker, noon) -> None:
        a = tracker.add_food("A", 1, now=noon)
        b = tracker.add_food("B", 2, now=noon)
        before = list(tracker.state.logs)

        assert tracker.delete_log("does-not-exist") is False
        assert tracker.state.logs == before == [b, a]

    def test_negative_calories_leave_state_unchanged(self, tracker, noon) -> None:
        with pytest.raises(ValueError):
            tracker.add_food("Bad", -5, now=noon)
        assert tracker.state.logs == []

    def test_daily_limit_from_bmr(self, tracker) -> None:
        tracker.save_profile(
            UserProfile(date_of_birth=date(1990, 1, 1), gender=Gender.MALE)
        )
        assert tracker.daily_limit(date(2024, 6, 15)) == pytest.approx(1628.75)


class TestFastingOperations:
    """Tests for the fast lifecycle through the tracker."""

    def test_start_and_end(self, tracker, store, noon) -> None:
        tracker.start_fast(noon)
        assert store.load_fasting_state().started_at == noon

        progress = tracker.fasting_progress(noon + 8 * MS_PER_HOUR)
        assert progress.percentage == pytest.approx(50.0)

        session = tracker.end_fast(noon + 17 * MS_PER_HOUR)
        assert session.duration_ms == 17 * MS_PER_HOUR
        assert not tracker.state.fasting.is_active
        assert store.load_fasting_history() == [session]
        assert not store.load_fasting_state().is_active

    def test_history_newest_first(self, tracker, noon) -> None:
        tracker.start_fast(noon)
        first = tracker.end_fast(noon + MS_PER_HOUR)
        tracker.start_fast(noon + 2 * MS_PER_HOUR)
        second = tracker.end_fast(noon + 3 * MS_PER_HOUR)
        assert tracker.state.fasting_history == [second, first]

    def test_end_without_fast(self, tracker, store, noon) -> None:
        assert tracker.end_fast(noon) is None
        assert tracker.state.fasting_history == []
        assert not store.has_record("fasting_logs")

    def test_double_start(self, tracker, noon) -> None:
        tracker.start_fast(noon)
        with pytest.raises(FastingAlreadyActiveError):
            tracker.start_fast(noon + MS_PER_HOUR)

        tracker.start_fast(noon - MS_PER_HOUR, restart=True)
        assert tracker.state.fasting.started_at == noon - MS_PER_HOUR


class TestDayBoundary:
    """Tests for the day-boundary marker."""

    def test_same_day_does_nothing(self, tracker, store, noon) -> None:
        store.save_last_reset(noon)
        assert tracker.check_day_boundary(noon + MS_PER_HOUR) is False
        assert tracker.state.last_reset == noon
        assert store.load_last_reset() == noon

    def test_first_open_saves_marker(self, store, noon) -> None:
        WellnessTracker.open(store, now=noon)
        assert store.has_record("last_reset")
        assert store.load_last_reset() == noon

    def test_day_change_between_launches(self, store, noon) -> None:
        WellnessTracker.open(store, now=noon)

        next_morning = local_ms(2024, 6, 16, 7, 0)
        tracker = WellnessTracker(AppState.load(store, next_morning), store)
        assert tracker.state.last_reset == noon
        assert tracker.check_day_boundary(next_morning) is True
        assert store.load_last_reset() == next_morning

    def test_new_day_moves_marker(self, tracker, store) -> None:
        tomorrow = local_ms(2024, 6, 16, 0, 1)
        assert tracker.check_day_boundary(tomorrow) is True
        assert tracker.state.last_reset == tomorrow
        assert store.load_last_reset() == tomorrow

    def test_open_runs_startup_check(self, store) -> None:
        store.save_last_reset(local_ms(2024, 6, 14, 22, 0))
        now = local_ms(2024, 6, 15, 7, 0)
        tracker = WellnessTracker.open(store, now=now)
        assert tracker.state.last_reset == now


class TestReload:
    """Tests for state reinitialization from the store."""

    def test_reload_discards_memory_state(self, tracker, store, noon) -> None:
        tracker.add_food("Kept", 100, now=noon)
        tracker.state.logs = []
        tracker.reload()
        assert [e.label for e in tracker.state.logs] == ["Kept"]

    def test_in_memory_tracker_without_store(self, noon) -> None:
        tracker = WellnessTracker(AppState(last_reset=noon))
        tracker.add_food("Toast", 120, now=noon)
        tracker.start_fast(noon)
        assert tracker.end_fast(noon + 1) is not None
        tracker.reload()
        assert len(tracker.state.logs) == 1
