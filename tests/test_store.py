"""Tests for the state store and its forgiving loads."""

from __future__ import annotations

from datetime import date

from wellflow.db.queries import RecordQueries
from wellflow.db.store import (
    FASTING_HISTORY_KEY,
    FASTING_STATE_KEY,
    LAST_RESET_KEY,
    LOGS_KEY,
    PROFILE_KEY,
    unusable_key,
)
from wellflow.fasting.session import FastingState
from wellflow.tracking.ledger import new_log_entry
from wellflow.tracking.models import (
    ActivityType,
    FastingSession,
    Gender,
    LogKind,
    UserProfile,
)


def put_raw(store, key: str, raw: str) -> None:
    with store.db.get_connection() as conn:
        RecordQueries.put_record(conn, key, raw)


def get_raw(store, key: str):
    with store.db.get_connection() as conn:
        return RecordQueries.get_record(conn, key)


class TestDefaults:
    """Absent records load as their documented defaults."""

    def test_empty_store(self, store) -> None:
        assert store.load_profile() == UserProfile()
        assert store.load_logs() == []
        assert store.load_fasting_history() == []
        assert store.load_fasting_state() == FastingState()
        assert store.load_last_reset(now=42) == 42

    def test_default_marker_is_saved(self, store) -> None:
        assert not store.has_record(LAST_RESET_KEY)
        store.load_last_reset(now=42)
        assert store.has_record(LAST_RESET_KEY)
        assert store.load_last_reset(now=99) == 42


class TestSaveAndLoad:
    """Saved records come back as equal models."""

    def test_profile(self, store) -> None:
        profile = UserProfile(
            name="Ana",
            date_of_birth=date(1985, 3, 2),
            height_cm=162,
            weight_kg=58.5,
            gender=Gender.FEMALE,
            address="Lisbon",
            manual_daily_limit=1700,
        )
        store.save_profile(profile)
        assert store.load_profile() == profile

    def test_logs_keep_order(self, store) -> None:
        logs = [
            new_log_entry(LogKind.ACTIVITY, "Biking", 300, ActivityType.BIKING, now=2),
            new_log_entry(LogKind.FOOD, "Soup", 250, now=1),
        ]
        store.save_logs(logs)
        assert store.load_logs() == logs

    def test_fasting_records(self, store) -> None:
        history = [FastingSession(id="a", started_at=0, ended_at=10, duration_ms=10)]
        store.save_fasting_history(history)
        store.save_fasting_state(FastingState(is_active=True, started_at=99))
        assert store.load_fasting_history() == history
        assert store.load_fasting_state() == FastingState(is_active=True, started_at=99)

    def test_overwrite(self, store) -> None:
        store.save_last_reset(1)
        store.save_last_reset(2)
        assert store.load_last_reset() == 2


class TestMalformedRecords:
    """Corrupt or mismatched records fall back to defaults instead of raising."""

    def test_invalid_json(self, store) -> None:
        put_raw(store, PROFILE_KEY, "{not json")
        assert store.load_profile() == UserProfile()

    def test_profile_missing_field(self, store) -> None:
        put_raw(store, PROFILE_KEY, '{"name": "X", "dob": "1990-01-01"}')
        assert store.load_profile() == UserProfile()

    def test_profile_invalid_height(self, store) -> None:
        put_raw(
            store,
            PROFILE_KEY,
            '{"name": "X", "dob": "1990-01-01", "height": -5, "weight": 70, "gender": "male"}',
        )
        assert store.load_profile() == UserProfile()

    def test_profile_zero_manual_limit_means_unset(self, store) -> None:
        put_raw(
            store,
            PROFILE_KEY,
            '{"name": "X", "dob": "1990-01-01", "height": 180, "weight": 80, '
            '"gender": "male", "address": "", "manualLimit": 0}',
        )
        profile = store.load_profile()
        assert profile.name == "X"
        assert profile.manual_daily_limit is None

    def test_profile_negative_manual_limit_means_unset(self, store) -> None:
        put_raw(
            store,
            PROFILE_KEY,
            '{"name": "Kim", "dob": "1988-02-29", "height": 170, "weight": 60, '
            '"gender": "female", "address": "", "manualLimit": -200}',
        )
        profile = store.load_profile()
        assert profile.name == "Kim"
        assert profile.date_of_birth == date(1988, 2, 29)
        assert profile.manual_daily_limit is None

    def test_logs_not_a_list(self, store) -> None:
        put_raw(store, LOGS_KEY, '{"id": "1"}')
        assert store.load_logs() == []

    def test_logs_with_one_bad_entry_default_entirely(self, store) -> None:
        put_raw(
            store,
            LOGS_KEY,
            '[{"id": "1", "type": "food", "name": "A", "calories": 10, "timestamp": 1},'
            ' {"id": "2", "type": "food", "name": "B", "calories": "ten", "timestamp": 1}]',
        )
        assert store.load_logs() == []

    def test_negative_calories_rejected(self, store) -> None:
        put_raw(
            store,
            LOGS_KEY,
            '[{"id": "1", "type": "food", "name": "A", "calories": -10, "timestamp": 1}]',
        )
        assert store.load_logs() == []

    def test_history_wrong_type(self, store) -> None:
        put_raw(store, FASTING_HISTORY_KEY, '"nope"')
        assert store.load_fasting_history() == []

    def test_fasting_state_violating_invariant(self, store) -> None:
        put_raw(store, FASTING_STATE_KEY, '{"isActive": true, "startTime": null}')
        assert store.load_fasting_state() == FastingState()

    def test_marker_not_a_number(self, store) -> None:
        put_raw(store, LAST_RESET_KEY, '"yesterday"')
        assert store.load_last_reset(now=7) == 7
        assert store.load_last_reset(now=8) == 7

    def test_unusable_record_survives_later_save(self, store) -> None:
        raw = (
            '[{"id": "1", "type": "food", "name": "A", "calories": 10, "timestamp": 1},'
            ' {"id": "2", "type": "food", "name": "B", "calories": "ten", "timestamp": 1}]'
        )
        put_raw(store, LOGS_KEY, raw)
        assert store.load_logs() == []

        store.save_logs([new_log_entry(LogKind.FOOD, "C", 5, now=2)])

        assert get_raw(store, unusable_key(LOGS_KEY)) == raw
        assert [e.label for e in store.load_logs()] == ["C"]


class TestMobileAppRecords:
    """Records written by the mobile app load unchanged."""

    def test_activity_entry_with_integer_fields(self, store) -> None:
        put_raw(
            store,
            LOGS_KEY,
            '[{"type": "activity", "name": "Daily Chores", "calories": 120, '
            '"activityType": "Daily Chores", "id": "abc", "timestamp": 1718000000000}]',
        )
        (entry,) = store.load_logs()
        assert entry.kind == LogKind.ACTIVITY
        assert entry.activity_type == ActivityType.DAILY_CHORES
        assert entry.occurred_at == 1718000000000


class TestSchema:
    """Tests for schema creation."""

    def test_state_table_created(self, store) -> None:
        with store.db.get_connection() as conn:
            row = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
                ("state_records",),
            ).fetchone()
        assert row is not None
        assert not store.has_record(PROFILE_KEY)
