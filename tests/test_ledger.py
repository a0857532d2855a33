"""Tests for the calorie ledger."""

from __future__ import annotations

import pytest
from conftest import local_ms

from wellflow.tracking.ledger import (
    DailySummary,
    new_log_entry,
    prepend_log,
    remove_log,
    summarize_day,
    todays_logs,
)
from wellflow.tracking.models import ActivityType, LogEntry, LogKind

NOW = local_ms(2024, 6, 15, 18, 0)


def food(calories: float, at: int = NOW, label: str = "Meal") -> LogEntry:
    return new_log_entry(LogKind.FOOD, label, calories, now=at)


def activity(calories: float, at: int = NOW) -> LogEntry:
    return new_log_entry(
        LogKind.ACTIVITY, "Running", calories, ActivityType.RUNNING, now=at
    )


class TestDailySummary:
    """Tests for derived daily figures."""

    def test_food_and_activity(self) -> None:
        """500 eaten, 200 burned against 2000 leaves 1700."""
        summary = summarize_day([activity(200), food(500)], 2000, NOW)
        assert summary.consumed == 500
        assert summary.burned == 200
        assert summary.net == 300
        assert summary.remaining == 1700
        assert summary.percentage_of_limit == pytest.approx(15.0)
        assert not summary.is_over_or_near_limit
        assert summary.status_label == "kcal left"

    def test_only_today_counts(self) -> None:
        yesterday = local_ms(2024, 6, 14, 23, 59)
        summary = summarize_day([food(400), food(900, at=yesterday)], 2000, NOW)
        assert summary.consumed == 400
        assert len(summary.entries) == 1

    def test_percentage_not_clamped(self) -> None:
        summary = summarize_day([food(3000)], 2000, NOW)
        assert summary.percentage_of_limit == pytest.approx(150.0)
        assert summary.remaining == -1000
        assert summary.status_label == "Over Limit!"

    def test_negative_percentage_when_burning_more(self) -> None:
        summary = summarize_day([activity(500)], 2000, NOW)
        assert summary.net == -500
        assert summary.percentage_of_limit == pytest.approx(-25.0)

    def test_near_limit_threshold_is_inclusive(self) -> None:
        """Exactly 10% of the limit remaining raises the alert."""
        summary = summarize_day([food(1800)], 2000, NOW)
        assert summary.remaining == 200
        assert summary.is_over_or_near_limit

    def test_just_above_near_limit(self) -> None:
        summary = summarize_day([food(1799)], 2000, NOW)
        assert not summary.is_over_or_near_limit

    def test_zero_limit_does_not_divide_by_zero(self) -> None:
        summary = DailySummary(entries=(food(10),), daily_limit=0)
        assert summary.daily_limit == 0
        assert summary.remaining == pytest.approx(-9.0)
        assert summary.percentage_of_limit == pytest.approx(1000.0)
        assert summary.is_over_or_near_limit

    def test_small_positive_limit_is_used_as_is(self) -> None:
        summary = DailySummary(entries=(food(0.2),), daily_limit=0.5)
        assert summary.remaining == pytest.approx(0.3)
        assert summary.percentage_of_limit == pytest.approx(40.0)

    def test_empty_day(self) -> None:
        summary = summarize_day([], 1500, NOW)
        assert summary.consumed == 0
        assert summary.burned == 0
        assert summary.remaining == 1500

    def test_to_dict(self) -> None:
        data = summarize_day([food(500)], 2000, NOW).to_dict()
        assert data["remaining"] == 1500
        assert data["percentage_of_limit"] == 25.0
        assert data["entry_count"] == 1


class TestLogCollection:
    """Tests for adding and removing entries."""

    def test_new_entry_gets_id_and_timestamp(self) -> None:
        entry = food(100)
        assert entry.id
        assert entry.occurred_at == NOW
        assert food(100).id != entry.id

    def test_negative_calories_rejected(self) -> None:
        with pytest.raises(ValueError):
            food(-1)

    @pytest.mark.parametrize("calories", [float("nan"), float("inf")])
    def test_non_finite_calories_rejected(self, calories: float) -> None:
        with pytest.raises(ValueError):
            food(calories)

    def test_activity_requires_type(self) -> None:
        with pytest.raises(ValueError):
            new_log_entry(LogKind.ACTIVITY, "Run", 100, now=NOW)

    def test_food_cannot_have_activity_type(self) -> None:
        with pytest.raises(ValueError):
            new_log_entry(LogKind.FOOD, "Cake", 100, ActivityType.HIIT, now=NOW)

    def test_prepend_puts_newest_first(self) -> None:
        first, second = food(1), food(2)
        logs = prepend_log(prepend_log([], first), second)
        assert logs == [second, first]

    def test_remove_unknown_id_is_noop(self) -> None:
        logs = [food(1), food(2), food(3)]
        result = remove_log(logs, "missing")
        assert result == logs
        assert len(result) == 3

    def test_remove_keeps_order(self) -> None:
        a, b, c = food(1), food(2), food(3)
        assert remove_log([a, b, c], b.id) == [a, c]

    def test_todays_logs_keeps_input_order(self) -> None:
        a, b = food(1), food(2)
        assert todays_logs([b, a], NOW) == [b, a]
