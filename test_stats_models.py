"""Tests for the stats snapshots and their validation."""

from datetime import datetime, timedelta

import pytest

from studytrack.models.stats import DailyStats, PlanStats, TimeRange, TotalStats
from studytrack.utils.exceptions import StatsValidationError


def test_zero_total_stats_are_valid():
    TotalStats().validate()


def test_validate_is_idempotent():
    stats = TotalStats(total_hours=2.0, total_sessions=2, current_streak=1, longest_streak=2, average_session=60)
    stats.validate()
    stats.validate()
    assert stats == TotalStats(total_hours=2.0, total_sessions=2, current_streak=1,
                               longest_streak=2, average_session=60)


@pytest.mark.parametrize("field", ['total_hours', 'total_sessions', 'active_plans',
                                   'completed_plans', 'current_streak', 'longest_streak',
                                   'average_session'])
def test_total_stats_negative_values_rejected(field):
    with pytest.raises(StatsValidationError) as exc:
        TotalStats(**{field: -1}).validate()
    assert exc.value.field == field
    assert "cannot be negative" in exc.value.message


def test_current_streak_cannot_exceed_longest():
    with pytest.raises(StatsValidationError, match=r"current streak \(5\) cannot exceed longest streak \(3\)"):
        TotalStats(total_hours=1, total_sessions=1, average_session=60,
                   current_streak=5, longest_streak=3).validate()


def test_average_required_when_sessions_exist():
    with pytest.raises(StatsValidationError, match="average session should be > 0"):
        TotalStats(total_hours=1, total_sessions=1).validate()


def test_hours_without_sessions_rejected():
    with pytest.raises(StatsValidationError, match="total hours should be 0"):
        TotalStats(total_hours=1).validate()


def test_plan_stats_rules():
    PlanStats("p", "Plan", "in-progress", completed_chunks=2, total_chunks=4, progress=0.5).validate()

    with pytest.raises(StatsValidationError):
        PlanStats("", "Plan", "in-progress").validate()
    with pytest.raises(StatsValidationError):
        PlanStats("p", "", "in-progress").validate()
    with pytest.raises(StatsValidationError):
        PlanStats("p", "Plan", "").validate()
    with pytest.raises(StatsValidationError, match="completed chunks"):
        PlanStats("p", "Plan", "in-progress", completed_chunks=3, total_chunks=2).validate()
    with pytest.raises(StatsValidationError, match="progress must be between 0 and 1"):
        PlanStats("p", "Plan", "in-progress", progress=1.5).validate()


def test_plan_stats_progress_percent_truncates():
    assert PlanStats("p", "Plan", "in-progress", progress=0.375).progress_percent() == 37


def test_daily_stats_rules():
    day = datetime(2024, 1, 1)
    DailyStats(day, duration=30, session_count=1).validate()
    DailyStats(day).validate()

    with pytest.raises(StatsValidationError, match="duration should be > 0"):
        DailyStats(day, duration=0, session_count=2).validate()
    with pytest.raises(StatsValidationError, match="session count should be > 0"):
        DailyStats(day, duration=30, session_count=0).validate()


def test_time_range():
    start = datetime(2024, 1, 1)
    end = datetime(2024, 1, 2)
    r = TimeRange(start, end)
    r.validate()
    assert r.contains(start)
    assert r.contains(end)
    assert not r.contains(end + timedelta(seconds=1))

    with pytest.raises(StatsValidationError, match="end time cannot be before start time"):
        TimeRange(end, start).validate()


def test_time_range_presets():
    now = datetime(2024, 3, 6, 15, 30)  # a Wednesday

    assert TimeRange.today(now) == TimeRange(datetime(2024, 3, 6), now)
    assert TimeRange.this_week(now).start == datetime(2024, 3, 4)
    assert TimeRange.this_month(now).start == datetime(2024, 3, 1)
    assert TimeRange.since(datetime(2024, 2, 1), now) == TimeRange(datetime(2024, 2, 1), now)
    assert TimeRange.all_time(now).contains(datetime(2000, 1, 1))
