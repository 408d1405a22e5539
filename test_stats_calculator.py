"""Tests for the statistics calculator."""

from datetime import datetime

import pytest

from conftest import make_plan, make_session
from studytrack.models.plan import Status
from studytrack.models.stats import TimeRange
from studytrack.services.calculator import (
    UNKNOWN_STATUS, aggregate_by_plan, calculate_daily_stats, calculate_plan_stats,
    calculate_total_stats,
)


def test_total_stats_no_sessions_still_counts_plans():
    plans = [
        make_plan("a", status=Status.IN_PROGRESS),
        make_plan("b", status=Status.NOT_STARTED),
        make_plan("c", status=Status.COMPLETED),
    ]
    stats = calculate_total_stats([], plans)

    assert stats.active_plans == 2
    assert stats.completed_plans == 1
    assert stats.total_plans == 3
    assert stats.total_sessions == 0
    assert stats.total_hours == 0
    assert stats.current_streak == 0
    assert stats.longest_streak == 0
    assert stats.last_session_date is None
    stats.validate()


def test_total_stats_archived_and_skipped_not_counted():
    plans = [make_plan("a", status=Status.ARCHIVED), make_plan("b", status=Status.SKIPPED)]
    stats = calculate_total_stats([], plans)
    assert stats.active_plans == 0
    assert stats.completed_plans == 0


def test_total_stats(sessions, plans):
    stats = calculate_total_stats(sessions, plans, as_of=datetime(2024, 3, 3, 23, 0))

    assert stats.total_sessions == 4
    assert stats.total_hours == pytest.approx(240 / 60)
    assert stats.average_session == pytest.approx(60)
    assert stats.current_streak == 3
    assert stats.longest_streak == 3
    assert stats.last_session_date == datetime(2024, 3, 3, 21, 0)
    assert stats.active_plans == 2
    assert stats.completed_plans == 1
    stats.validate()


def test_plan_stats_progress_half():
    plan = make_plan("p", chunk_statuses=[Status.COMPLETED, Status.COMPLETED,
                                          Status.NOT_STARTED, Status.IN_PROGRESS])
    stats = calculate_plan_stats("p", [], plan)

    assert stats.progress == 0.5
    assert stats.progress_percent() == 50
    assert stats.completed_chunks == 2
    assert stats.total_chunks == 4
    assert stats.session_count == 0
    assert stats.last_session is None
    stats.validate()


def test_plan_stats_without_chunks_has_zero_progress():
    stats = calculate_plan_stats("p", [], make_plan("p"))
    assert stats.progress == 0.0
    assert stats.total_chunks == 0


def test_plan_stats_uses_only_matching_sessions(sessions, plans):
    stats = calculate_plan_stats("go", sessions, plans[0])

    assert stats.plan_title == "Go Concurrency"
    assert stats.status == "in-progress"
    assert stats.session_count == 3
    assert stats.total_hours == pytest.approx(3.0)
    assert stats.planned_hours == 12
    assert stats.last_session == datetime(2024, 3, 3, 21, 0)


def test_plan_stats_without_plan_record():
    stats = calculate_plan_stats("ghost", [make_session("x", "ghost", duration=30)], None)

    assert stats.plan_title == "ghost"
    assert stats.status == UNKNOWN_STATUS
    assert stats.session_count == 1
    assert stats.total_hours == pytest.approx(0.5)
    stats.validate()


def test_daily_stats_excludes_out_of_range_sessions():
    sessions = [
        make_session("a", start=datetime(2024, 1, 1, 9, 0), duration=30),
        make_session("b", start=datetime(2024, 1, 2, 9, 0), duration=45),
        make_session("c", start=datetime(2024, 1, 5, 9, 0), duration=60),
    ]
    daily = calculate_daily_stats(sessions, TimeRange(datetime(2024, 1, 2), datetime(2024, 1, 3)))

    assert len(daily) == 1
    assert daily[0].date == datetime(2024, 1, 2)
    assert daily[0].duration == 45
    assert daily[0].session_count == 1


def test_daily_stats_range_bounds_are_inclusive():
    sessions = [
        make_session("a", start=datetime(2024, 1, 1, 0, 0)),
        make_session("b", start=datetime(2024, 1, 2, 0, 0)),
    ]
    daily = calculate_daily_stats(sessions, TimeRange(datetime(2024, 1, 1), datetime(2024, 1, 2)))
    assert [d.date for d in daily] == [datetime(2024, 1, 1), datetime(2024, 1, 2)]


def test_daily_stats_merges_same_day_and_keeps_plan_order():
    sessions = [
        make_session("a", "go", datetime(2024, 1, 1, 9, 0), 30),
        make_session("b", "sql", datetime(2024, 1, 1, 12, 0), 20),
        make_session("c", "go", datetime(2024, 1, 1, 18, 0), 10),
    ]
    daily = calculate_daily_stats(sessions, TimeRange(datetime(2024, 1, 1), datetime(2024, 1, 2)))

    assert len(daily) == 1
    assert daily[0].duration == 60
    assert daily[0].session_count == 3
    assert daily[0].plans == ("go", "sql")
    assert daily[0].hours() == pytest.approx(1.0)


def test_daily_stats_sorted_ascending_and_sparse():
    sessions = [
        make_session("a", start=datetime(2024, 1, 5, 9, 0)),
        make_session("b", start=datetime(2024, 1, 1, 9, 0)),
    ]
    daily = calculate_daily_stats(sessions, TimeRange(datetime(2024, 1, 1), datetime(2024, 1, 31)))
    assert [d.date for d in daily] == [datetime(2024, 1, 1), datetime(2024, 1, 5)]


def test_aggregate_by_plan_covers_every_plan(sessions, plans):
    result = aggregate_by_plan(sessions, plans)

    assert list(result) == ["go", "sql", "math"]
    assert result["math"].session_count == 0
    assert result["sql"].progress == 1.0
    for stats in result.values():
        stats.validate()
