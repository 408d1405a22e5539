"""Tests for the stats service facade."""

from datetime import datetime

import pytest

from studytrack.models.stats import TimeRange
from studytrack.services.stats_service import StatsService, get_stats_service
from studytrack.services.store import InMemoryPlanService, InMemorySessionService
from studytrack.utils.exceptions import ServiceError, StatsValidationError


@pytest.fixture
def service(plan_service, session_service):
    return get_stats_service(plan_service, session_service)


def test_total_stats(service):
    stats = service.get_total_stats(as_of=datetime(2024, 3, 4, 9, 0))
    assert stats.total_sessions == 4
    assert stats.current_streak == 3
    assert stats.active_plans == 2
    assert stats.completed_plans == 1


def test_total_stats_without_sessions_counts_plans(plan_service):
    service = StatsService(plan_service, InMemorySessionService())
    stats = service.get_total_stats()
    assert stats.total_sessions == 0
    assert stats.total_plans == 3


def test_plan_stats(service):
    stats = service.get_plan_stats("go")
    assert stats.session_count == 3
    assert stats.progress == 0.5


def test_plan_stats_missing_plan(service):
    with pytest.raises(ServiceError, match="failed to load plan ghost"):
        service.get_plan_stats("ghost")


def test_daily_stats(service):
    daily = service.get_daily_stats(TimeRange(datetime(2024, 3, 2), datetime(2024, 3, 3, 23, 59)))
    assert [d.date for d in daily] == [datetime(2024, 3, 2), datetime(2024, 3, 3)]
    assert daily[1].session_count == 2
    assert daily[1].duration == 90


def test_daily_stats_rejects_inverted_range(service):
    with pytest.raises(StatsValidationError):
        service.get_daily_stats(TimeRange(datetime(2024, 3, 3), datetime(2024, 3, 1)))


def test_streak_info(service):
    assert service.get_streak_info(datetime(2024, 3, 10)) == (0, 3)


def test_active_days(service):
    days = service.get_active_days()
    assert [d.date for d in days] == [datetime(2024, 3, 1), datetime(2024, 3, 2), datetime(2024, 3, 3)]
    assert [d.session_count for d in days] == [1, 1, 2]


def test_all_plan_stats(service):
    result = service.get_all_plan_stats()
    assert list(result) == ["go", "sql", "math"]


def test_report_data(service):
    total, plan_stats, daily = service.get_report_data()
    assert total.total_sessions == 4
    assert len(plan_stats) == 3
    assert len(daily) == 3


def test_list_sessions_newest_first(service):
    assert [s.id for s in service.list_sessions()] == ["s4", "s3", "s2", "s1"]


def test_plan_service_failure_wrapped(session_service):
    class BrokenPlans(InMemoryPlanService):
        def list(self, filter=None):
            raise RuntimeError("connection reset")

    service = StatsService(BrokenPlans(), session_service)
    with pytest.raises(ServiceError, match="failed to list plans: connection reset") as exc:
        service.get_total_stats()
    assert isinstance(exc.value.__cause__, RuntimeError)


def test_session_service_failure_wrapped(plan_service):
    class BrokenSessions(InMemorySessionService):
        def list_all(self):
            raise RuntimeError("timeout")

    service = StatsService(plan_service, BrokenSessions())
    with pytest.raises(ServiceError, match="failed to list sessions: timeout"):
        service.get_all_plan_stats()
