"""
Stats Service

Loads plans and sessions through the plan/session services and hands them
to the calculator. Collaborator failures come back as ServiceError with
the original exception chained.
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from studytrack.models.plan import Plan
from studytrack.models.session import Session
from studytrack.models.stats import DailyStats, PlanStats, TimeRange, TotalStats
from studytrack.services import calculator, streak
from studytrack.services.store import PlanService, SessionService
from studytrack.utils.exceptions import ServiceError
from studytrack.utils.logger import get_logger

logger = get_logger("stats_service")


class StatsService:
    """Facade over the statistics calculator."""

    def __init__(self, plan_service: PlanService, session_service: SessionService):
        self.plan_service = plan_service
        self.session_service = session_service

    # ========================================================================
    # LOADING
    # ========================================================================

    def _load_plans(self) -> List[Plan]:
        try:
            records = self.plan_service.list(None)
        except Exception as e:
            logger.error("Listing plans failed", error=str(e))
            raise ServiceError(f"failed to list plans: {e}", error_code="PLAN_LIST_FAILED") from e

        plans = []
        for record in records:
            try:
                plans.append(self.plan_service.get(record.id))
            except Exception as e:
                logger.error("Loading plan failed", plan_id=record.id, error=str(e))
                raise ServiceError(f"failed to load plan {record.id}: {e}", error_code="PLAN_LOAD_FAILED") from e
        return plans

    def _load_sessions(self) -> List[Session]:
        try:
            return list(self.session_service.list_all())
        except Exception as e:
            logger.error("Listing sessions failed", error=str(e))
            raise ServiceError(f"failed to list sessions: {e}", error_code="SESSION_LIST_FAILED") from e

    def list_sessions(self) -> List[Session]:
        """Every session, newest first."""
        sessions = self._load_sessions()
        sessions.sort(key=lambda s: s.start_time, reverse=True)
        return sessions

    # ========================================================================
    # QUERIES
    # ========================================================================

    def get_total_stats(self, as_of: Optional[datetime] = None) -> TotalStats:
        plans = self._load_plans()
        sessions = self._load_sessions()
        stats = calculator.calculate_total_stats(sessions, plans, as_of)
        logger.debug("Total stats computed", sessions=stats.total_sessions, plans=len(plans))
        return stats

    def get_plan_stats(self, plan_id: str) -> PlanStats:
        try:
            plan = self.plan_service.get(plan_id)
        except Exception as e:
            raise ServiceError(f"failed to load plan {plan_id}: {e}", error_code="PLAN_LOAD_FAILED") from e

        try:
            sessions = list(self.session_service.list(plan_id, 0))
        except Exception as e:
            raise ServiceError(f"failed to list sessions: {e}", error_code="SESSION_LIST_FAILED") from e

        return calculator.calculate_plan_stats(plan_id, sessions, plan)

    def get_daily_stats(self, time_range: TimeRange) -> List[DailyStats]:
        time_range.validate()
        sessions = self._load_sessions()
        return calculator.calculate_daily_stats(sessions, time_range)

    def get_streak_info(self, as_of: Optional[datetime] = None) -> Tuple[int, int]:
        """(current, longest) streak."""
        return streak.calculate_streak(self._load_sessions(), as_of)

    def get_active_days(self) -> List[DailyStats]:
        """One DailyStats per day with activity, ascending."""
        sessions = self._load_sessions()
        result = []
        for day in streak.get_active_days(sessions):
            day_range = TimeRange(day, day + timedelta(days=1) - timedelta(microseconds=1))
            buckets = calculator.calculate_daily_stats(sessions, day_range)
            if buckets:
                result.append(buckets[0])
        return result

    def get_all_plan_stats(self) -> Dict[str, PlanStats]:
        plans = self._load_plans()
        sessions = self._load_sessions()
        return calculator.aggregate_by_plan(sessions, plans)

    def get_report_data(self, as_of: Optional[datetime] = None):
        """Everything a full report needs, loaded once."""
        plans = self._load_plans()
        sessions = self._load_sessions()
        total = calculator.calculate_total_stats(sessions, plans, as_of)
        plan_stats = list(calculator.aggregate_by_plan(sessions, plans).values())
        daily = []
        if sessions:
            starts = [s.start_time for s in sessions]
            daily = calculator.calculate_daily_stats(sessions, TimeRange(min(starts), max(starts)))
        return total, plan_stats, daily


def get_stats_service(plan_service: PlanService, session_service: SessionService) -> StatsService:
    """Create a stats service over the given collaborators."""
    return StatsService(plan_service, session_service)
