"""Statistics, export and storage services."""

from .calculator import calculate_total_stats, calculate_plan_stats, calculate_daily_stats, aggregate_by_plan
from .streak import get_active_days, find_streaks, calculate_streak, detect_streak_breaks
from .exporter import Exporter, get_exporter
from .stats_service import StatsService, get_stats_service
from .store import (
    PlanFilter, PlanService, SessionService,
    InMemoryPlanService, InMemorySessionService, load_fixture,
)

__all__ = [
    'calculate_total_stats', 'calculate_plan_stats', 'calculate_daily_stats', 'aggregate_by_plan',
    'get_active_days', 'find_streaks', 'calculate_streak', 'detect_streak_breaks',
    'Exporter', 'get_exporter',
    'StatsService', 'get_stats_service',
    'PlanFilter', 'PlanService', 'SessionService',
    'InMemoryPlanService', 'InMemorySessionService', 'load_fixture',
]
