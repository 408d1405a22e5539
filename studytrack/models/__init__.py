"""Domain models for StudyTrack."""

from .plan import Status, Chunk, Plan, PlanRecord, next_chunk_status
from .session import Session
from .stats import TotalStats, PlanStats, DailyStats, TimeRange

__all__ = [
    'Status', 'Chunk', 'Plan', 'PlanRecord', 'next_chunk_status',
    'Session',
    'TotalStats', 'PlanStats', 'DailyStats', 'TimeRange',
]
