"""
Derived statistics snapshots.

Every snapshot is recomputed from sessions and plans on each query and is
never mutated afterwards. validate() is a pure consistency check.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional, Tuple

from studytrack.utils.exceptions import StatsValidationError


def _non_negative(name: str, value):
    if value < 0:
        raise StatsValidationError(f"{name.replace('_', ' ')} cannot be negative: {value}", name, {name: value})


@dataclass(frozen=True)
class TotalStats:
    """Aggregate statistics across all learning activity."""
    total_hours: float = 0.0
    total_sessions: int = 0
    active_plans: int = 0
    completed_plans: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    average_session: float = 0.0  # minutes
    last_session_date: Optional[datetime] = None

    def validate(self):
        for name in ('total_hours', 'total_sessions', 'active_plans', 'completed_plans',
                     'current_streak', 'longest_streak', 'average_session'):
            _non_negative(name, getattr(self, name))

        if self.longest_streak > 0 and self.current_streak > self.longest_streak:
            raise StatsValidationError(
                f"current streak ({self.current_streak}) cannot exceed longest streak ({self.longest_streak})",
                'current_streak',
                {'current_streak': self.current_streak, 'longest_streak': self.longest_streak}
            )
        if self.total_sessions > 0 and self.average_session == 0:
            raise StatsValidationError(
                "average session should be > 0 when sessions exist",
                'average_session',
                {'average_session': self.average_session, 'total_sessions': self.total_sessions}
            )
        if self.total_sessions == 0 and self.total_hours > 0:
            raise StatsValidationError(
                "total hours should be 0 when no sessions exist",
                'total_hours',
                {'total_hours': self.total_hours, 'total_sessions': self.total_sessions}
            )

    @property
    def total_plans(self) -> int:
        return self.active_plans + self.completed_plans


@dataclass(frozen=True)
class PlanStats:
    """Statistics for one learning plan."""
    plan_id: str
    plan_title: str
    status: str
    total_hours: float = 0.0
    planned_hours: float = 0.0
    session_count: int = 0
    completed_chunks: int = 0
    total_chunks: int = 0
    progress: float = 0.0
    last_session: Optional[datetime] = None

    def validate(self):
        if not self.plan_id:
            raise StatsValidationError("plan ID cannot be empty", 'plan_id', {'plan_id': self.plan_id})
        if not self.plan_title:
            raise StatsValidationError("plan title cannot be empty", 'plan_title', {'plan_title': self.plan_title})

        for name in ('total_hours', 'planned_hours', 'session_count', 'completed_chunks', 'total_chunks'):
            _non_negative(name, getattr(self, name))

        if self.completed_chunks > self.total_chunks:
            raise StatsValidationError(
                f"completed chunks ({self.completed_chunks}) cannot exceed total chunks ({self.total_chunks})",
                'completed_chunks',
                {'completed_chunks': self.completed_chunks, 'total_chunks': self.total_chunks}
            )
        if self.progress < 0 or self.progress > 1.0:
            raise StatsValidationError(
                f"progress must be between 0 and 1, got {self.progress:.2f}",
                'progress',
                {'progress': self.progress}
            )
        if not self.status:
            raise StatsValidationError("status cannot be empty", 'status', {'status': self.status})

    def progress_percent(self) -> int:
        return int(self.progress * 100)


@dataclass(frozen=True)
class DailyStats:
    """Activity on one calendar day (date is local midnight)."""
    date: datetime
    duration: int = 0  # minutes
    session_count: int = 0
    plans: Tuple[str, ...] = field(default_factory=tuple)

    def validate(self):
        if self.date is None:
            raise StatsValidationError("date cannot be zero", 'date', {'date': self.date})
        _non_negative('duration', self.duration)
        _non_negative('session_count', self.session_count)
        if self.session_count > 0 and self.duration == 0:
            raise StatsValidationError(
                "duration should be > 0 when sessions exist",
                'duration',
                {'duration': self.duration, 'session_count': self.session_count}
            )
        if self.session_count == 0 and self.duration > 0:
            raise StatsValidationError(
                "session count should be > 0 when duration exists",
                'session_count',
                {'duration': self.duration, 'session_count': self.session_count}
            )

    def hours(self) -> float:
        return self.duration / 60.0


def _midnight(t: datetime) -> datetime:
    return t.replace(hour=0, minute=0, second=0, microsecond=0)


@dataclass(frozen=True)
class TimeRange:
    """Inclusive [start, end] window."""
    start: datetime
    end: datetime

    def validate(self):
        if self.start is None:
            raise StatsValidationError("start time cannot be zero", 'start', {'start': self.start})
        if self.end is None:
            raise StatsValidationError("end time cannot be zero", 'end', {'end': self.end})
        if self.end < self.start:
            raise StatsValidationError(
                "end time cannot be before start time",
                'end',
                {'start': self.start, 'end': self.end}
            )

    def contains(self, t: datetime) -> bool:
        return self.start <= t <= self.end

    @classmethod
    def today(cls, now: Optional[datetime] = None) -> 'TimeRange':
        now = now or datetime.now()
        return cls(_midnight(now), now)

    @classmethod
    def this_week(cls, now: Optional[datetime] = None) -> 'TimeRange':
        """Monday midnight to now."""
        now = now or datetime.now()
        monday = now - timedelta(days=now.weekday())
        return cls(_midnight(monday), now)

    @classmethod
    def this_month(cls, now: Optional[datetime] = None) -> 'TimeRange':
        now = now or datetime.now()
        return cls(_midnight(now.replace(day=1)), now)

    @classmethod
    def since(cls, start: datetime, now: Optional[datetime] = None) -> 'TimeRange':
        return cls(start, now or datetime.now(start.tzinfo))

    @classmethod
    def all_time(cls, now: Optional[datetime] = None) -> 'TimeRange':
        now = now or datetime.now()
        return cls(datetime.fromtimestamp(0, tz=now.tzinfo), now)
