"""Recorded study sessions."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from studytrack.utils.exceptions import ValidationError


@dataclass
class Session:
    """
    One study interval logged against a plan.

    duration is in minutes and is what aggregation uses; it may be stored
    independently of start_time/end_time.
    """
    id: str
    plan_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: int = 0
    notes: str = ''
    chunk_id: Optional[str] = None
    created_at: Optional[datetime] = None

    def validate(self):
        if not self.id:
            raise ValidationError("session ID cannot be empty")
        if not self.plan_id:
            raise ValidationError("plan ID cannot be empty")
        if self.duration < 0:
            raise ValidationError(f"duration cannot be negative, got {self.duration}")
        if self.end_time is not None:
            if self.end_time < self.start_time:
                raise ValidationError("end time cannot be before start time")
            if self.end_time == self.start_time:
                raise ValidationError("end time cannot equal start time")

    def is_active(self) -> bool:
        """True while the session has no end time."""
        return self.end_time is None

    def calculate_duration(self) -> int:
        """Whole minutes between start and end, 0 while active."""
        if self.end_time is None:
            return 0
        return int((self.end_time - self.start_time).total_seconds() // 60)

    def elapsed_minutes(self, now: Optional[datetime] = None) -> int:
        if self.end_time is None:
            now = now or datetime.now(self.start_time.tzinfo)
            return max(0, int((now - self.start_time).total_seconds() // 60))
        return self.duration

    def elapsed_time(self, now: Optional[datetime] = None) -> str:
        """Human readable duration, e.g. '1h 05m' or '45m'."""
        hours, mins = divmod(self.elapsed_minutes(now), 60)
        if hours > 0:
            return f"{hours}h {mins:02d}m"
        return f"{mins}m"

    def complete(self, end_time: datetime):
        if not self.is_active():
            raise ValidationError("session is already complete")
        if end_time < self.start_time:
            raise ValidationError("end time cannot be before start time")
        self.end_time = end_time
        self.duration = self.calculate_duration()

    def add_notes(self, notes: str):
        if not self.notes:
            self.notes = notes
        else:
            self.notes += "\n" + notes
