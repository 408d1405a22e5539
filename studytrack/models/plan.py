"""
Learning plans and their chunks.

A plan owns its chunks; a chunk's status is changed independently of the
plan's status.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import List, Optional

from studytrack.utils.exceptions import ValidationError


class Status(str, Enum):
    """Lifecycle state shared by plans and chunks."""
    NOT_STARTED = 'not-started'
    IN_PROGRESS = 'in-progress'
    COMPLETED = 'completed'
    SKIPPED = 'skipped'
    ARCHIVED = 'archived'

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value) -> 'Status':
        if isinstance(value, Status):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(f"invalid status: {value}", error_code="INVALID_STATUS")


_CHUNK_CYCLE = {
    Status.NOT_STARTED: Status.IN_PROGRESS,
    Status.IN_PROGRESS: Status.COMPLETED,
    Status.COMPLETED: Status.SKIPPED,
    Status.SKIPPED: Status.NOT_STARTED,
}


def next_chunk_status(current: Status) -> Status:
    """Status a chunk moves to when the user toggles it."""
    return _CHUNK_CYCLE.get(current, Status.NOT_STARTED)


@dataclass
class Chunk:
    """A time-boxed unit of work inside a plan."""
    id: str
    title: str
    duration: int  # planned minutes
    status: Status = Status.NOT_STARTED
    objectives: List[str] = field(default_factory=list)
    deliverable: str = ''

    def validate(self):
        if not self.id:
            raise ValidationError("chunk ID cannot be empty")
        if not self.title:
            raise ValidationError("chunk title cannot be empty")
        if self.duration <= 0:
            raise ValidationError(f"duration must be positive, got {self.duration}")
        Status.parse(self.status)


@dataclass
class Plan:
    """A learning goal broken into ordered chunks."""
    id: str
    title: str
    total_hours: float
    status: Status = Status.NOT_STARTED
    tags: List[str] = field(default_factory=list)
    chunks: List[Chunk] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def validate(self):
        """Check required fields, status values and chunk id uniqueness."""
        if not self.id:
            raise ValidationError("plan ID cannot be empty")
        if not self.title:
            raise ValidationError("plan title cannot be empty")
        if self.total_hours <= 0:
            raise ValidationError(f"total hours must be positive, got {self.total_hours:.1f}")
        Status.parse(self.status)
        if self.updated_at < self.created_at:
            raise ValidationError("updated_at cannot be before created_at")

        seen = set()
        for i, chunk in enumerate(self.chunks):
            try:
                chunk.validate()
            except ValidationError as e:
                raise ValidationError(f"chunk {i} ({chunk.id}): {e.message}") from e
            if chunk.id in seen:
                raise ValidationError(f"duplicate chunk ID: {chunk.id}")
            seen.add(chunk.id)

    def completed_chunks(self) -> int:
        return sum(1 for c in self.chunks if c.status == Status.COMPLETED)

    def progress(self) -> float:
        """Fraction of chunks completed, between 0.0 and 1.0."""
        if not self.chunks:
            return 0.0
        return self.completed_chunks() / len(self.chunks)

    def progress_percent(self) -> int:
        # Truncates: 0.375 is 37%
        return int(self.progress() * 100)

    def total_minutes(self) -> int:
        return sum(c.duration for c in self.chunks)

    def completed_hours(self) -> float:
        return sum(c.duration for c in self.chunks if c.status == Status.COMPLETED) / 60.0

    def remaining_hours(self) -> float:
        minutes = sum(
            c.duration for c in self.chunks
            if c.status not in (Status.COMPLETED, Status.SKIPPED)
        )
        return minutes / 60.0

    def next_chunk(self) -> Optional[Chunk]:
        """First in-progress chunk, else first not-started chunk."""
        for chunk in self.chunks:
            if chunk.status == Status.IN_PROGRESS:
                return chunk
        for chunk in self.chunks:
            if chunk.status == Status.NOT_STARTED:
                return chunk
        return None

    def find_chunk(self, chunk_id: str) -> Optional[Chunk]:
        for chunk in self.chunks:
            if chunk.id == chunk_id:
                return chunk
        return None

    def copy(self) -> 'Plan':
        """Copy deep enough that chunk edits don't leak back."""
        return replace(
            self,
            tags=list(self.tags),
            chunks=[replace(c, objectives=list(c.objectives)) for c in self.chunks],
        )


@dataclass
class PlanRecord:
    """Plan metadata as returned by list queries (no chunks)."""
    id: str
    title: str
    status: Status
    total_hours: float
    tags: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_plan(cls, plan: Plan) -> 'PlanRecord':
        return cls(
            id=plan.id,
            title=plan.title,
            status=plan.status,
            total_hours=plan.total_hours,
            tags=list(plan.tags),
            created_at=plan.created_at,
            updated_at=plan.updated_at,
        )
