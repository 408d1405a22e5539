"""
Plan and session services.

The dashboard and the stats service only depend on the PlanService and
SessionService protocols. The in-memory implementations below back the
CLI and the tests; they can be seeded from a YAML fixture.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from threading import Lock
from typing import Dict, List, Optional, Protocol, Tuple, Union

import yaml

from studytrack.models.plan import Chunk, Plan, PlanRecord, Status
from studytrack.models.session import Session
from studytrack.utils.exceptions import NotFoundError, ServiceError, ValidationError
from studytrack.utils.logger import get_logger
from studytrack.utils.validators import CreatePlanRequest

logger = get_logger("store")


@dataclass
class PlanFilter:
    """Optional criteria for PlanService.list."""
    status: Optional[Status] = None
    tag: Optional[str] = None

    def matches(self, plan: Plan) -> bool:
        if self.status is not None and plan.status != self.status:
            return False
        if self.tag and self.tag not in plan.tags:
            return False
        return True


class PlanService(Protocol):
    """Plan persistence used by the dashboard and statistics."""

    def get(self, plan_id: str) -> Plan: ...

    def list(self, filter: Optional[PlanFilter] = None) -> List[PlanRecord]: ...

    def create(self, request: CreatePlanRequest) -> Plan: ...

    def update(self, plan: Plan) -> None: ...

    def delete(self, plan_id: str) -> None: ...

    def update_chunk_status(self, plan_id: str, chunk_id: str, status: Status) -> None: ...


class SessionService(Protocol):
    """Read access to recorded study sessions."""

    def list(self, plan_id: str, limit: int = 0) -> List[Session]: ...

    def list_all(self) -> List[Session]: ...


def slugify(text: str) -> str:
    slug = re.sub(r'[^a-z0-9]+', '-', text.lower()).strip('-')
    return slug or 'plan'


class InMemoryPlanService:
    """Thread-safe plan store; returns copies so callers never alias stored plans."""

    def __init__(self, plans: Optional[List[Plan]] = None):
        self._plans: Dict[str, Plan] = {}
        self._lock = Lock()
        for plan in plans or []:
            self._plans[plan.id] = plan.copy()

    def get(self, plan_id: str) -> Plan:
        with self._lock:
            plan = self._plans.get(plan_id)
            if plan is None:
                raise NotFoundError(f"plan not found: {plan_id}", error_code="PLAN_NOT_FOUND")
            return plan.copy()

    def list(self, filter: Optional[PlanFilter] = None) -> List[PlanRecord]:
        with self._lock:
            return [
                PlanRecord.from_plan(plan)
                for plan in self._plans.values()
                if filter is None or filter.matches(plan)
            ]

    def create(self, request: CreatePlanRequest) -> Plan:
        plan_id = slugify(request.topic)
        now = datetime.now()
        plan = Plan(
            id=plan_id,
            title=request.topic,
            total_hours=request.total_hours,
            tags=[request.level] if request.level else [],
            created_at=now,
            updated_at=now,
        )

        with self._lock:
            if plan_id in self._plans:
                raise ServiceError(f"plan already exists: {plan_id}", error_code="PLAN_EXISTS")
            self._plans[plan_id] = plan

        logger.info("Plan created", plan_id=plan_id, hours=plan.total_hours)
        return plan.copy()

    def update(self, plan: Plan) -> None:
        try:
            plan.validate()
        except ValidationError as e:
            raise ServiceError(f"invalid plan: {e.message}", error_code="PLAN_INVALID") from e

        with self._lock:
            if plan.id not in self._plans:
                raise NotFoundError(f"plan not found: {plan.id}", error_code="PLAN_NOT_FOUND")
            stored = plan.copy()
            stored.updated_at = max(datetime.now(stored.created_at.tzinfo), stored.created_at)
            self._plans[plan.id] = stored

        logger.info("Plan updated", plan_id=plan.id)

    def delete(self, plan_id: str) -> None:
        with self._lock:
            if plan_id not in self._plans:
                raise NotFoundError(f"plan not found: {plan_id}", error_code="PLAN_NOT_FOUND")
            del self._plans[plan_id]

        logger.info("Plan deleted", plan_id=plan_id)

    def update_chunk_status(self, plan_id: str, chunk_id: str, status: Status) -> None:
        status = Status.parse(status)
        with self._lock:
            plan = self._plans.get(plan_id)
            if plan is None:
                raise NotFoundError(f"plan not found: {plan_id}", error_code="PLAN_NOT_FOUND")
            chunk = plan.find_chunk(chunk_id)
            if chunk is None:
                raise NotFoundError(f"chunk not found: {chunk_id}", error_code="CHUNK_NOT_FOUND")
            chunk.status = status
            plan.updated_at = max(datetime.now(plan.created_at.tzinfo), plan.created_at)

        logger.info("Chunk status changed", plan_id=plan_id, chunk_id=chunk_id, status=str(status))


class InMemorySessionService:
    """Session store; listings are newest first."""

    def __init__(self, sessions: Optional[List[Session]] = None):
        self._sessions: List[Session] = list(sessions or [])
        self._lock = Lock()

    def add(self, session: Session):
        session.validate()
        with self._lock:
            self._sessions.append(session)

    def list(self, plan_id: str, limit: int = 0) -> List[Session]:
        if not plan_id:
            raise ServiceError("plan ID cannot be empty", error_code="PLAN_ID_REQUIRED")
        with self._lock:
            sessions = [s for s in self._sessions if s.plan_id == plan_id]
        sessions.sort(key=lambda s: s.start_time, reverse=True)
        if limit > 0:
            sessions = sessions[:limit]
        return sessions

    def list_all(self) -> List[Session]:
        with self._lock:
            sessions = list(self._sessions)
        sessions.sort(key=lambda s: s.start_time, reverse=True)
        return sessions


# ============================================================================
# YAML FIXTURES
# ============================================================================

def _parse_time(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError as e:
        raise ValidationError(f"invalid timestamp: {value}") from e


def _chunk_from_dict(data: Dict) -> Chunk:
    return Chunk(
        id=str(data['id']),
        title=data['title'],
        duration=int(data.get('duration', 60)),
        status=Status.parse(data.get('status', Status.NOT_STARTED)),
        objectives=list(data.get('objectives') or []),
        deliverable=data.get('deliverable') or '',
    )


def _plan_from_dict(data: Dict) -> Plan:
    created = _parse_time(data.get('created_at')) or datetime.now()
    plan = Plan(
        id=str(data['id']),
        title=data['title'],
        total_hours=float(data['total_hours']),
        status=Status.parse(data.get('status', Status.NOT_STARTED)),
        tags=list(data.get('tags') or []),
        chunks=[_chunk_from_dict(c) for c in data.get('chunks') or []],
        created_at=created,
        updated_at=_parse_time(data.get('updated_at')) or created,
    )
    plan.validate()
    return plan


def _session_from_dict(data: Dict) -> Session:
    session = Session(
        id=str(data['id']),
        plan_id=str(data['plan_id']),
        start_time=_parse_time(data['start_time']),
        end_time=_parse_time(data.get('end_time')),
        duration=int(data.get('duration', 0)),
        notes=data.get('notes') or '',
        chunk_id=data.get('chunk_id'),
        created_at=_parse_time(data.get('created_at')),
    )
    if session.end_time is not None and 'duration' not in data:
        session.duration = session.calculate_duration()
    elif session.end_time is None and session.duration > 0:
        session.end_time = session.start_time + timedelta(minutes=session.duration)
    session.validate()
    return session


def load_fixture(path: Union[str, Path]) -> Tuple[InMemoryPlanService, InMemorySessionService]:
    """
    Seed in-memory services from a YAML document with `plans` and
    `sessions` lists.

    Raises:
        ServiceError: If the file can't be read or holds invalid records
    """
    path = Path(path)
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ServiceError(f"failed to load data file {path}: {e}", error_code="DATA_LOAD_FAILED") from e

    if not isinstance(data, dict):
        raise ServiceError(f"data file root must be a mapping: {path}", error_code="DATA_LOAD_FAILED")

    try:
        plans = [_plan_from_dict(p) for p in data.get('plans') or []]
        sessions = [_session_from_dict(s) for s in data.get('sessions') or []]
    except (KeyError, TypeError, ValueError, ValidationError) as e:
        raise ServiceError(f"invalid record in {path}: {e}", error_code="DATA_INVALID") from e

    logger.info("Fixture loaded", path=str(path), plans=len(plans), sessions=len(sessions))
    return InMemoryPlanService(plans), InMemorySessionService(sessions)
