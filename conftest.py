"""Shared fixtures and factories for the StudyTrack tests."""

from datetime import datetime, timedelta
from typing import List, Optional

import pytest

from studytrack.models.plan import Chunk, Plan, Status
from studytrack.models.session import Session
from studytrack.services.store import InMemoryPlanService, InMemorySessionService
from studytrack.tui.messages import BatchMsg

BASE_TIME = datetime(2024, 3, 4, 10, 0)


def make_session(session_id: str = "s1", plan_id: str = "plan-1", start: Optional[datetime] = None,
                 duration: int = 60, notes: str = "") -> Session:
    start = start or BASE_TIME
    return Session(
        id=session_id,
        plan_id=plan_id,
        start_time=start,
        end_time=start + timedelta(minutes=duration) if duration > 0 else None,
        duration=duration,
        notes=notes,
    )


def make_plan(plan_id: str = "plan-1", title: str = "Test Plan", total_hours: float = 10.0,
              status: Status = Status.IN_PROGRESS, chunk_statuses: Optional[List[Status]] = None) -> Plan:
    chunk_statuses = chunk_statuses or []
    return Plan(
        id=plan_id,
        title=title,
        total_hours=total_hours,
        status=status,
        chunks=[
            Chunk(id=str(i + 1), title=f"Chunk {i + 1}", duration=60, status=s)
            for i, s in enumerate(chunk_statuses)
        ],
        created_at=BASE_TIME - timedelta(days=30),
        updated_at=BASE_TIME - timedelta(days=30),
    )


def run_cmd(cmd) -> list:
    """Execute a command synchronously; batches are flattened, None dropped."""
    if cmd is None:
        return []
    msg = cmd()
    if msg is None:
        return []
    if isinstance(msg, BatchMsg):
        msgs = []
        for sub in msg.cmds:
            msgs.extend(run_cmd(sub))
        return msgs
    return [msg]


@pytest.fixture
def plans():
    return [
        make_plan("go", "Go Concurrency", 12, Status.IN_PROGRESS,
                  [Status.COMPLETED, Status.COMPLETED, Status.IN_PROGRESS, Status.NOT_STARTED]),
        make_plan("sql", "SQL Basics", 6, Status.COMPLETED, [Status.COMPLETED, Status.COMPLETED]),
        make_plan("math", "Linear Algebra", 20, Status.NOT_STARTED),
    ]


@pytest.fixture
def sessions():
    return [
        make_session("s1", "sql", datetime(2024, 3, 1, 19, 0), 60, "Finished the SELECT exercises"),
        make_session("s2", "go", datetime(2024, 3, 2, 8, 0), 90),
        make_session("s3", "go", datetime(2024, 3, 3, 8, 15), 60, "Buffered channels"),
        make_session("s4", "go", datetime(2024, 3, 3, 21, 0), 30),
    ]


@pytest.fixture
def plan_service(plans):
    return InMemoryPlanService(plans)


@pytest.fixture
def session_service(sessions):
    return InMemorySessionService(sessions)
