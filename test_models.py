"""Tests for the plan and session models."""

from datetime import datetime, timedelta

import pytest

from conftest import BASE_TIME, make_plan, make_session
from studytrack.models.plan import Chunk, Status, next_chunk_status
from studytrack.utils.exceptions import ValidationError


def test_status_parse():
    assert Status.parse(" Completed ") == Status.COMPLETED
    assert str(Status.IN_PROGRESS) == "in-progress"
    with pytest.raises(ValidationError) as exc:
        Status.parse("finished")
    assert exc.value.error_code == "INVALID_STATUS"


def test_chunk_status_cycle():
    status = Status.NOT_STARTED
    seen = []
    for _ in range(4):
        status = next_chunk_status(status)
        seen.append(status)
    assert seen == [Status.IN_PROGRESS, Status.COMPLETED, Status.SKIPPED, Status.NOT_STARTED]
    assert next_chunk_status(Status.ARCHIVED) == Status.NOT_STARTED


def test_progress_and_hours():
    plan = make_plan(chunk_statuses=[Status.COMPLETED, Status.SKIPPED, Status.IN_PROGRESS, Status.NOT_STARTED])
    assert plan.progress() == 0.25
    assert plan.progress_percent() == 25
    assert plan.total_minutes() == 240
    assert plan.completed_hours() == 1.0
    assert plan.remaining_hours() == 2.0


def test_empty_plan_progress():
    plan = make_plan()
    assert plan.progress() == 0.0
    assert plan.remaining_hours() == 0.0
    assert plan.next_chunk() is None


def test_next_chunk_prefers_in_progress():
    plan = make_plan(chunk_statuses=[Status.COMPLETED, Status.NOT_STARTED, Status.IN_PROGRESS])
    assert plan.next_chunk().id == "3"

    plan.chunks[2].status = Status.COMPLETED
    assert plan.next_chunk().id == "2"


def test_plan_validate_duplicate_chunk():
    plan = make_plan(chunk_statuses=[Status.NOT_STARTED, Status.NOT_STARTED])
    plan.chunks[1].id = "1"
    with pytest.raises(ValidationError, match="duplicate chunk ID: 1"):
        plan.validate()


def test_plan_validate_reports_chunk_index():
    plan = make_plan(chunk_statuses=[Status.NOT_STARTED])
    plan.chunks.append(Chunk(id="x", title="", duration=30))
    with pytest.raises(ValidationError, match=r"chunk 1 \(x\): chunk title cannot be empty"):
        plan.validate()


def test_plan_copy_is_independent():
    plan = make_plan(chunk_statuses=[Status.NOT_STARTED])
    plan.tags = ["go"]
    clone = plan.copy()
    clone.tags.append("extra")
    clone.chunks[0].status = Status.COMPLETED

    assert plan.tags == ["go"]
    assert plan.chunks[0].status == Status.NOT_STARTED
    assert plan.find_chunk("1") is plan.chunks[0]
    assert plan.find_chunk("9") is None


def test_session_complete():
    session = make_session(duration=0)
    assert session.is_active()

    session.complete(BASE_TIME + timedelta(minutes=75))
    assert not session.is_active()
    assert session.duration == 75
    assert session.elapsed_time() == "1h 15m"

    with pytest.raises(ValidationError, match="already complete"):
        session.complete(BASE_TIME + timedelta(hours=2))


def test_session_complete_before_start():
    session = make_session(duration=0)
    with pytest.raises(ValidationError, match="before start time"):
        session.complete(BASE_TIME - timedelta(minutes=1))
    assert session.is_active()


def test_active_session_elapsed():
    session = make_session(duration=0)
    assert session.elapsed_minutes(BASE_TIME + timedelta(minutes=45)) == 45
    assert session.elapsed_time(BASE_TIME + timedelta(minutes=45)) == "45m"
    assert session.elapsed_minutes(BASE_TIME - timedelta(minutes=5)) == 0


def test_add_notes():
    session = make_session()
    session.add_notes("Read chapter 3")
    session.add_notes("Did exercises")
    assert session.notes == "Read chapter 3\nDid exercises"


def test_session_validate():
    session = make_session()
    session.end_time = session.start_time
    with pytest.raises(ValidationError, match="cannot equal start time"):
        session.validate()

    session.end_time = datetime(2024, 1, 1)
    with pytest.raises(ValidationError, match="before start time"):
        session.validate()
