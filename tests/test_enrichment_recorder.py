"""Tests for enrichment job lifecycle recording."""

import tempfile
from pathlib import Path
from unittest.mock import patch
from uuid import uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from wine_concierge.core.enums import EnrichmentStatus
from wine_concierge.db.models import Base
from wine_concierge.db.repositories import EnrichmentJobRepository
from wine_concierge.enrichment.errors import JobTransitionError
from wine_concierge.enrichment.recorder import MAX_ERROR_MESSAGE_LENGTH, JobRecorder


@pytest.fixture
def temp_db_path():
    """Create a temporary database file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test_recorder.db"


@pytest.fixture
def session(temp_db_path):
    """Create a database session for testing."""
    engine = create_engine(f"sqlite:///{temp_db_path}", echo=False)
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine)()
    yield session
    session.close()
    engine.dispose()


class TestJobRecorder:
    """Tests for JobRecorder."""

    def test_start_creates_processing_job(self, session: Session) -> None:
        wine_id = uuid4()
        job = JobRecorder(session).start(wine_id)

        stored = EnrichmentJobRepository(session).get_by_id(job.id)
        assert stored.wine_id == wine_id
        assert stored.status == EnrichmentStatus.PROCESSING
        assert stored.completed_at is None

    def test_start_is_committed(self, session: Session, temp_db_path) -> None:
        """A started job is visible to other sessions while processing."""
        job = JobRecorder(session).start(uuid4())

        other_engine = create_engine(f"sqlite:///{temp_db_path}")
        with Session(other_engine) as other:
            assert EnrichmentJobRepository(other).get_by_id(job.id) is not None
        other_engine.dispose()

    def test_complete(self, session: Session) -> None:
        recorder = JobRecorder(session)
        job = recorder.start(uuid4())

        done = recorder.complete(job)

        assert done.status == EnrichmentStatus.COMPLETED
        assert done.error_message is None
        assert done.completed_at is not None

    def test_fail_records_message(self, session: Session) -> None:
        recorder = JobRecorder(session)
        job = recorder.start(uuid4())

        failed = recorder.fail(job, "No JSON found in response")

        assert failed.status == EnrichmentStatus.FAILED
        assert failed.error_message == "No JSON found in response"
        assert failed.completed_at is not None

    def test_fail_truncates_long_message(self, session: Session) -> None:
        recorder = JobRecorder(session)
        job = recorder.start(uuid4())

        failed = recorder.fail(job, "x" * 5000)

        assert len(failed.error_message) == MAX_ERROR_MESSAGE_LENGTH

    def test_terminal_job_cannot_transition(self, session: Session) -> None:
        recorder = JobRecorder(session)
        job = recorder.start(uuid4())
        recorder.complete(job)

        with pytest.raises(JobTransitionError):
            recorder.fail(job, "late failure")
        with pytest.raises(JobTransitionError):
            recorder.complete(job)

        stored = EnrichmentJobRepository(session).get_by_id(job.id)
        assert stored.status == EnrichmentStatus.COMPLETED

    def test_unknown_job(self, session: Session) -> None:
        recorder = JobRecorder(session)
        job = recorder.start(uuid4())
        ghost = job.model_copy(update={"id": uuid4()})

        with pytest.raises(JobTransitionError, match="not found"):
            recorder.complete(ghost)

    def test_start_failure_rolls_back(self, session: Session) -> None:
        recorder = JobRecorder(session)

        with patch.object(
            recorder.repo, "create", side_effect=OperationalError("INSERT", {}, Exception("locked"))
        ):
            with pytest.raises(OperationalError):
                recorder.start(uuid4())

        # Session is still usable
        assert recorder.start(uuid4()).status == EnrichmentStatus.PROCESSING
