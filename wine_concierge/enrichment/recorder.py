"""Durable lifecycle records for enrichment attempts."""

import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.orm import Session

from wine_concierge.core.enums import EnrichmentStatus
from wine_concierge.core.schema import EnrichmentJob
from wine_concierge.db.repositories import EnrichmentJobRepository
from wine_concierge.enrichment.errors import JobTransitionError

logger = logging.getLogger(__name__)

MAX_ERROR_MESSAGE_LENGTH = 1000


class JobRecorder:
    """
    Creates and transitions enrichment job rows.

    Each call commits on its own so a job is visible to pollers while it is
    still processing. A job moves to completed or failed exactly once.
    """

    def __init__(self, session: Session):
        self.session = session
        self.repo = EnrichmentJobRepository(session)

    def start(self, wine_id: UUID | str) -> EnrichmentJob:
        """
        Persist a new job in the processing state.

        Raises:
            SQLAlchemyError: If the row cannot be written.
        """
        job = EnrichmentJob(wine_id=UUID(str(wine_id)), status=EnrichmentStatus.PROCESSING)
        try:
            created = self.repo.create(job)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        logger.info(f"Enrichment job {created.id} started for wine {wine_id}")
        return created

    def complete(self, job: EnrichmentJob) -> EnrichmentJob:
        """Mark a processing job as completed."""
        return self._finish(job, EnrichmentStatus.COMPLETED, None)

    def fail(self, job: EnrichmentJob, message: str) -> EnrichmentJob:
        """Mark a processing job as failed with an error message."""
        return self._finish(job, EnrichmentStatus.FAILED, message[:MAX_ERROR_MESSAGE_LENGTH])

    def _finish(
        self,
        job: EnrichmentJob,
        status: EnrichmentStatus,
        error_message: str | None,
    ) -> EnrichmentJob:
        current = self.repo.get_by_id(job.id)
        if current is None:
            raise JobTransitionError(f"Enrichment job {job.id} not found")
        if current.is_terminal:
            raise JobTransitionError(
                f"Enrichment job {job.id} is already {current.status.value}"
            )

        try:
            updated = self.repo.update_status(
                job.id,
                status,
                error_message=error_message,
                completed_at=datetime.now(UTC),
            )
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(f"Enrichment job {job.id} {status.value}")
        return updated
