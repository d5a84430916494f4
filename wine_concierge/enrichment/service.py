"""Enrichment service: fills in missing wine metadata and guide ratings."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from wine_concierge.core.enums import EnrichmentOutcome
from wine_concierge.core.schema import (
    EnrichmentJob,
    EnrichmentPayload,
    InferredRating,
    Wine,
    WineRating,
    WineWithRatings,
)
from wine_concierge.db.repositories import (
    EnrichmentJobRepository,
    WineRatingRepository,
    WineRepository,
)
from wine_concierge.enrichment.config import (
    EnrichmentConfig,
    GuideRegistry,
    get_default_guides,
)
from wine_concierge.enrichment.errors import EnrichmentInProgressError
from wine_concierge.enrichment.filters import filter_ratings
from wine_concierge.enrichment.locks import InFlightRegistry, get_in_flight_registry
from wine_concierge.enrichment.merger import compute_field_updates
from wine_concierge.enrichment.parser import parse_enrichment_response
from wine_concierge.enrichment.prompts import build_enrichment_messages
from wine_concierge.enrichment.recorder import JobRecorder
from wine_concierge.enrichment.retry import RetryPolicy, call_with_retry
from wine_concierge.services.ai.client import LLMClient, create_llm_client_from_env

logger = logging.getLogger(__name__)


@dataclass
class EnrichmentResult:
    """
    Result of an enrich or refresh call.

    status is completed when every write succeeded, partial when the job
    completed but some writes were dropped (see write_errors), failed when
    the job could not be created or the model step failed, and in_progress
    when another enrichment of the same wine was already running.
    """

    status: EnrichmentOutcome
    wine: Wine
    ratings: list[WineRating] = field(default_factory=list)
    job_id: UUID | None = None
    error_message: str | None = None
    write_errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Check if the enrichment job completed."""
        return self.status in (EnrichmentOutcome.COMPLETED, EnrichmentOutcome.PARTIAL)

    @property
    def ratings_count(self) -> int:
        """Number of ratings persisted by this call."""
        return len(self.ratings)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "status": self.status.value,
            "wine_id": str(self.wine.id),
            "job_id": str(self.job_id) if self.job_id else None,
            "ratings_count": self.ratings_count,
            "error_message": self.error_message,
            "write_errors": list(self.write_errors),
        }


class EnrichmentService:
    """Service that enriches catalog wines with model-inferred data."""

    def __init__(
        self,
        session: Session,
        llm_client: LLMClient | None = None,
        config: EnrichmentConfig | None = None,
        guides: GuideRegistry | None = None,
        in_flight: InFlightRegistry | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the enrichment service.

        Args:
            session: SQLAlchemy database session.
            llm_client: Optional pre-configured client. If not provided,
                        one is created from environment variables on first use.
            config: Pipeline tunables (defaults to EnrichmentConfig.from_env()).
            guides: Recognized rating guides (defaults to the global registry).
            in_flight: Per-wine claim registry (defaults to the process-wide one).
            sleep: Sleep function used between retries.
        """
        self.session = session
        self.config = config or EnrichmentConfig.from_env()
        # Registries define __len__, so an empty one is falsy
        self.guides = guides if guides is not None else get_default_guides()
        self.in_flight = in_flight if in_flight is not None else get_in_flight_registry()

        self.wine_repo = WineRepository(session)
        self.rating_repo = WineRatingRepository(session)
        self.job_repo = EnrichmentJobRepository(session)
        self.recorder = JobRecorder(session)
        self.retry_policy = RetryPolicy(
            max_attempts=self.config.max_attempts,
            base_delay_ms=self.config.retry_base_delay_ms,
            sleep=sleep,
        )

        self._llm_client = llm_client

    @property
    def llm_client(self) -> LLMClient:
        """Get or create the language model client from environment variables."""
        if self._llm_client is None:
            self._llm_client = create_llm_client_from_env()
        return self._llm_client

    def get_wine(self, wine_id: UUID | str) -> Wine | None:
        """Load a wine from the catalog."""
        return self.wine_repo.get_by_id(wine_id)

    def get_status(self, wine_id: UUID | str) -> EnrichmentJob | None:
        """Most recent enrichment job for a wine, or None."""
        return self.job_repo.get_latest_for_wine(wine_id)

    def get_wine_with_ratings(self, wine_id: UUID | str) -> WineWithRatings | None:
        """Load a wine together with its ratings, highest confidence first."""
        wine = self.wine_repo.get_by_id(wine_id)
        if wine is None:
            return None
        return WineWithRatings(wine=wine, ratings=self.rating_repo.list_for_wine(wine.id))

    def enrich(self, wine: Wine) -> EnrichmentResult:
        """
        Enrich a wine with inferred ratings and missing descriptive fields.

        Never raises: failures are recorded on the job and reflected in the
        returned result.

        Args:
            wine: The wine to enrich.

        Returns:
            EnrichmentResult with the ratings actually persisted.
        """
        try:
            with self.in_flight.claim(wine.id):
                return self._run(wine)
        except EnrichmentInProgressError as e:
            logger.warning(str(e))
            return EnrichmentResult(
                status=EnrichmentOutcome.IN_PROGRESS,
                wine=wine,
                error_message=str(e),
            )

    def refresh(self, wine: Wine) -> EnrichmentResult:
        """
        Delete a wine's existing ratings, then enrich it again.

        A failed deletion is recorded as a write error and does not stop the
        new enrichment.

        Args:
            wine: The wine to refresh.

        Returns:
            EnrichmentResult for the new enrichment.
        """
        try:
            with self.in_flight.claim(wine.id):
                delete_errors: list[str] = []
                try:
                    deleted = self.rating_repo.delete_for_wine(wine.id)
                    self.session.commit()
                    logger.info(f"Deleted {deleted} existing rating(s) for wine {wine.id}")
                except Exception as e:
                    self.session.rollback()
                    logger.exception(f"Failed to delete existing ratings for wine {wine.id}")
                    delete_errors.append(f"Failed to delete existing ratings: {e}")

                result = self._run(wine)
                if delete_errors:
                    result.write_errors = delete_errors + result.write_errors
                    if result.status == EnrichmentOutcome.COMPLETED:
                        result.status = EnrichmentOutcome.PARTIAL
                return result
        except EnrichmentInProgressError as e:
            logger.warning(str(e))
            return EnrichmentResult(
                status=EnrichmentOutcome.IN_PROGRESS,
                wine=wine,
                error_message=str(e),
            )

    def _run(self, wine: Wine) -> EnrichmentResult:
        try:
            job = self.recorder.start(wine.id)
        except Exception as e:
            logger.error(f"Failed to create enrichment job for wine {wine.id}: {e}")
            return EnrichmentResult(
                status=EnrichmentOutcome.FAILED,
                wine=wine,
                error_message=f"Failed to create enrichment job: {e}",
            )

        try:
            payload = self._infer(wine)
            valid_ratings = filter_ratings(
                payload.ratings,
                self.config.min_rating_confidence,
                self.guides.ids(),
            )
        except Exception as e:
            message = str(e) or e.__class__.__name__
            logger.error(f"Enrichment failed for wine {wine.id}: {message}")
            write_errors = []
            try:
                self.recorder.fail(job, message)
            except Exception as mark_error:
                logger.exception(f"Failed to mark enrichment job {job.id} as failed")
                write_errors.append(f"Failed to mark job failed: {mark_error}")
            return EnrichmentResult(
                status=EnrichmentOutcome.FAILED,
                wine=wine,
                job_id=job.id,
                error_message=message,
                write_errors=write_errors,
            )

        logger.info(
            f"Model proposed {len(payload.ratings)} rating(s) for wine {wine.id}, "
            f"{len(valid_ratings)} passed the confidence and guide filter"
        )

        write_errors: list[str] = []
        saved_ratings = self._save_ratings(wine, valid_ratings, write_errors)
        enriched_wine = self._apply_field_updates(wine, payload, write_errors)

        try:
            self.recorder.complete(job)
        except Exception as e:
            logger.exception(f"Failed to mark enrichment job {job.id} as completed")
            write_errors.append(f"Failed to mark job completed: {e}")

        return EnrichmentResult(
            status=EnrichmentOutcome.PARTIAL if write_errors else EnrichmentOutcome.COMPLETED,
            wine=enriched_wine,
            ratings=saved_ratings,
            job_id=job.id,
            write_errors=write_errors,
        )

    def _infer(self, wine: Wine) -> EnrichmentPayload:
        """Build the prompt, call the model through the retry policy and parse."""
        messages = build_enrichment_messages(wine, self.guides, self.config.notes_language)
        response = call_with_retry(self.llm_client, messages, self.retry_policy)
        logger.debug(
            f"Enrichment reply for wine {wine.id} from {response.model} "
            f"({response.input_tokens} in / {response.output_tokens} out tokens)"
        )
        return parse_enrichment_response(response.content)

    def _save_ratings(
        self,
        wine: Wine,
        ratings: list[InferredRating],
        write_errors: list[str],
    ) -> list[WineRating]:
        if not ratings:
            return []

        to_insert = []
        for r in ratings:
            guide = self.guides.get(r.guide_id)
            to_insert.append(
                WineRating(
                    wine_id=wine.id,
                    guide_id=r.guide_id,
                    guide_name=guide.name if guide else r.guide_name,
                    score=r.score,
                    confidence=r.confidence,
                    year=r.year,
                )
            )

        try:
            saved = self.rating_repo.create_many(to_insert)
            self.session.commit()
        except Exception as e:
            self.session.rollback()
            logger.exception(f"Failed to save {len(to_insert)} rating(s) for wine {wine.id}")
            write_errors.append(f"Failed to save ratings: {e}")
            return []
        return saved

    def _apply_field_updates(
        self,
        wine: Wine,
        payload: EnrichmentPayload,
        write_errors: list[str],
    ) -> Wine:
        updates = compute_field_updates(wine, payload)
        if not updates:
            return wine

        try:
            self.wine_repo.update_fields(wine.id, updates)
            self.session.commit()
        except Exception as e:
            self.session.rollback()
            logger.exception(f"Failed to update wine {wine.id} with enriched data")
            write_errors.append(f"Failed to update wine fields: {e}")
            return wine

        logger.info(f"Filled {sorted(updates)} on wine {wine.id}")
        return wine.model_copy(update=updates)


def get_enrichment_service(session: Session, **kwargs: Any) -> EnrichmentService:
    """Get an enrichment service instance."""
    return EnrichmentService(session=session, **kwargs)
