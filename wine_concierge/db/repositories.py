"""Repository classes for database operations."""

import json
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from wine_concierge.core.enums import EnrichmentStatus, WineType
from wine_concierge.core.schema import EnrichmentJob, Wine, WineRating
from wine_concierge.db.models import EnrichmentJobDB, WineDB, WineRatingDB

# Columns the enrichment pipeline is allowed to write on a wine
MERGEABLE_FIELDS = frozenset({"description", "region", "denomination", "grape_varieties"})


def _utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(UTC)


def _as_utc(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo on round-trip; stored values are always UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class WineRepository:
    """Repository for Wine CRUD operations."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, wine: Wine) -> Wine:
        """
        Create a new wine in the database.

        Args:
            wine: The Wine domain model to create.

        Returns:
            The created Wine.
        """
        db_wine = WineDB(
            id=str(wine.id),
            venue_id=str(wine.venue_id) if wine.venue_id else None,
            name=wine.name,
            wine_type=wine.wine_type.value,
            price=wine.price,
            price_glass=wine.price_glass,
            producer=wine.producer,
            region=wine.region,
            denomination=wine.denomination,
            year=wine.year,
            grape_varieties_json=(
                json.dumps(wine.grape_varieties) if wine.grape_varieties is not None else None
            ),
            description=wine.description,
            available=wine.available,
            recommended=wine.recommended,
            created_at=wine.created_at,
            updated_at=wine.updated_at,
        )
        self.session.add(db_wine)
        self.session.flush()
        return self._to_domain(db_wine)

    def get_by_id(self, wine_id: UUID | str) -> Wine | None:
        """
        Get a wine by ID.

        Args:
            wine_id: The UUID of the wine.

        Returns:
            The Wine if found, None otherwise.
        """
        db_wine = self._get_db(wine_id)
        return self._to_domain(db_wine) if db_wine else None

    def list_all(self, venue_id: UUID | str | None = None) -> list[Wine]:
        """
        List wines, optionally restricted to one venue.

        Args:
            venue_id: Only return wines owned by this venue.

        Returns:
            List of Wine domain models ordered by name.
        """
        stmt = select(WineDB).order_by(WineDB.name)
        if venue_id is not None:
            stmt = stmt.where(WineDB.venue_id == str(venue_id))
        result = self.session.execute(stmt).scalars().all()
        return [self._to_domain(w) for w in result]

    def update_fields(self, wine_id: UUID | str, updates: dict[str, Any]) -> Wine:
        """
        Write enrichment updates onto a wine.

        Only the descriptive fields in MERGEABLE_FIELDS may be written here;
        name, price and wine type are owned by catalog management.

        Args:
            wine_id: The wine to update.
            updates: Mapping of field name to new value.

        Returns:
            The updated Wine.

        Raises:
            ValueError: If the wine does not exist or a field is not mergeable.
        """
        disallowed = set(updates) - MERGEABLE_FIELDS
        if disallowed:
            raise ValueError(f"Fields not writable by enrichment: {sorted(disallowed)}")

        db_wine = self._get_db(wine_id)
        if db_wine is None:
            raise ValueError(f"Wine with id {wine_id} not found")

        for field_name, value in updates.items():
            if field_name == "grape_varieties":
                db_wine.grape_varieties_json = json.dumps(value) if value is not None else None
            else:
                setattr(db_wine, field_name, value)
        db_wine.updated_at = _utc_now()

        self.session.flush()
        return self._to_domain(db_wine)

    def delete(self, wine_id: UUID | str) -> bool:
        """
        Delete a wine by ID.

        Returns:
            True if deleted, False if not found.
        """
        db_wine = self._get_db(wine_id)
        if db_wine is None:
            return False
        self.session.delete(db_wine)
        self.session.flush()
        return True

    def _get_db(self, wine_id: UUID | str) -> WineDB | None:
        stmt = select(WineDB).where(WineDB.id == str(wine_id))
        return self.session.execute(stmt).scalar_one_or_none()

    def _to_domain(self, db_wine: WineDB) -> Wine:
        """Convert database model to domain model."""
        return Wine(
            id=UUID(db_wine.id),
            venue_id=UUID(db_wine.venue_id) if db_wine.venue_id else None,
            name=db_wine.name,
            wine_type=WineType(db_wine.wine_type),
            price=db_wine.price,
            price_glass=db_wine.price_glass,
            producer=db_wine.producer,
            region=db_wine.region,
            denomination=db_wine.denomination,
            year=db_wine.year,
            grape_varieties=(
                json.loads(db_wine.grape_varieties_json)
                if db_wine.grape_varieties_json is not None
                else None
            ),
            description=db_wine.description,
            available=db_wine.available,
            recommended=db_wine.recommended,
            created_at=_as_utc(db_wine.created_at),
            updated_at=_as_utc(db_wine.updated_at),
        )


class WineRatingRepository:
    """Repository for WineRating operations."""

    def __init__(self, session: Session):
        self.session = session

    def create_many(self, ratings: list[WineRating]) -> list[WineRating]:
        """
        Insert a batch of ratings.

        Args:
            ratings: WineRating domain models to insert.

        Returns:
            The created ratings, in input order.
        """
        db_ratings = [
            WineRatingDB(
                id=str(r.id),
                wine_id=str(r.wine_id),
                guide_id=r.guide_id,
                guide_name=r.guide_name,
                score=r.score,
                confidence=r.confidence,
                year=r.year,
                source_url=r.source_url,
                created_at=r.created_at,
            )
            for r in ratings
        ]
        self.session.add_all(db_ratings)
        self.session.flush()
        return [self._to_domain(r) for r in db_ratings]

    def list_for_wine(self, wine_id: UUID | str) -> list[WineRating]:
        """
        List ratings for a wine, highest confidence first.

        Args:
            wine_id: The wine ID.

        Returns:
            List of WineRating domain models.
        """
        stmt = (
            select(WineRatingDB)
            .where(WineRatingDB.wine_id == str(wine_id))
            .order_by(WineRatingDB.confidence.desc(), WineRatingDB.created_at)
        )
        result = self.session.execute(stmt).scalars().all()
        return [self._to_domain(r) for r in result]

    def delete_for_wine(self, wine_id: UUID | str) -> int:
        """
        Delete every rating attached to a wine.

        Args:
            wine_id: The wine ID.

        Returns:
            Number of ratings deleted.
        """
        stmt = delete(WineRatingDB).where(WineRatingDB.wine_id == str(wine_id))
        result = self.session.execute(stmt)
        self.session.flush()
        return result.rowcount or 0

    def _to_domain(self, db_rating: WineRatingDB) -> WineRating:
        """Convert database model to domain model."""
        return WineRating(
            id=UUID(db_rating.id),
            wine_id=UUID(db_rating.wine_id),
            guide_id=db_rating.guide_id,
            guide_name=db_rating.guide_name,
            score=db_rating.score,
            confidence=db_rating.confidence,
            year=db_rating.year,
            source_url=db_rating.source_url,
            created_at=_as_utc(db_rating.created_at),
        )


class EnrichmentJobRepository:
    """Repository for EnrichmentJob operations."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, job: EnrichmentJob) -> EnrichmentJob:
        """
        Create a new enrichment job.

        Args:
            job: The EnrichmentJob domain model to create.

        Returns:
            The created EnrichmentJob.
        """
        db_job = EnrichmentJobDB(
            id=str(job.id),
            wine_id=str(job.wine_id),
            status=job.status.value,
            error_message=job.error_message,
            created_at=job.created_at,
            completed_at=job.completed_at,
        )
        self.session.add(db_job)
        self.session.flush()
        return self._to_domain(db_job)

    def get_by_id(self, job_id: UUID | str) -> EnrichmentJob | None:
        """Get an enrichment job by ID."""
        stmt = select(EnrichmentJobDB).where(EnrichmentJobDB.id == str(job_id))
        db_job = self.session.execute(stmt).scalar_one_or_none()
        return self._to_domain(db_job) if db_job else None

    def update_status(
        self,
        job_id: UUID | str,
        status: EnrichmentStatus,
        error_message: str | None = None,
        completed_at: datetime | None = None,
    ) -> EnrichmentJob:
        """
        Update the status of a job.

        Args:
            job_id: The job ID.
            status: New status.
            error_message: Error text for failed jobs.
            completed_at: When the job reached its terminal status.

        Returns:
            The updated EnrichmentJob.

        Raises:
            ValueError: If the job does not exist.
        """
        stmt = select(EnrichmentJobDB).where(EnrichmentJobDB.id == str(job_id))
        db_job = self.session.execute(stmt).scalar_one_or_none()
        if db_job is None:
            raise ValueError(f"EnrichmentJob with id {job_id} not found")

        db_job.status = status.value
        db_job.error_message = error_message
        db_job.completed_at = completed_at

        self.session.flush()
        return self._to_domain(db_job)

    def get_latest_for_wine(self, wine_id: UUID | str) -> EnrichmentJob | None:
        """
        Get the most recent job for a wine.

        Args:
            wine_id: The wine ID.

        Returns:
            The newest EnrichmentJob, or None if the wine was never enriched.
        """
        stmt = (
            select(EnrichmentJobDB)
            .where(EnrichmentJobDB.wine_id == str(wine_id))
            .order_by(EnrichmentJobDB.created_at.desc())
            .limit(1)
        )
        db_job = self.session.execute(stmt).scalar_one_or_none()
        return self._to_domain(db_job) if db_job else None

    def list_for_wine(self, wine_id: UUID | str) -> list[EnrichmentJob]:
        """List all jobs for a wine, newest first."""
        stmt = (
            select(EnrichmentJobDB)
            .where(EnrichmentJobDB.wine_id == str(wine_id))
            .order_by(EnrichmentJobDB.created_at.desc())
        )
        result = self.session.execute(stmt).scalars().all()
        return [self._to_domain(j) for j in result]

    def _to_domain(self, db_job: EnrichmentJobDB) -> EnrichmentJob:
        """Convert database model to domain model."""
        return EnrichmentJob(
            id=UUID(db_job.id),
            wine_id=UUID(db_job.wine_id),
            status=EnrichmentStatus(db_job.status),
            error_message=db_job.error_message,
            created_at=_as_utc(db_job.created_at),
            completed_at=_as_utc(db_job.completed_at),
        )
