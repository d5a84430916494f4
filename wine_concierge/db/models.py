"""SQLAlchemy ORM models for the Wine Concierge database."""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(UTC)


def _generate_uuid() -> str:
    """Generate a UUID string."""
    return str(uuid4())


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class WineDB(Base):
    """
    Database model for catalog wines.

    Wines are owned by a venue and created by catalog management.
    The enrichment pipeline only fills in the nullable descriptive columns.
    """

    __tablename__ = "wines"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_generate_uuid)
    venue_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    wine_type: Mapped[str] = mapped_column(String(20), nullable=False)  # red/white/rose/sparkling/dessert
    price: Mapped[float] = mapped_column(Float, nullable=False)
    price_glass: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Descriptive fields (nullable, filled by enrichment when missing)
    producer: Mapped[str | None] = mapped_column(String(255), nullable=True)
    region: Mapped[str | None] = mapped_column(String(100), nullable=True)
    denomination: Mapped[str | None] = mapped_column(String(100), nullable=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    grape_varieties_json: Mapped[str | None] = mapped_column(Text, nullable=True)  # JSON array
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    available: Mapped[bool] = mapped_column(Boolean, default=True)
    recommended: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now, onupdate=_utc_now)

    def __repr__(self) -> str:
        return f"<WineDB(id={self.id}, name='{self.name}', year={self.year})>"


class WineRatingDB(Base):
    """
    Database model for guide ratings attributed to a wine.

    Created only by the enrichment pipeline; deleted in bulk per wine on refresh.
    """

    __tablename__ = "wine_ratings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_generate_uuid)
    wine_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("wines.id", ondelete="CASCADE"), nullable=False, index=True
    )
    guide_id: Mapped[str] = mapped_column(String(50), nullable=False)
    guide_name: Mapped[str] = mapped_column(String(100), nullable=False)
    score: Mapped[str] = mapped_column(String(100), nullable=False)
    confidence: Mapped[float] = mapped_column(Float, nullable=False)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    source_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    def __repr__(self) -> str:
        return f"<WineRatingDB(id={self.id}, guide='{self.guide_id}', score='{self.score}')>"


class EnrichmentJobDB(Base):
    """
    Database model for enrichment jobs.

    One row per enrichment attempt. Status moves from processing to
    completed or failed exactly once.
    """

    __tablename__ = "enrichment_jobs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_generate_uuid)
    wine_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("wines.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(20), default="processing")  # processing/completed/failed
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now, index=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<EnrichmentJobDB(id={self.id}, wine_id={self.wine_id}, status='{self.status}')>"
