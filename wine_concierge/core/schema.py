"""Pydantic v2 models for catalog wines, ratings and enrichment jobs."""

from datetime import UTC, datetime
from typing import Annotated, Any
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

from wine_concierge.core.enums import EnrichmentStatus, WineType


def _utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(UTC)


class Wine(BaseModel):
    """
    A catalog item on a venue's wine list.

    Only the nullable descriptive fields (description, region, denomination,
    grape_varieties) are ever written by the enrichment pipeline.
    """

    id: UUID = Field(default_factory=uuid4)
    venue_id: UUID | None = None
    name: str
    wine_type: WineType
    price: float
    price_glass: float | None = None
    producer: str | None = None
    region: str | None = None
    denomination: str | None = None
    year: int | None = None
    grape_varieties: list[str] | None = None
    description: str | None = None
    available: bool = True
    recommended: bool = False
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class WineRating(BaseModel):
    """A professional or platform rating attributed to a wine."""

    id: UUID = Field(default_factory=uuid4)
    wine_id: UUID
    guide_id: str
    guide_name: str
    # Guides use heterogeneous scales ("95/100", "Tre Bicchieri", ...)
    score: str
    confidence: Annotated[float, Field(ge=0.0, le=1.0)]
    year: int | None = None
    source_url: str | None = None
    created_at: datetime = Field(default_factory=_utc_now)


class EnrichmentJob(BaseModel):
    """One durable record of a single attempt to enrich one wine."""

    id: UUID = Field(default_factory=uuid4)
    wine_id: UUID
    status: EnrichmentStatus = EnrichmentStatus.PROCESSING
    error_message: str | None = None
    created_at: datetime = Field(default_factory=_utc_now)
    completed_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        """Check if the job has reached completed or failed."""
        return self.status != EnrichmentStatus.PROCESSING


class WineWithRatings(BaseModel):
    """A wine together with the ratings attached to it."""

    wine: Wine
    ratings: list[WineRating] = Field(default_factory=list)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class InferredRating(BaseModel):
    """A rating as proposed by the language model, before filtering."""

    guide_id: str
    guide_name: str = ""
    score: str
    confidence: float
    year: int | None = None

    @field_validator("score", mode="before")
    @classmethod
    def _coerce_score(cls, value: Any) -> Any:
        # Models frequently answer 95 instead of "95/100"
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("guide_id", mode="before")
    @classmethod
    def _normalize_guide_id(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("year", mode="before")
    @classmethod
    def _blank_year(cls, value: Any) -> Any:
        return _blank_to_none(value)


class EnrichmentPayload(BaseModel):
    """Structured reply expected from the language model."""

    ratings: list[InferredRating] = Field(default_factory=list)
    region: str | None = None
    denomination: str | None = None
    grape_varieties: list[str] | None = None
    tasting_notes: str | None = None
    suggested_pairings: list[str] = Field(default_factory=list)

    @field_validator("ratings", "suggested_pairings", mode="before")
    @classmethod
    def _null_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("region", "denomination", "tasting_notes", mode="before")
    @classmethod
    def _blank_string(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("grape_varieties", mode="before")
    @classmethod
    def _grape_list(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [value] if value.strip() else None
        if isinstance(value, list):
            cleaned = [v.strip() for v in value if isinstance(v, str) and v.strip()]
            return cleaned or None
        return value
