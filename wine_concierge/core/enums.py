"""Enums for wine catalog and enrichment fields."""

from enum import Enum


class WineType(str, Enum):
    """Wine category as listed on a venue's menu."""

    RED = "red"
    WHITE = "white"
    ROSE = "rose"
    SPARKLING = "sparkling"
    DESSERT = "dessert"


class EnrichmentStatus(str, Enum):
    """Status of a persisted enrichment job.

    A job is created already processing; there is no pending state.
    """

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class EnrichmentOutcome(str, Enum):
    """Outcome of a single enrich/refresh call as seen by the caller."""

    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"
    IN_PROGRESS = "in_progress"
