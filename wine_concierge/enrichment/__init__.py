"""
Wine Concierge Enrichment Pipeline
==================================

Fills in missing wine metadata and professional guide ratings using a
language model.

Pipeline Stages:
1. Record - Create an enrichment job in the processing state
2. Prompt - Describe the wine and list the attributes it is missing
3. Infer - Call the model with bounded exponential-backoff retries
4. Parse - Extract the JSON payload from the reply (never retried)
5. Filter - Drop low-confidence ratings and unrecognized guides
6. Persist - Save ratings, fill only the empty wine fields
7. Finish - Mark the job completed or failed
"""

from wine_concierge.enrichment.config import (
    EnrichmentConfig,
    GuideRegistry,
    RatingGuide,
    get_default_guides,
)
from wine_concierge.enrichment.errors import (
    EnrichmentError,
    EnrichmentInProgressError,
    JobTransitionError,
    ParseError,
)
from wine_concierge.enrichment.filters import filter_ratings
from wine_concierge.enrichment.locks import InFlightRegistry, get_in_flight_registry
from wine_concierge.enrichment.merger import compute_field_updates
from wine_concierge.enrichment.parser import parse_enrichment_response
from wine_concierge.enrichment.prompts import build_enrichment_prompt, missing_fields
from wine_concierge.enrichment.recorder import JobRecorder
from wine_concierge.enrichment.retry import RetryPolicy, call_with_retry
from wine_concierge.enrichment.service import (
    EnrichmentResult,
    EnrichmentService,
    get_enrichment_service,
)

__all__ = [
    # Config
    "EnrichmentConfig",
    "GuideRegistry",
    "RatingGuide",
    "get_default_guides",
    # Errors
    "EnrichmentError",
    "EnrichmentInProgressError",
    "JobTransitionError",
    "ParseError",
    # Stages
    "build_enrichment_prompt",
    "missing_fields",
    "RetryPolicy",
    "call_with_retry",
    "parse_enrichment_response",
    "filter_ratings",
    "compute_field_updates",
    "JobRecorder",
    "InFlightRegistry",
    "get_in_flight_registry",
    # Service
    "EnrichmentResult",
    "EnrichmentService",
    "get_enrichment_service",
]
