"""Extraction of the enrichment payload from a free-form model reply."""

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from wine_concierge.core.schema import EnrichmentPayload, InferredRating
from wine_concierge.enrichment.errors import ParseError

logger = logging.getLogger(__name__)

# Greedy: first "{" to last "}", which also strips markdown fences and prose
_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def extract_json_object(raw_text: str) -> str:
    """
    Find the brace-delimited span in a model reply.

    Raises:
        ParseError: If the reply contains no such span.
    """
    match = _JSON_OBJECT_RE.search(raw_text or "")
    if match is None:
        raise ParseError("No JSON found in response")
    return match.group(0)


def parse_enrichment_response(raw_text: str) -> EnrichmentPayload:
    """
    Decode a model reply into an EnrichmentPayload.

    Parse failures are final for the attempt; they are never retried. A
    malformed rating item or field is dropped with a warning and the rest of
    the reply is kept.

    Args:
        raw_text: The model's reply text.

    Returns:
        The validated payload.

    Raises:
        ParseError: If no JSON object can be found or decoded.
    """
    json_str = extract_json_object(raw_text)

    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to decode enrichment response: {e}")
        logger.debug(f"Raw enrichment response: {raw_text[:1000]}")
        raise ParseError(f"Invalid LLM response format: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("Invalid LLM response format: expected a JSON object")

    ratings = _parse_ratings(data.pop("ratings", None))

    try:
        payload = EnrichmentPayload.model_validate(data)
    except ValidationError as e:
        invalid = {err["loc"][0] for err in e.errors() if err["loc"]}
        logger.warning(f"Dropping invalid enrichment field(s) {sorted(invalid)}: {e}")
        payload = EnrichmentPayload.model_validate(
            {k: v for k, v in data.items() if k not in invalid}
        )

    payload.ratings = ratings
    return payload


def _parse_ratings(items: Any) -> list[InferredRating]:
    """Validate rating items one at a time, skipping the malformed ones."""
    if items is None:
        return []
    if not isinstance(items, list):
        logger.warning(f"Ignoring ratings that are not a list: {items!r}")
        return []

    ratings = []
    for item in items:
        try:
            ratings.append(InferredRating.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping invalid rating item {item!r}: {e.error_count()} error(s)")
    return ratings
