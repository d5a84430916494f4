"""Non-destructive fill of missing wine fields from inferred data."""

from typing import Any

from wine_concierge.core.schema import EnrichmentPayload, Wine


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def compute_field_updates(wine: Wine, payload: EnrichmentPayload) -> dict[str, Any]:
    """
    Work out which wine fields the inferred data may fill.

    A field is included only when the wine's current value is empty and the
    inferred value is not. Populated fields are never overwritten.

    Args:
        wine: The wine as it was before enrichment.
        payload: The parsed model reply.

    Returns:
        Mapping of wine field name to new value; empty when nothing to write.
    """
    candidates = {
        "description": (wine.description, payload.tasting_notes),
        "region": (wine.region, payload.region),
        "denomination": (wine.denomination, payload.denomination),
        "grape_varieties": (wine.grape_varieties, payload.grape_varieties),
    }

    updates: dict[str, Any] = {}
    for field_name, (current, inferred) in candidates.items():
        if _is_empty(current) and not _is_empty(inferred):
            updates[field_name] = inferred.strip() if isinstance(inferred, str) else list(inferred)
    return updates
