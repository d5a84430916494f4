"""Confidence and guide whitelist filtering for inferred ratings."""

from collections.abc import Iterable

from wine_concierge.core.schema import InferredRating


def filter_ratings(
    ratings: Iterable[InferredRating],
    min_confidence: float,
    whitelist: Iterable[str],
) -> list[InferredRating]:
    """
    Keep only ratings that are confident enough and from a recognized guide.

    A rating survives iff min_confidence <= confidence <= 1.0 and its guide_id
    is whitelisted. Order is preserved and duplicates are kept.

    Args:
        ratings: Ratings proposed by the model.
        min_confidence: Minimum acceptable confidence.
        whitelist: Identifiers of recognized guides.

    Returns:
        The ratings eligible for persistence (possibly empty).
    """
    allowed = set(whitelist)
    return [
        r
        for r in ratings
        if min_confidence <= r.confidence <= 1.0 and r.guide_id in allowed
    ]
