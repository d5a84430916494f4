"""Tests for rating filtering."""

from wine_concierge.core.schema import InferredRating
from wine_concierge.enrichment.filters import filter_ratings

WHITELIST = {"gambero-rosso", "veronelli", "decanter"}


def _rating(guide_id: str, confidence: float, score: str = "90") -> InferredRating:
    return InferredRating(guide_id=guide_id, score=score, confidence=confidence)


class TestFilterRatings:
    """Tests for filter_ratings."""

    def test_confidence_and_whitelist(self) -> None:
        """Only the confident rating from a known guide survives."""
        ratings = [
            _rating("gambero-rosso", 0.9),
            _rating("unknown-guide", 0.95),
            _rating("veronelli", 0.2),
        ]

        kept = filter_ratings(ratings, 0.4, WHITELIST)

        assert [r.guide_id for r in kept] == ["gambero-rosso"]

    def test_threshold_is_inclusive(self) -> None:
        kept = filter_ratings([_rating("decanter", 0.4)], 0.4, WHITELIST)
        assert len(kept) == 1

    def test_confidence_above_one_dropped(self) -> None:
        assert filter_ratings([_rating("decanter", 1.5)], 0.4, WHITELIST) == []

    def test_order_and_duplicates_preserved(self) -> None:
        ratings = [
            _rating("veronelli", 0.5, "3 stelle"),
            _rating("decanter", 0.8, "95"),
            _rating("veronelli", 0.6, "Super Tre Stelle"),
        ]

        kept = filter_ratings(ratings, 0.4, WHITELIST)

        assert [r.score for r in kept] == ["3 stelle", "95", "Super Tre Stelle"]

    def test_empty_input(self) -> None:
        assert filter_ratings([], 0.4, WHITELIST) == []

    def test_empty_whitelist(self) -> None:
        assert filter_ratings([_rating("decanter", 0.9)], 0.4, set()) == []

    def test_zero_threshold_keeps_zero_confidence(self) -> None:
        assert len(filter_ratings([_rating("decanter", 0.0)], 0.0, WHITELIST)) == 1
