"""Tests for the non-destructive field merge."""

import pytest

from wine_concierge.core.enums import WineType
from wine_concierge.core.schema import EnrichmentPayload, Wine
from wine_concierge.enrichment.merger import compute_field_updates


@pytest.fixture
def wine() -> Wine:
    return Wine(name="Brunello di Montalcino", wine_type=WineType.RED, price=60.0)


class TestComputeFieldUpdates:
    """Tests for compute_field_updates."""

    def test_fills_empty_fields(self, wine: Wine) -> None:
        payload = EnrichmentPayload(
            region="Toscana",
            denomination="Brunello di Montalcino DOCG",
            grape_varieties=["Sangiovese"],
            tasting_notes="Ciliegia, cuoio, tabacco.",
        )

        updates = compute_field_updates(wine, payload)

        assert updates == {
            "description": "Ciliegia, cuoio, tabacco.",
            "region": "Toscana",
            "denomination": "Brunello di Montalcino DOCG",
            "grape_varieties": ["Sangiovese"],
        }

    def test_never_overwrites(self, wine: Wine) -> None:
        """A wine with a region keeps it; its empty denomination is filled."""
        wine = wine.model_copy(update={"region": "Toscana", "description": "House notes"})
        payload = EnrichmentPayload(
            region="Tuscany",
            denomination="Brunello di Montalcino DOCG",
            tasting_notes="Model notes",
        )

        updates = compute_field_updates(wine, payload)

        assert updates == {"denomination": "Brunello di Montalcino DOCG"}

    def test_blank_current_value_is_empty(self, wine: Wine) -> None:
        wine = wine.model_copy(update={"region": "   ", "grape_varieties": []})
        payload = EnrichmentPayload(region="Toscana", grape_varieties=["Sangiovese"])

        updates = compute_field_updates(wine, payload)

        assert updates == {"region": "Toscana", "grape_varieties": ["Sangiovese"]}

    def test_empty_inferred_values_ignored(self, wine: Wine) -> None:
        payload = EnrichmentPayload(region=None, grape_varieties=None, tasting_notes=None)
        assert compute_field_updates(wine, payload) == {}

    def test_values_stripped(self, wine: Wine) -> None:
        payload = EnrichmentPayload(region="  Toscana  ")
        assert compute_field_updates(wine, payload) == {"region": "Toscana"}

    def test_grape_list_is_copied(self, wine: Wine) -> None:
        payload = EnrichmentPayload(grape_varieties=["Sangiovese"])
        updates = compute_field_updates(wine, payload)

        updates["grape_varieties"].append("Merlot")
        assert payload.grape_varieties == ["Sangiovese"]

    def test_fully_populated_wine(self, wine: Wine) -> None:
        wine = wine.model_copy(
            update={
                "region": "Toscana",
                "denomination": "Brunello di Montalcino DOCG",
                "grape_varieties": ["Sangiovese"],
                "description": "Notes",
            }
        )
        payload = EnrichmentPayload(
            region="X", denomination="Y", grape_varieties=["Z"], tasting_notes="W"
        )

        assert compute_field_updates(wine, payload) == {}
