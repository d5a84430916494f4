"""Exceptions raised inside the enrichment pipeline."""


class EnrichmentError(Exception):
    """Base class for enrichment pipeline errors."""


class ParseError(EnrichmentError):
    """The model replied but no valid enrichment payload could be extracted."""


class JobTransitionError(EnrichmentError):
    """An enrichment job was moved out of a terminal status."""


class EnrichmentInProgressError(EnrichmentError):
    """Another enrichment for the same wine is already running."""

    def __init__(self, wine_id: str):
        super().__init__(f"Enrichment already in progress for wine {wine_id}")
        self.wine_id = wine_id
