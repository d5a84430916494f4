"""In-process registry of wines currently being enriched."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from uuid import UUID

from wine_concierge.enrichment.errors import EnrichmentInProgressError


class InFlightRegistry:
    """
    Per-wine mutual exclusion for enrichment.

    A second claim on a wine that is already claimed is rejected rather than
    queued. Only covers the current process; cross-process deduplication is
    handled by the queue's job ids.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._in_flight: set[str] = set()

    @contextmanager
    def claim(self, wine_id: UUID | str) -> Iterator[None]:
        """
        Hold the wine for the duration of the block.

        Raises:
            EnrichmentInProgressError: If the wine is already claimed.
        """
        key = str(wine_id)
        with self._lock:
            if key in self._in_flight:
                raise EnrichmentInProgressError(key)
            self._in_flight.add(key)
        try:
            yield
        finally:
            with self._lock:
                self._in_flight.discard(key)

    def is_in_flight(self, wine_id: UUID | str) -> bool:
        """Check whether a wine is currently claimed."""
        with self._lock:
            return str(wine_id) in self._in_flight

    def __len__(self) -> int:
        with self._lock:
            return len(self._in_flight)


_default_registry = InFlightRegistry()


def get_in_flight_registry() -> InFlightRegistry:
    """Get the process-wide in-flight registry."""
    return _default_registry
