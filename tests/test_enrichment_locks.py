"""Tests for the in-flight enrichment registry."""

import threading
from uuid import uuid4

import pytest

from wine_concierge.enrichment.errors import EnrichmentInProgressError
from wine_concierge.enrichment.locks import InFlightRegistry, get_in_flight_registry


class TestInFlightRegistry:
    """Tests for InFlightRegistry."""

    def test_claim_and_release(self) -> None:
        registry = InFlightRegistry()
        wine_id = uuid4()

        with registry.claim(wine_id):
            assert registry.is_in_flight(wine_id)
            assert registry.is_in_flight(str(wine_id))
            assert len(registry) == 1

        assert not registry.is_in_flight(wine_id)
        assert len(registry) == 0

    def test_second_claim_rejected(self) -> None:
        registry = InFlightRegistry()
        wine_id = uuid4()

        with registry.claim(wine_id):
            with pytest.raises(EnrichmentInProgressError) as exc_info:
                with registry.claim(str(wine_id)):
                    pass
            # Rejection leaves the original claim in place
            assert registry.is_in_flight(wine_id)

        assert exc_info.value.wine_id == str(wine_id)
        assert not registry.is_in_flight(wine_id)

    def test_different_wines_independent(self) -> None:
        registry = InFlightRegistry()

        with registry.claim(uuid4()), registry.claim(uuid4()):
            assert len(registry) == 2

    def test_released_on_exception(self) -> None:
        registry = InFlightRegistry()
        wine_id = uuid4()

        with pytest.raises(RuntimeError):
            with registry.claim(wine_id):
                raise RuntimeError("boom")

        assert not registry.is_in_flight(wine_id)

    def test_concurrent_claims_only_one_wins(self) -> None:
        registry = InFlightRegistry()
        wine_id = uuid4()
        barrier = threading.Barrier(5)
        release = threading.Event()
        outcomes: list[str] = []
        outcomes_lock = threading.Lock()

        def worker() -> None:
            barrier.wait()
            try:
                with registry.claim(wine_id):
                    with outcomes_lock:
                        outcomes.append("claimed")
                    release.wait(timeout=2)
            except EnrichmentInProgressError:
                with outcomes_lock:
                    outcomes.append("rejected")
                    if outcomes.count("rejected") == 4:
                        release.set()

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert outcomes.count("claimed") == 1
        assert outcomes.count("rejected") == 4

    def test_process_wide_default(self) -> None:
        assert get_in_flight_registry() is get_in_flight_registry()
