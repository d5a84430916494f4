"""Tests for the command line interface."""

from contextlib import contextmanager
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from typer.testing import CliRunner

from wine_concierge.cli import enrich as enrich_cli
from wine_concierge.cli.main import app
from wine_concierge.core.enums import WineType
from wine_concierge.core.schema import Wine
from wine_concierge.db.models import Base
from wine_concierge.db.repositories import WineRepository
from wine_concierge.enrichment.config import EnrichmentConfig, GuideRegistry, reset_default_guides
from wine_concierge.enrichment.locks import InFlightRegistry
from wine_concierge.enrichment.service import EnrichmentService
from wine_concierge.services.ai.client import LLMClient, LLMResponse

runner = CliRunner()


class CannedLLMClient(LLMClient):
    model = "canned"

    def chat(self, messages):
        return LLMResponse(
            content='{"ratings": [{"guide_id": "decanter", "score": "95", "confidence": 0.8}]}',
            model=self.model,
        )


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'cli.db'}")
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine)
    engine.dispose()


@pytest.fixture
def cli_env(session_factory, monkeypatch):
    @contextmanager
    def fake_get_session():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    def fake_service(session):
        return EnrichmentService(
            session,
            llm_client=CannedLLMClient(),
            config=EnrichmentConfig(),
            guides=GuideRegistry(),
            in_flight=InFlightRegistry(),
        )

    monkeypatch.setattr(enrich_cli, "get_session", fake_get_session)
    monkeypatch.setattr(enrich_cli, "get_enrichment_service", fake_service)
    return session_factory


class TestEnrichCommands:
    """Tests for the enrich sub-commands."""

    def test_run(self, cli_env) -> None:
        with cli_env() as session:
            wine = WineRepository(session).create(
                Wine(name="Fiano di Avellino", wine_type=WineType.WHITE, price=28.0)
            )
            session.commit()

        result = runner.invoke(app, ["enrich", "run", str(wine.id)])

        assert result.exit_code == 0, result.output
        assert "completed" in result.output
        assert "Decanter" in result.output

    def test_run_wine_not_found(self, cli_env) -> None:
        result = runner.invoke(app, ["enrich", "run", str(uuid4())])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_status_never_enriched(self, cli_env) -> None:
        result = runner.invoke(app, ["enrich", "status", str(uuid4())])

        assert result.exit_code == 1
        assert "No enrichment jobs" in result.output

    def test_trigger(self, monkeypatch) -> None:
        trigger = AsyncMock(return_value=1)
        monkeypatch.setattr(enrich_cli, "trigger_many", trigger)

        result = runner.invoke(app, ["enrich", "trigger", str(uuid4()), str(uuid4())])

        assert result.exit_code == 0
        assert "Enqueued 1 of 2" in result.output

    def test_worker_redis_unreachable(self, monkeypatch) -> None:
        import arq

        def refuse(settings, **kwargs):
            raise ConnectionError("Connection refused")

        monkeypatch.setattr(arq, "run_worker", refuse)

        result = runner.invoke(app, ["enrich", "worker", "--burst"])

        assert result.exit_code == 1
        assert "Connection refused" in result.output
        assert "REDIS_HOST:REDIS_PORT" in result.output
        assert "docker" not in result.output

    def test_guides(self, monkeypatch) -> None:
        reset_default_guides()
        monkeypatch.delenv("WINE_GUIDES_CONFIG_PATH", raising=False)

        result = runner.invoke(app, ["enrich", "guides"])

        assert result.exit_code == 0
        assert "gambero-rosso" in result.output
        reset_default_guides()


class TestMainCommands:
    def test_version(self) -> None:
        result = runner.invoke(app, ["version"])
        assert "Wine Concierge v0.1.0" in result.output
