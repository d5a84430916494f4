"""Enrichment routes: run, refresh, trigger and poll wine enrichment."""

import asyncio
import logging
from uuid import UUID

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from wine_concierge.core.enums import EnrichmentOutcome
from wine_concierge.core.schema import EnrichmentJob
from wine_concierge.db.engine import get_session
from wine_concierge.enrichment.jobs import trigger_many
from wine_concierge.enrichment.service import EnrichmentResult, get_enrichment_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/enrichment", tags=["enrichment"])


class EnrichmentRequest(BaseModel):
    """Body for enrich and refresh requests."""

    wine_id: UUID


class TriggerRequest(BaseModel):
    """Body for background enrichment requests."""

    wine_ids: list[UUID] = Field(min_length=1)
    refresh: bool = False


def _enrich_in_session(wine_id: UUID, refresh: bool) -> EnrichmentResult | None:
    """Load the wine and enrich or refresh it. Returns None if the wine is unknown."""
    with get_session() as session:
        service = get_enrichment_service(session)
        wine = service.get_wine(wine_id)
        if wine is None:
            return None
        return service.refresh(wine) if refresh else service.enrich(wine)


def _latest_job_in_session(wine_id: str) -> tuple[bool, EnrichmentJob | None]:
    with get_session() as session:
        service = get_enrichment_service(session)
        if service.get_wine(wine_id) is None:
            return False, None
        return True, service.get_status(wine_id)


def _result_response(result: EnrichmentResult) -> JSONResponse:
    if result.status == EnrichmentOutcome.IN_PROGRESS:
        return JSONResponse(
            status_code=409,
            content={"error": result.error_message, "wine_id": str(result.wine.id)},
        )

    return JSONResponse(
        content={
            "success": result.success,
            "wine_id": str(result.wine.id),
            "status": result.status.value,
            "job_id": str(result.job_id) if result.job_id else None,
            "ratings_count": result.ratings_count,
            "write_errors": result.write_errors,
        }
    )


def _wine_not_found() -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "Wine not found"})


@router.post("")
async def enrich_wine(body: EnrichmentRequest) -> JSONResponse:
    """
    Enrich a wine and wait for the outcome.

    This may take time: the model call is retried with backoff.
    """
    try:
        # Run synchronous enrichment in thread pool to avoid blocking event loop
        result = await asyncio.to_thread(_enrich_in_session, body.wine_id, False)
    except Exception:
        logger.exception("Enrichment API error")
        return JSONResponse(status_code=500, content={"error": "Enrichment failed"})

    if result is None:
        return _wine_not_found()
    return _result_response(result)


@router.put("")
async def refresh_wine(body: EnrichmentRequest) -> JSONResponse:
    """Delete a wine's ratings and enrich it again."""
    try:
        result = await asyncio.to_thread(_enrich_in_session, body.wine_id, True)
    except Exception:
        logger.exception("Refresh enrichment API error")
        return JSONResponse(status_code=500, content={"error": "Refresh failed"})

    if result is None:
        return _wine_not_found()
    return _result_response(result)


@router.get("")
async def enrichment_status(wine_id: str | None = None) -> JSONResponse:
    """Return the most recent enrichment job for a wine."""
    if not wine_id:
        return JSONResponse(status_code=400, content={"error": "Wine ID required"})

    try:
        found, job = await asyncio.to_thread(_latest_job_in_session, wine_id)
    except Exception:
        logger.exception("Enrichment status API error")
        return JSONResponse(status_code=500, content={"error": "Failed to get status"})

    if not found:
        return _wine_not_found()
    return JSONResponse(content={"job": job.model_dump(mode="json") if job else None})


@router.post("/trigger", status_code=202)
async def trigger_enrichment(body: TriggerRequest) -> JSONResponse:
    """Queue background enrichment for one or more wines."""
    enqueued = await trigger_many(body.wine_ids, refresh=body.refresh)
    return JSONResponse(
        status_code=202,
        content={"requested": len(body.wine_ids), "enqueued": enqueued},
    )
