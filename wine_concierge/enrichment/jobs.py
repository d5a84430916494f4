"""
Background Enrichment Jobs
==========================

Defines the arq task that enriches a wine off the request path, and the
fire-and-forget helpers that enqueue it. Uses Redis as the job queue backend.

Each wine is enqueued under the job id ``enrich:<wine_id>``; arq ignores a
second enqueue while that job is queued or running, and the worker's
``max_jobs`` bounds how many model calls run at once.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Iterable
from typing import Any
from uuid import UUID

from arq import create_pool
from arq.connections import ArqRedis, RedisSettings

from wine_concierge.core.schema import Wine
from wine_concierge.db.engine import get_session
from wine_concierge.enrichment.service import get_enrichment_service

logger = logging.getLogger(__name__)

JOB_ID_PREFIX = "enrich:"


def get_redis_settings() -> RedisSettings:
    """Get Redis connection settings from environment."""
    return RedisSettings(
        host=os.environ.get("REDIS_HOST", "localhost"),
        port=int(os.environ.get("REDIS_PORT", "6379")),
        database=int(os.environ.get("REDIS_DB", "0")),
    )


def job_id_for(wine_id: UUID | str) -> str:
    """Deterministic queue job id for a wine."""
    return f"{JOB_ID_PREFIX}{wine_id}"


def _run_enrichment(wine_id: str, refresh: bool) -> dict[str, Any]:
    """Load the wine and run the enrichment service in a fresh session."""
    with get_session() as session:
        service = get_enrichment_service(session)
        wine = service.get_wine(wine_id)
        if wine is None:
            logger.warning(f"Enrichment skipped: wine {wine_id} not found")
            return {"wine_id": wine_id, "status": "not_found"}

        result = service.refresh(wine) if refresh else service.enrich(wine)
        return result.to_dict()


async def enrich_wine(
    ctx: dict[str, Any],
    wine_id: str,
    refresh: bool = False,
) -> dict[str, Any]:
    """
    Enrichment task.

    The service is synchronous (blocking model call and database session),
    so it runs in a worker thread to keep the event loop free for other jobs.

    Args:
        ctx: arq context (contains Redis connection)
        wine_id: ID of the wine to enrich
        refresh: Delete existing ratings before enriching

    Returns:
        EnrichmentResult as dictionary
    """
    logger.info(
        f"Running enrichment job {ctx.get('job_id', '?')} for wine {wine_id} "
        f"(try {ctx.get('job_try', 1)})"
    )
    return await asyncio.to_thread(_run_enrichment, wine_id, refresh)


async def _enqueue(redis: ArqRedis, wine_id: str, refresh: bool) -> bool:
    job = await redis.enqueue_job("enrich_wine", wine_id, refresh, _job_id=job_id_for(wine_id))
    if job is None:
        logger.info(f"Enrichment for wine {wine_id} already queued, skipping")
        return False
    logger.debug(f"Enqueued enrichment job {job.job_id}")
    return True


async def trigger_async(
    wine: Wine,
    refresh: bool = False,
    redis: ArqRedis | None = None,
) -> None:
    """
    Fire-and-forget enrichment of one wine.

    Only waits for the enqueue, never for the enrichment itself. Any failure
    is logged and swallowed; poll the wine's latest job for the outcome.

    Args:
        wine: The wine to enrich.
        refresh: Delete existing ratings before enriching.
        redis: Optional open arq pool; a temporary one is created otherwise.
    """
    try:
        if redis is not None:
            await _enqueue(redis, str(wine.id), refresh)
            return

        pool = await create_pool(get_redis_settings())
        try:
            await _enqueue(pool, str(wine.id), refresh)
        finally:
            await pool.close()
    except Exception as e:
        logger.error(f"Failed to trigger enrichment for wine {wine.id}: {e}")


async def trigger_many(
    wine_ids: Iterable[UUID | str],
    refresh: bool = False,
    redis: ArqRedis | None = None,
) -> int:
    """
    Enqueue enrichment for a batch of wines over a single connection.

    Used after bulk imports. Failures are logged per wine and swallowed.

    Args:
        wine_ids: IDs of the wines to enrich.
        refresh: Delete existing ratings before enriching.
        redis: Optional open arq pool.

    Returns:
        Number of jobs actually enqueued (duplicates and failures excluded).
    """
    wine_ids = [str(w) for w in wine_ids]
    if not wine_ids:
        return 0

    try:
        pool = redis if redis is not None else await create_pool(get_redis_settings())
    except Exception as e:
        logger.error(f"Failed to connect to Redis, {len(wine_ids)} enrichment(s) not queued: {e}")
        return 0

    enqueued = 0
    try:
        for wine_id in wine_ids:
            try:
                if await _enqueue(pool, wine_id, refresh):
                    enqueued += 1
            except Exception as e:
                logger.error(f"Failed to trigger enrichment for wine {wine_id}: {e}")
    finally:
        if redis is None:
            await pool.close()

    logger.info(f"Enqueued {enqueued}/{len(wine_ids)} enrichment job(s)")
    return enqueued


class WorkerSettings:
    """arq worker settings."""

    functions = [enrich_wine]
    redis_settings = get_redis_settings()
    max_jobs = int(os.environ.get("ENRICHMENT_WORKER_CONCURRENCY", "4"))
    job_timeout = 300  # 5 minutes
    # A job interrupted by a worker crash is picked up again
    max_tries = 3
    # Outcome lives in enrichment_jobs; a kept result would block re-enqueueing the same id
    keep_result = 0
