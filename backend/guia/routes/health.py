"""
Guia Backend — Health Check Route
===================================

What:  Health check endpoint for monitoring and load balancer checks.
How:   Runs SELECT 1 against the database and asks the media service whether
       it can accept uploads.

Status levels:
    - healthy:   database and media host reachable (HTTP 200)
    - degraded:  media host down; reads still work (HTTP 200)
    - unhealthy: database down (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends, Response
from sqlalchemy import text

from guia import __version__
from guia.context import AppContext
from guia.dependencies import get_context
from guia.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Returns the health status of the backend and its dependencies.",
)
async def health_check(
    response: Response,
    context: AppContext = Depends(get_context),
) -> HealthResponse:
    db_status = "connected"
    media_status = "available"
    overall = "healthy"

    try:
        async with context.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    if not await context.media.health_check():
        media_status = "unavailable"
        if overall != "unhealthy":
            overall = "degraded"

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        media=media_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
