"""
OM Spiritual Backend - Health Check Route
==========================================

What:  GET /health for Docker health checks and load balancer probes.
How:   SELECT 1 against the storage context, plus Gemini's local status
       (configured / circuit state). Gemini is never called from here.

Status levels:
    healthy    database reachable, Gemini configured and circuit closed
    degraded   database reachable, Gemini unconfigured or circuit open
               (recommendations fall back to the static suggestion) → 200
    unhealthy  database unreachable → 503
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from omspiritual import __version__
from omspiritual.schemas.common import HealthResponse
from omspiritual.services.recommendation_service import recommendation_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request):
    db_status = "connected"
    overall = "healthy"

    try:
        await request.app.state.db.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    gemini_status = recommendation_service.llm.status()
    if gemini_status != "configured" and overall == "healthy":
        overall = "degraded"

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        gemini=gemini_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    return JSONResponse(
        status_code=503 if overall == "unhealthy" else 200,
        content=body.model_dump(),
    )
