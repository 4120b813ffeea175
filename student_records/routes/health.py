"""
Student Records — Health Check Route
======================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Runs SELECT 1 through the application's Database and reports status.
Who:   Called by container health checks and monitoring systems.

Status levels:
    - healthy:   store reachable
    - unhealthy: store unreachable (the response is still HTTP 200 so the
                 probe can read the body; monitors alert on `status`)
"""

import logging
import time

from fastapi import APIRouter, Request

from student_records import __version__
from student_records.schemas.student import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Probe store connectivity and report uptime."""
    db_status = "connected"
    overall = "healthy"

    try:
        await request.app.state.database.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
