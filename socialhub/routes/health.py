"""
SocialHub Backend — Health Check Route
=========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Pings the database and reports the notification breaker state.
Who:   Called by Docker health checks, load balancers, and monitoring systems.

Status levels:
    - healthy:   Database reachable (HTTP 200)
    - degraded:  Database unreachable (HTTP 503, stop routing traffic)

The notification breaker is reported but never degrades the status:
notifications are best-effort.
"""

import logging
import time

from fastapi import APIRouter, Request, Response, status

from socialhub import __version__
from socialhub.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description=(
        "Returns the health status of the backend and its dependencies. "
        "Responds 503 when the database cannot be reached."
    ),
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    database = getattr(request.app.state, "database", None)
    dispatcher = getattr(request.app.state, "notification_dispatcher", None)

    db_ok = database is not None and await database.ping()
    if not db_ok:
        logger.warning("Health check: database unreachable")
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    breaker_state = dispatcher.breaker.state if dispatcher is not None else "unavailable"

    return HealthResponse(
        status="healthy" if db_ok else "degraded",
        version=__version__,
        database="connected" if db_ok else "disconnected",
        notifications=breaker_state,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
