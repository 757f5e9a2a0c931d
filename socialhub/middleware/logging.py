"""
SocialHub Backend — Request Logging Middleware
=================================================

What:  One access-log line per HTTP request on the `socialhub.access` logger.
How:   Measures wall time around the downstream handler and logs method,
       path, status, duration, request ID and the authenticated account
       (when the rate limiter resolved one).

Level by status:
    5xx → ERROR, 4xx → WARNING, everything else → INFO

Never logged: request bodies (passwords, message content) and the
Authorization header.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from socialhub.middleware.request_id import request_id_var

logger = logging.getLogger("socialhub.access")

QUIET_PATHS = {"/health"}


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        client_ip = request.client.host if request.client else "unknown"
        account = getattr(request.state, "rate_limit_key", None) or "-"
        rid = request_id_var.get("") or getattr(request.state, "request_id", "")
        status = response.status_code

        logger.log(
            _level_for(status),
            "%s %s %d %.1fms [%s] %s from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            account,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
