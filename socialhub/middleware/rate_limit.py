"""
SocialHub Backend — Rate Limiting Middleware
===============================================

What:  In-memory sliding window rate limiter.
How:   Requests are keyed by the authenticated account when a valid access
       token is present (`account:<id>`), otherwise by client IP
       (`ip:<addr>`). Each key keeps a deque of request timestamps; entries
       older than the window are dropped on every request.

Response on limit:
    A RateLimitExceededError rendered here as HTTP 429 with a Retry-After
    header and the standard error body (middleware sits outside the app's
    exception handlers):
    {"status": "error", "error": "rate_limit_exceeded", "message": ..., "details": {"retry_after": N}}

Scope:
    Per process. Multiple uvicorn workers each keep their own counters.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from socialhub.config import settings
from socialhub.exceptions import AuthenticationError, RateLimitExceededError
from socialhub.middleware.request_id import request_id_var
from socialhub.utils.security import ACCESS_TOKEN, SecurityUtils

logger = logging.getLogger(__name__)


def rate_limit_key(request: Request) -> str:
    """Account key for a valid bearer token, IP key otherwise. Never raises."""
    authorization = request.headers.get("Authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token:
        try:
            payload = SecurityUtils.decode_token(token.strip(), ACCESS_TOKEN)
            return f"account:{payload['sub']}"
        except AuthenticationError:
            pass
    client_ip = request.client.host if request.client else "unknown"
    return f"ip:{client_ip}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Configuration (from settings unless passed explicitly):
        rate_limit_requests: max requests per window per key
        rate_limit_window:   window length in seconds
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}
    CLEANUP_EVERY = 1000

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
    ):
        super().__init__(app)
        self.max_requests = max_requests or settings.rate_limit_requests
        self.window_seconds = window_seconds or settings.rate_limit_window
        self._requests: Dict[str, Deque[float]] = defaultdict(deque)
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        key = rate_limit_key(request)
        request.state.rate_limit_key = key
        now = time.time()
        window_start = now - self.window_seconds

        timestamps = self._requests[key]
        while timestamps and timestamps[0] <= window_start:
            timestamps.popleft()

        if len(timestamps) >= self.max_requests:
            error = RateLimitExceededError(
                retry_after=int(timestamps[0] + self.window_seconds - now) + 1
            )
            logger.warning(
                "Rate limit exceeded for %s: %d requests in %ds window",
                key,
                len(timestamps),
                self.window_seconds,
            )
            return JSONResponse(
                status_code=error.status_code,
                content={
                    "status": "error",
                    "error": error.error_code,
                    "message": error.message,
                    "details": error.context,
                    "request_id": request_id_var.get("") or None,
                },
                headers={"Retry-After": str(error.retry_after)},
            )

        timestamps.append(now)

        self._seen += 1
        if self._seen % self.CLEANUP_EVERY == 0:
            self._cleanup_inactive(window_start)

        return await call_next(request)

    def _cleanup_inactive(self, window_start: float) -> None:
        inactive = [
            key for key, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for key in inactive:
            del self._requests[key]
        if inactive:
            logger.debug("Cleaned up %d inactive rate limit keys", len(inactive))
