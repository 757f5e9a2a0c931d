"""
SocialHub Backend — Request ID Middleware
============================================

What:  Assigns a correlation ID to every request and echoes it back in the
       X-Request-ID response header.
How:   Accepts a client-supplied X-Request-ID (so the mobile/web client can
       correlate its own logs), otherwise generates a short UUID. The ID is
       published through a ContextVar so loggers and the exception handlers
       in main.py can read it without touching the request object.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Coroutine-local: concurrent requests on one event loop each see their own value
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def _new_request_id() -> str:
    return uuid.uuid4().hex[:12]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Stores the ID on `request.state.request_id` and in `request_id_var`."""

    MAX_CLIENT_ID_LENGTH = 64

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        supplied = request.headers.get(REQUEST_ID_HEADER, "").strip()
        rid = supplied[: self.MAX_CLIENT_ID_LENGTH] if supplied else _new_request_id()

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
