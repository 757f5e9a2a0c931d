"""
SocialHub Backend — FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn socialhub.main:app) and by the test suite,
       which injects its own `Database`.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  Rate Limit → Request ID → Logging → GZip → CORS         │
    │                                                          │
    │  Routers:                                                │
    │  auth · users · posts · comments · stories · messages    │
    │  search · notifications · health                         │
    │                                                          │
    │  app.state:                                              │
    │  database (Database) · notification_dispatcher           │
    │                                                          │
    │  Exception Handlers:                                     │
    │  SocialHubError → its status_code · 422 · catch-all 500  │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check, database connect
    Shutdown: database disconnect (closes pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from socialhub import __version__
from socialhub.config import settings
from socialhub.database import Database
from socialhub.exceptions import SocialHubError
from socialhub.middleware.logging import RequestLoggingMiddleware
from socialhub.middleware.rate_limit import RateLimitMiddleware
from socialhub.middleware.request_id import RequestIDMiddleware, request_id_var
from socialhub.routes import (
    auth,
    comments,
    health,
    messages,
    notifications,
    posts,
    search,
    stories,
    users,
)
from socialhub.services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, before anything else logs.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request access lines come from socialhub.access instead
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("SocialHub Backend starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: health checks and the error bodies still work
        logger.error("Configuration error: %s", str(e))

    database: Database = app.state.database
    await database.connect()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("SocialHub Backend shutting down...")
    await database.disconnect()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details: Optional[dict] = None) -> dict:
    return {
        "status": "error",
        "error": error,
        "message": message,
        "details": details or None,
        "request_id": request_id_var.get("") or None,
    }


def register_exception_handlers(app: FastAPI) -> None:
    """
    Every SocialHubError subclass carries its own `status_code` and
    `error_code`, so one handler covers the whole hierarchy:

        ValidationError         → 400
        AuthenticationError     → 401
        ForbiddenError          → 403
        NotFoundError           → 404
        ConflictError           → 409
        UnavailableError        → 503

    Server-side errors (5xx) never echo `context` to the client; it is
    logged instead.
    """

    @app.exception_handler(SocialHubError)
    async def handle_socialhub_error(request: Request, exc: SocialHubError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, exc.error_code, exc.message, exc.context)
            details = None
        else:
            logger.info("[%s] %s: %s", rid, exc.error_code, exc.message)
            details = jsonable_encoder(exc.context)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error_code, exc.message, details),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Malformed body, bad UUID in the path, out-of-range query params."""
        return JSONResponse(
            status_code=422,
            content=_error_body(
                "request_validation_error",
                "Request is malformed",
                {"errors": jsonable_encoder(exc.errors())},
            ),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Assemble the application.

    Args:
        database: Injected by tests; defaults to one built from settings.
                  It is connected by the lifespan, so callers that skip the
                  lifespan (ASGITransport) connect it themselves.
    """
    app = FastAPI(
        title="SocialHub API",
        description=(
            "Social networking backend: accounts and follows, posts with likes, "
            "comments and hashtags, 24-hour stories, direct messages and notifications."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    database = database or Database.from_settings(settings)
    app.state.database = database
    app.state.notification_dispatcher = NotificationDispatcher(database)

    # ── Middleware ────────────────────────────────────────────────────────
    # Last added runs first: RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(posts.router)
    app.include_router(comments.router)
    app.include_router(stories.router)
    app.include_router(messages.router)
    app.include_router(search.router)
    app.include_router(notifications.router)
    app.include_router(health.router)

    return app


app = create_app()
