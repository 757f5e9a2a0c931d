"""
SocialHub Backend — Database Client & Session Management
==========================================================

What:  The `Database` storage client (async engine + session factory),
       the declarative `Base`, and the per-request session dependency.
How:   A `Database` is constructed from settings, connected in the FastAPI
       lifespan, stored on `app.state.database`, and disconnected on
       shutdown. Nothing connects at import time, so tests (and scripts)
       inject their own `Database` pointed at another URL.
Who:   Lifespan in main.py, route dependencies, NotificationDispatcher,
       Alembic (for `Base.metadata`).

Connection Pooling Strategy (server databases):
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use (catches stale connections)
    pool_recycle=3600: Recycles connections every hour

    SQLite URLs (local development and tests) skip the pool options and
    turn on foreign key enforcement for every new connection.
"""

import logging
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from socialhub.config import Settings
from socialhub.exceptions import UnavailableError, is_storage_unavailable

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class to register with the shared metadata
    used by Alembic and by `Database.create_all()`.
    """
    pass


# ── Storage Client ────────────────────────────────────────────────────────
class Database:
    """
    Owns the async engine and session factory for one database URL.

    Lifecycle:
        db = Database(url)      # no I/O
        await db.connect()      # engine + pool created
        db.session()            # new AsyncSession per unit of work
        await db.disconnect()   # pool disposed, connections released
    """

    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        pool_size: int = 20,
        max_overflow: int = 10,
        pool_pre_ping: bool = True,
    ):
        self.url = url
        self._engine_options: Dict[str, Any] = {"echo": echo}
        if not self.is_sqlite:
            self._engine_options.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=pool_pre_ping,
                pool_recycle=3600,
            )
        self.engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Builds an unconnected client from application settings."""
        return cls(
            settings.database_url,
            echo=settings.db_echo,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
        )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_connected(self) -> bool:
        return self.engine is not None

    async def connect(self) -> None:
        """Creates the engine and session factory. Safe to call twice."""
        if self.engine is not None:
            return

        self.engine = create_async_engine(self.url, **self._engine_options)
        if self.is_sqlite:
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        # expire_on_commit=False: services read attributes after committing
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Database client connected (%s)", self.engine.url.render_as_string(hide_password=True))

    async def disconnect(self) -> None:
        """Disposes the pool. Safe to call when never connected."""
        if self.engine is None:
            return
        await self.engine.dispose()
        self.engine = None
        self._session_factory = None
        logger.info("Database client disconnected")

    def session(self) -> AsyncSession:
        """Returns a new session; use as `async with db.session() as session:`."""
        if self._session_factory is None:
            raise UnavailableError(message="Database client is not connected")
        return self._session_factory()

    async def ping(self) -> bool:
        """Executes SELECT 1; returns False instead of raising."""
        if self.engine is None:
            return False
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database ping failed: %s", str(e))
            return False

    async def create_all(self) -> None:
        """Creates every table registered on `Base.metadata` (dev and tests)."""
        import socialhub.models  # noqa: F401  (registers all tables)

        if self.engine is None:
            await self.connect()
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        import socialhub.models  # noqa: F401

        if self.engine is None:
            return
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores ON DELETE CASCADE unless this pragma is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session on the application's `Database`
        2. Yields it to the route handler
        3. On success: commits whatever the handler left pending
        4. On error: rolls back and re-raises for the global handlers
        5. Always: closes the session (returns connection to pool)

    Services that must make a write durable before a follow-up effect
    (notification fan-out) commit explicitly; the final commit here is then
    a no-op.
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            if is_storage_unavailable(e):
                raise UnavailableError(context={"error_type": type(e).__name__}) from e
            raise
