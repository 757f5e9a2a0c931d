"""
SocialHub Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Service and API tests run against a real SQLite database (aiosqlite)
       created fresh in tmp_path for every test, so ON CONFLICT inserts,
       cascades and counter updates behave as they do in production.

Fixture Hierarchy (all function-scoped):
    ├── database:          connected Database with every table created
    │   ├── db_session:    AsyncSession on that database
    │   ├── dispatcher:    NotificationDispatcher writing to that database
    │   ├── make_account:  factory that inserts and commits an Account
    │   └── test_client:   HTTPX AsyncClient over the ASGI app
    ├── mock_db_session:   AsyncMock session for pure unit tests
    └── auth_headers:      builds a Bearer header for an account
"""

import os
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

# Override settings BEFORE any socialhub import reads them
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./socialhub_test.db"
os.environ["JWT_SECRET"] = "test-access-secret"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["NOTIFY_RETRY_MAX_ATTEMPTS"] = "2"
os.environ["NOTIFY_RETRY_MIN_WAIT"] = "0"
os.environ["NOTIFY_RETRY_MAX_WAIT"] = "0"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.database import Database
from socialhub.models import Account, Post
from socialhub.repositories.account_directory import AccountDirectory
from socialhub.repositories.content_store import ContentStore
from socialhub.services.notification_dispatcher import NotificationDispatcher
from socialhub.utils.security import ACCESS_TOKEN, SecurityUtils

BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[Database, None]:
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'socialhub_test.db'}")
    await db.connect()
    await db.create_all()
    yield db
    await db.disconnect()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as session:
        yield session


@pytest.fixture
def dispatcher(database: Database) -> NotificationDispatcher:
    return NotificationDispatcher(database)


@pytest.fixture
def make_account(db_session: AsyncSession):
    """
    Factory inserting a committed account.

    Usage:
        alice = await make_account("alice")
    """
    async def _make(username: str, **fields) -> Account:
        fields.setdefault("email", f"{username}@example.com")
        fields.setdefault("password_hash", "not-a-real-hash")
        account = await AccountDirectory(db_session).create_account(username=username, **fields)
        await db_session.commit()
        return account

    return _make


@pytest.fixture
def make_post(db_session: AsyncSession):
    """
    Factory inserting a committed post; `minutes` offsets created_at from
    BASE_TIME so ordering is deterministic.
    """
    async def _make(owner: Account, content: str = "hello", minutes: int = 0, **fields) -> Post:
        fields.setdefault("created_at", BASE_TIME + timedelta(minutes=minutes))
        post = await ContentStore(db_session, Post).create_item(
            owner_id=owner.id, content=content, **fields
        )
        await db_session.commit()
        return post

    return _make


# ══════════════════════════════════════════════════════════════════════════
# Unit-Test Helpers
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """A MagicMock standing in for AsyncSession (no database needed)."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def auth_headers():
    def _headers(account: Account) -> dict:
        token = SecurityUtils.create_token(
            {"sub": str(account.id), "username": account.username, "email": account.email},
            ACCESS_TOKEN,
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers


# ══════════════════════════════════════════════════════════════════════════
# API Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(database: Database) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient routed straight into the app.

    ASGITransport does not run the lifespan; the injected database is
    already connected by the `database` fixture.
    """
    from socialhub.main import create_app

    app = create_app(database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
