"""
SocialHub Backend — Application Package Initializer
====================================================

What: Marks the `socialhub` directory as a Python package.
Who:  Imported by uvicorn (`socialhub.main:app`), Alembic and pytest.

Architecture Note:
    The backend is a layered FastAPI application:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, envelopes
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← feed, fan-out, stories, ...
    ├─────────────────────────────────────┤
    │   Repositories (Directory / Store)  │  ← SQL for accounts and content
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async engine, sessions
    └─────────────────────────────────────┘

    Routes never build SQL. Services never touch HTTP. Repositories never
    decide who may see what.
"""

__version__ = "1.0.0"
