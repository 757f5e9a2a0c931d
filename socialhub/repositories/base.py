"""
SocialHub Backend — Base Repository
=====================================

What:  Generic repository holding the session, the model, and the helpers
       every concrete repository shares.
How:   Repositories are constructed per unit of work with the session they
       operate on (`AccountDirectory(db)`, `ContentStore(db, Post)`).
       They flush, never commit: the caller owns the transaction.
Who:   AccountDirectory, ContentStore, NotificationService.

Error Translation:
    Every statement goes through `_execute`. Connectivity failures
    (OperationalError, InterfaceError, dropped connections, OSError) become
    `UnavailableError`; everything else (IntegrityError included)
    propagates unchanged so the caller can decide what it means.

Unique Edges:
    `insert_ignore` emits the dialect's
        INSERT ... ON CONFLICT DO NOTHING RETURNING <pk>
    A returned row means this call created the edge; no row means the edge
    already existed (possibly created a microsecond earlier by a concurrent
    request). No exception is raised and no savepoint is needed, so the
    surrounding transaction stays usable either way.
"""

import logging
from typing import Any, Dict, Generic, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import Table, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Result
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Executable

from socialhub.database import Base
from socialhub.exceptions import UnavailableError, is_storage_unavailable

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)

# Dialect-specific INSERT constructs that support ON CONFLICT
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class BaseRepository(Generic[ModelType]):
    """
    Generic repository for one model on one session.

    Example:
        class AccountDirectory(BaseRepository[Account]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(Account, session)
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession) -> None:
        self.model = model
        self.session = session

    # ═══════════════════════════════════════════════════════════════════════
    # EXECUTION
    # ═══════════════════════════════════════════════════════════════════════

    async def _execute(self, statement: Executable) -> Result:
        """Executes `statement`, translating connectivity failures."""
        try:
            return await self.session.execute(statement)
        except (SQLAlchemyError, OSError) as e:
            if is_storage_unavailable(e):
                logger.error(
                    "Storage unavailable during %s query: %s",
                    self.model.__tablename__,
                    type(e).__name__,
                )
                raise UnavailableError(
                    context={"table": self.model.__tablename__, "error_type": type(e).__name__}
                ) from e
            raise

    async def _flush(self) -> None:
        try:
            await self.session.flush()
        except (SQLAlchemyError, OSError) as e:
            if is_storage_unavailable(e):
                raise UnavailableError(
                    context={"table": self.model.__tablename__, "error_type": type(e).__name__}
                ) from e
            raise

    # ═══════════════════════════════════════════════════════════════════════
    # CRUD
    # ═══════════════════════════════════════════════════════════════════════

    async def get(self, record_id: UUID) -> Optional[ModelType]:
        """Returns the row with this primary key, or None."""
        result = await self._execute(select(self.model).where(self.model.id == record_id))
        return result.scalar_one_or_none()

    async def create(self, **kwargs: Any) -> ModelType:
        """
        Adds a new row, flushes, and reloads it so defaults and eagerly
        loaded relationships (the owner of a post) are populated.

        SQL Generated:
            INSERT INTO <table> (...) VALUES (...)
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self._flush()
        await self.session.refresh(instance)
        return instance

    async def remove(self, instance: ModelType) -> None:
        await self.session.delete(instance)
        await self._flush()

    # ═══════════════════════════════════════════════════════════════════════
    # UPSERT HELPERS
    # ═══════════════════════════════════════════════════════════════════════

    def _dialect_insert(self, table: Table):
        dialect = self.session.get_bind().dialect.name
        insert_fn = _UPSERT_INSERTS.get(dialect)
        if insert_fn is None:
            raise NotImplementedError(f"ON CONFLICT inserts are not supported on '{dialect}'")
        return insert_fn(table)

    async def insert_ignore(self, table: Table, values: Dict[str, Any]) -> bool:
        """
        Inserts one row unless it collides with a unique key.

        Returns:
            True if the row was inserted by this call, False if it already existed.

        SQL Generated:
            INSERT INTO <table> (...) VALUES (...)
            ON CONFLICT DO NOTHING
            RETURNING <first pk column>
        """
        pk_col = list(table.primary_key.columns)[0]
        stmt = (
            self._dialect_insert(table)
            .values(**values)
            .on_conflict_do_nothing()
            .returning(pk_col)
        )
        result = await self._execute(stmt)
        return result.first() is not None
