"""
SocialHub Backend — Hashtag Repository
========================================

What:  Hashtag usage counters, post↔hashtag links, and hashtag search.

Usage Upsert:
    INSERT INTO hashtags (id, name, count) VALUES (:id, :name, 1)
    ON CONFLICT (name) DO UPDATE SET count = hashtags.count + 1
    RETURNING id

    One statement per tag; concurrent posts using the same new tag cannot
    both insert it.
"""

from typing import List
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.models.account import utcnow
from socialhub.models.post import Hashtag, PostHashtag
from socialhub.repositories.base import BaseRepository


class HashtagRepository(BaseRepository[Hashtag]):

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Hashtag, session)

    async def record_usage(self, name: str) -> UUID:
        """Creates the tag with count 1 or bumps its count; returns its id."""
        table = Hashtag.__table__
        stmt = (
            self._dialect_insert(table)
            .values(id=uuid4(), name=name, count=1, created_at=utcnow())
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.name],
            set_={"count": table.c.count + 1},
        ).returning(table.c.id)
        result = await self._execute(stmt)
        return result.scalar_one()

    async def attach(self, post_id: UUID, hashtag_id: UUID) -> bool:
        return await self.insert_ignore(
            PostHashtag.__table__, {"post_id": post_id, "hashtag_id": hashtag_id}
        )

    async def search(self, query: str, limit: int) -> List[Hashtag]:
        """Tags containing `query`, most used first."""
        result = await self._execute(
            select(Hashtag)
            .where(Hashtag.name.icontains(query.lstrip("#"), autoescape=True))
            .order_by(Hashtag.count.desc(), Hashtag.name)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def trending(self, limit: int) -> List[Hashtag]:
        result = await self._execute(
            select(Hashtag).order_by(Hashtag.count.desc(), Hashtag.name).limit(limit)
        )
        return list(result.scalars().all())
