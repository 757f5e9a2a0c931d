"""
SocialHub Backend — Comment Repository
========================================

What:  ContentStore for comments plus the thread queries: top-level pages,
       first replies per parent, reply counts, and subtree size on delete.

Thread Shape:
    Top-level comments newest first; under each, its first replies oldest
    first. Replies are fetched for the whole page in one query and cut to
    `per_parent` in Python, so a page costs a fixed number of queries.
"""

from collections import defaultdict
from typing import Dict, List, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.models.comment import Comment
from socialhub.repositories.content_store import ContentStore


class CommentRepository(ContentStore[Comment]):

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Comment)

    async def top_level_page(self, post_id: UUID, offset: int, limit: int) -> List[Comment]:
        result = await self._execute(
            select(Comment)
            .where(Comment.post_id == post_id, Comment.parent_id.is_(None))
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count_top_level(self, post_id: UUID) -> int:
        result = await self._execute(
            select(func.count())
            .select_from(Comment)
            .where(Comment.post_id == post_id, Comment.parent_id.is_(None))
        )
        return result.scalar() or 0

    async def first_replies(
        self, parent_ids: Sequence[UUID], per_parent: int
    ) -> Dict[UUID, List[Comment]]:
        """Oldest `per_parent` replies for each parent id."""
        grouped: Dict[UUID, List[Comment]] = defaultdict(list)
        if not parent_ids:
            return grouped
        result = await self._execute(
            select(Comment)
            .where(Comment.parent_id.in_(list(parent_ids)))
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        for reply in result.scalars().all():
            bucket = grouped[reply.parent_id]
            if len(bucket) < per_parent:
                bucket.append(reply)
        return grouped

    async def reply_counts(self, parent_ids: Sequence[UUID]) -> Dict[UUID, int]:
        if not parent_ids:
            return {}
        result = await self._execute(
            select(Comment.parent_id, func.count())
            .where(Comment.parent_id.in_(list(parent_ids)))
            .group_by(Comment.parent_id)
        )
        return {parent_id: count for parent_id, count in result.all()}

    async def reply_page(self, parent_id: UUID, offset: int, limit: int) -> List[Comment]:
        result = await self._execute(
            select(Comment)
            .where(Comment.parent_id == parent_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def latest_top_level(self, post_id: UUID, limit: int) -> List[Comment]:
        return await self.top_level_page(post_id, offset=0, limit=limit)
