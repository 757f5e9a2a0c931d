"""
SocialHub Backend — Content Store
===================================

What:  Generic repository for owned content (posts, comments, stories,
       messages): create, fetch, owner-checked delete, owner-set pages and
       counts, SQL-side counter updates, and unique edge sets.
How:   `ContentStore(session, Post)`; one instance per model per unit of work.
Who:   PostService, CommentService, StoryService, FeedService.

Edge Sets:
    An EdgeSet describes a uniqueness-constrained (item, actor) table and
    the counter it drives:

        LIKES        post_likes  (post_id, account_id)  → posts.likes_count
        STORY_VIEWS  story_views (story_id, viewer_id)  → stories.views_count

    `create_edge_if_absent` and `delete_edge` move the counter by ±1 in the
    same transaction as the edge row, and only when the edge row actually
    changed, so the stored counter always equals the edge count.

Counter Updates:
    UPDATE posts SET likes_count = likes_count + 1 WHERE id = :id
    The arithmetic happens in SQL; two concurrent increments both land.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Set, Type
from uuid import UUID

from sqlalchemy import ColumnElement, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.database import Base
from socialhub.exceptions import ForbiddenError, NotFoundError
from socialhub.models.post import PostLike
from socialhub.models.story import StoryView
from socialhub.repositories.account_directory import OwnerSet
from socialhub.repositories.base import BaseRepository, ModelType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EdgeSet:
    """A unique (item, actor) edge table and the item counter it maintains."""

    model: Type[Base]
    item_column: str
    actor_column: str
    counter: Optional[str] = None

    @property
    def item_attr(self):
        return getattr(self.model, self.item_column)

    @property
    def actor_attr(self):
        return getattr(self.model, self.actor_column)


LIKES = EdgeSet(PostLike, item_column="post_id", actor_column="account_id", counter="likes_count")
STORY_VIEWS = EdgeSet(
    StoryView, item_column="story_id", actor_column="viewer_id", counter="views_count"
)


class ContentStore(BaseRepository[ModelType]):
    """
    Repository for one owned-content model.

    The model must have `id`, `owner_id` and `created_at` columns.
    Messages have no `owner_id`; only the plain CRUD methods apply to them.
    """

    def __init__(self, session: AsyncSession, model: Type[ModelType]) -> None:
        super().__init__(model, session)
        self.resource = model.__name__.lower()

    # ═══════════════════════════════════════════════════════════════════════
    # ITEMS
    # ═══════════════════════════════════════════════════════════════════════

    async def create_item(self, **fields: Any) -> ModelType:
        return await self.create(**fields)

    async def get_item(self, item_id: UUID) -> Optional[ModelType]:
        return await self.get(item_id)

    async def require_item(self, item_id: UUID) -> ModelType:
        """Like get_item, but raises NotFoundError for a missing row."""
        item = await self.get(item_id)
        if item is None:
            raise NotFoundError(self.resource, str(item_id))
        return item

    async def delete_item(self, item_id: UUID, requester_id: UUID) -> ModelType:
        """
        Deletes an item its owner asked to delete.

        Raises:
            NotFoundError:  no such item
            ForbiddenError: requester is not the owner
        """
        item = await self.require_item(item_id)
        if item.owner_id != requester_id:
            raise ForbiddenError(
                f"You can only delete your own {self.resource}s",
                context={"resource": self.resource, "resource_id": str(item_id)},
            )
        await self.remove(item)
        logger.info("Deleted %s %s", self.resource, item_id)
        return item

    async def count_by_owner_set(self, owners: OwnerSet, *filters: ColumnElement[bool]) -> int:
        """
        SQL Generated:
            SELECT count(*) FROM <table> WHERE owner_id IN (<set>) AND <filters>
        """
        stmt = (
            select(func.count())
            .select_from(self.model)
            .where(owners.contains(self.model.owner_id), *filters)
        )
        result = await self._execute(stmt)
        return result.scalar() or 0

    async def page_by_owner_set(
        self,
        owners: OwnerSet,
        *filters: ColumnElement[bool],
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[ModelType]:
        """
        One page of items owned by `owners`, newest first.

        Ordering is `created_at DESC, id DESC`; the id tie-break keeps page
        boundaries stable when several items share a timestamp.
        """
        stmt = (
            select(self.model)
            .where(owners.contains(self.model.owner_id), *filters)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._execute(stmt)
        return list(result.scalars().all())

    async def find(self, *filters: ColumnElement[bool], limit: int) -> List[ModelType]:
        """Items matching `filters` regardless of owner, newest first."""
        result = await self._execute(
            select(self.model)
            .where(*filters)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def increment_counter(self, item_id: UUID, counter: str, delta: int = 1) -> Optional[int]:
        """
        Adds `delta` to a counter column in SQL and returns the new value
        (None if the item does not exist).
        """
        column = getattr(self.model, counter)
        stmt = (
            update(self.model)
            .where(self.model.id == item_id)
            .values({column: column + delta})
            .returning(column)
        )
        result = await self._execute(stmt)
        return result.scalar_one_or_none()

    async def counter_value(self, item_id: UUID, counter: str) -> int:
        """Current stored value of a counter column, read from the database."""
        result = await self._execute(
            select(getattr(self.model, counter)).where(self.model.id == item_id)
        )
        return result.scalar_one_or_none() or 0

    # ═══════════════════════════════════════════════════════════════════════
    # EDGE SETS
    # ═══════════════════════════════════════════════════════════════════════

    async def exists_edge(self, edges: EdgeSet, item_id: UUID, actor_id: UUID) -> bool:
        result = await self._execute(
            select(func.count())
            .select_from(edges.model)
            .where(edges.item_attr == item_id, edges.actor_attr == actor_id)
        )
        return (result.scalar() or 0) > 0

    async def existing_edges(
        self, edges: EdgeSet, item_ids: Iterable[UUID], actor_id: UUID
    ) -> Set[UUID]:
        """
        Which of `item_ids` the actor has an edge to, in one query.

        SQL Generated:
            SELECT post_id FROM post_likes
            WHERE account_id = :actor AND post_id IN (:id1, :id2, ...)
        """
        ids = list(item_ids)
        if not ids:
            return set()
        result = await self._execute(
            select(edges.item_attr).where(edges.actor_attr == actor_id, edges.item_attr.in_(ids))
        )
        return set(result.scalars().all())

    async def create_edge_if_absent(self, edges: EdgeSet, item_id: UUID, actor_id: UUID) -> bool:
        """
        Inserts the edge and bumps the counter if the edge is new.

        Returns:
            True when this call created the edge, False when it already existed
            (the counter is then left untouched).
        """
        created = await self.insert_ignore(
            edges.model.__table__,
            {edges.item_column: item_id, edges.actor_column: actor_id},
        )
        if created and edges.counter:
            await self.increment_counter(item_id, edges.counter, 1)
        return created

    async def delete_edge(self, edges: EdgeSet, item_id: UUID, actor_id: UUID) -> bool:
        """Removes the edge and decrements the counter; False if there was no edge."""
        result = await self._execute(
            delete(edges.model)
            .where(edges.item_attr == item_id, edges.actor_attr == actor_id)
            .execution_options(synchronize_session=False)
        )
        removed = result.rowcount > 0
        if removed and edges.counter:
            await self.increment_counter(item_id, edges.counter, -1)
        return removed
