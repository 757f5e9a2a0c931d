"""
SocialHub Backend — Feed Assembly
===================================

What:  Builds one page of a viewer's home feed and of a single account's
       post grid, annotated with the viewer's like state.
How:   Pure read-side aggregation over AccountDirectory and ContentStore;
       it writes nothing.
Who:   Post routes (GET /api/posts/feed, GET /api/posts/user/{username}).

Feed Algorithm:
    1. Visibility set V = {viewer} ∪ followees(viewer), as a sub-select
    2. Posts owned by V where (is_public OR owner_id = viewer),
       ORDER BY created_at DESC, id DESC, OFFSET (page-1)*limit LIMIT limit
    3. One batched query: which of the page's post ids the viewer likes
    4. Separate COUNT over the same predicate → total, total_pages

The page query and the count query are independent reads; a post
created between them can make total disagree with the rows by one.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.config import settings
from socialhub.exceptions import NotFoundError
from socialhub.models.post import Post
from socialhub.repositories.account_directory import AccountDirectory, OwnerSet
from socialhub.repositories.content_store import LIKES, ContentStore
from socialhub.schemas.common import Pagination
from socialhub.schemas.post import PostPage, PostResponse

logger = logging.getLogger(__name__)


def visible_to(viewer_id: UUID):
    """Private posts are visible to their owner only."""
    return or_(Post.is_public.is_(True), Post.owner_id == viewer_id)


class FeedService:

    async def annotate(
        self, db: AsyncSession, posts: List[Post], viewer_id: UUID
    ) -> List[PostResponse]:
        """Post views with `is_liked` filled from one batched edge lookup."""
        liked = await ContentStore(db, Post).existing_edges(LIKES, [p.id for p in posts], viewer_id)
        views = []
        for post in posts:
            view = PostResponse.model_validate(post)
            view.is_liked = post.id in liked
            views.append(view)
        return views

    async def get_feed(
        self,
        db: AsyncSession,
        viewer_id: UUID,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> PostPage:
        limit = limit or settings.feed_page_size
        owners = AccountDirectory(db).visibility_set(viewer_id)
        return await self._page(db, owners, viewer_id, page, limit)

    async def user_posts(
        self,
        db: AsyncSession,
        username: str,
        viewer_id: UUID,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> PostPage:
        """One account's posts; private ones only when the viewer owns them."""
        limit = limit or settings.default_page_size
        account = await AccountDirectory(db).find_by_username(username)
        if account is None:
            raise NotFoundError("account", username)
        return await self._page(db, OwnerSet.of(account.id), viewer_id, page, limit)

    async def _page(
        self, db: AsyncSession, owners: OwnerSet, viewer_id: UUID, page: int, limit: int
    ) -> PostPage:
        store = ContentStore(db, Post)
        visibility = visible_to(viewer_id)

        posts = await store.page_by_owner_set(
            owners, visibility, offset=(page - 1) * limit, limit=limit
        )
        total = await store.count_by_owner_set(owners, visibility)

        logger.debug(
            "Feed page %d for %s: %d of %d posts", page, viewer_id, len(posts), total
        )
        return PostPage(
            posts=await self.annotate(db, posts, viewer_id),
            pagination=Pagination.build(page, limit, total),
        )


feed_service = FeedService()
