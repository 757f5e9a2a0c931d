"""
SocialHub Backend — Search Service
====================================

What:  Account, post and hashtag search plus trending hashtags.
Who:   Search routes.

All matching is case-insensitive substring matching (ILIKE on
PostgreSQL, LIKE on SQLite). Only public posts are searchable.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.config import settings
from socialhub.exceptions import ValidationError
from socialhub.models.post import Post
from socialhub.repositories.account_directory import AccountDirectory
from socialhub.repositories.content_store import ContentStore
from socialhub.repositories.hashtag_repository import HashtagRepository
from socialhub.schemas.account import AccountSummary
from socialhub.schemas.post import PostResponse
from socialhub.schemas.search import HashtagResponse
from socialhub.services.feed_service import feed_service

logger = logging.getLogger(__name__)


def _require_query(query: Optional[str]) -> str:
    query = (query or "").strip()
    if not query:
        raise ValidationError("Search query is required", field="query")
    return query


class SearchService:

    async def search_accounts(
        self, db: AsyncSession, query: Optional[str], viewer_id: UUID, limit: Optional[int] = None
    ) -> List[AccountSummary]:
        query = _require_query(query)
        accounts = await AccountDirectory(db).search(
            query, exclude_id=viewer_id, limit=limit or settings.search_result_limit
        )
        return [AccountSummary.model_validate(a) for a in accounts]

    async def search_posts(
        self, db: AsyncSession, query: Optional[str], viewer_id: UUID, limit: Optional[int] = None
    ) -> List[PostResponse]:
        query = _require_query(query)
        posts = await ContentStore(db, Post).find(
            Post.is_public.is_(True),
            Post.content.icontains(query, autoescape=True),
            limit=limit or settings.search_result_limit,
        )
        return await feed_service.annotate(db, posts, viewer_id)

    async def search_hashtags(
        self, db: AsyncSession, query: Optional[str], limit: Optional[int] = None
    ) -> List[HashtagResponse]:
        query = _require_query(query)
        tags = await HashtagRepository(db).search(query, limit or settings.search_result_limit)
        return [HashtagResponse.model_validate(t) for t in tags]

    async def trending(self, db: AsyncSession, limit: int = 10) -> List[HashtagResponse]:
        tags = await HashtagRepository(db).trending(limit)
        return [HashtagResponse.model_validate(t) for t in tags]


search_service = SearchService()
