"""
SocialHub Backend — Post Service
==================================

What:  Post creation (with hashtag and mention extraction), post detail,
       like/unlike, and owner-only deletion.
Who:   Post routes.

Like Workflow:
    1. Post must exist (NotFoundError)
    2. INSERT post_likes ... ON CONFLICT DO NOTHING RETURNING
       → no row: ConflictError (already liked)
       → new row: likes_count = likes_count + 1 in the same transaction
    3. COMMIT
    4. LIKE notification to the post owner (skipped when liking your own post)

Post Detail:
    Every fetch increments views_count, including repeat fetches by the
    same viewer and fetches by the owner.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.exceptions import ConflictError, NotFoundError, ValidationError
from socialhub.models.notification import NotificationKind
from socialhub.models.post import Post, PostMention
from socialhub.repositories.account_directory import AccountDirectory
from socialhub.repositories.comment_repository import CommentRepository
from socialhub.repositories.content_store import LIKES, ContentStore
from socialhub.repositories.hashtag_repository import HashtagRepository
from socialhub.schemas.comment import CommentResponse
from socialhub.schemas.post import LikeResult, PostCreateRequest, PostDetail, PostResponse
from socialhub.services.base import NotifyingService
from socialhub.services.notification_service import NotificationEvent
from socialhub.utils.text import extract_hashtags, extract_mentions

logger = logging.getLogger(__name__)

# Top-level comments embedded in the post detail view
DETAIL_COMMENT_COUNT = 3


class PostService(NotifyingService):

    async def create_post(
        self, db: AsyncSession, owner_id: UUID, request: PostCreateRequest
    ) -> PostResponse:
        content = (request.content or "").strip() or None
        if content is None and not request.media_urls:
            raise ValidationError("Post must have content or media", field="content")

        store = ContentStore(db, Post)
        post = await store.create_item(
            owner_id=owner_id,
            content=content,
            media_urls=list(request.media_urls),
            media_type=request.media_type,
            location=request.location,
            is_public=request.is_public,
            comments_enabled=request.comments_enabled,
        )

        hashtags = HashtagRepository(db)
        for name in extract_hashtags(content):
            await hashtags.attach(post.id, await hashtags.record_usage(name))

        events = await self._record_mentions(db, post, owner_id, extract_mentions(content))

        logger.info(
            "Post %s created by %s (%d mentions)", post.id, owner_id, len(events)
        )
        await self._commit_and_notify(db, *events)
        return PostResponse.model_validate(post)

    async def _record_mentions(
        self, db: AsyncSession, post: Post, owner_id: UUID, usernames: List[str]
    ) -> List[NotificationEvent]:
        events = []
        store = ContentStore(db, Post)
        for account in await AccountDirectory(db).find_by_usernames(usernames):
            created = await store.insert_ignore(
                PostMention.__table__, {"post_id": post.id, "account_id": account.id}
            )
            if created:
                events.append(
                    NotificationEvent(
                        actor_id=owner_id,
                        recipient_id=account.id,
                        kind=NotificationKind.MENTION,
                        entity_id=post.id,
                    )
                )
        return events

    async def get_post(self, db: AsyncSession, post_id: UUID, viewer_id: UUID) -> PostDetail:
        store = ContentStore(db, Post)
        post = await store.require_item(post_id)
        if not post.is_public and post.owner_id != viewer_id:
            # Private posts are indistinguishable from missing ones
            raise NotFoundError("post", str(post_id))

        views = await store.increment_counter(post_id, "views_count", 1)
        comments = await CommentRepository(db).latest_top_level(post_id, DETAIL_COMMENT_COUNT)

        detail = PostDetail.model_validate(post)
        detail.views_count = views if views is not None else detail.views_count
        detail.is_liked = await store.exists_edge(LIKES, post_id, viewer_id)
        detail.latest_comments = [CommentResponse.model_validate(c) for c in comments]
        return detail

    async def like(self, db: AsyncSession, post_id: UUID, account_id: UUID) -> LikeResult:
        store = ContentStore(db, Post)
        post = await store.require_item(post_id)

        if not await store.create_edge_if_absent(LIKES, post_id, account_id):
            raise ConflictError(
                "You have already liked this post", context={"post_id": str(post_id)}
            )

        likes = await store.counter_value(post_id, "likes_count")
        await self._commit_and_notify(
            db,
            NotificationEvent(
                actor_id=account_id,
                recipient_id=post.owner_id,
                kind=NotificationKind.LIKE,
                entity_id=post_id,
            ),
        )
        return LikeResult(post_id=post_id, is_liked=True, likes_count=likes)

    async def unlike(self, db: AsyncSession, post_id: UUID, account_id: UUID) -> LikeResult:
        store = ContentStore(db, Post)
        await store.require_item(post_id)

        if not await store.delete_edge(LIKES, post_id, account_id):
            raise NotFoundError("like", str(post_id))

        likes = await store.counter_value(post_id, "likes_count")
        return LikeResult(post_id=post_id, is_liked=False, likes_count=likes)

    async def delete_post(self, db: AsyncSession, post_id: UUID, requester_id: UUID) -> None:
        await ContentStore(db, Post).delete_item(post_id, requester_id)
