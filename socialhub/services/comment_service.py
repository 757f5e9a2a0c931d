"""
SocialHub Backend — Comment Service
=====================================

What:  Commenting, threaded listing, and owner-only deletion, keeping
       posts.comments_count equal to the number of comment rows.
Who:   Comment routes; PostService reads the latest comments through
       CommentRepository directly.

Threading:
    One level deep. A reply to a reply is attached to the top-level
    comment it ultimately belongs to.

Counter Maintenance:
    create  → comments_count + 1            (same transaction as the INSERT)
    delete  → comments_count - (1 + replies) (replies go with ON DELETE CASCADE)
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.config import settings
from socialhub.exceptions import ForbiddenError, ValidationError
from socialhub.models.notification import NotificationKind
from socialhub.models.post import Post
from socialhub.repositories.comment_repository import CommentRepository
from socialhub.repositories.content_store import ContentStore
from socialhub.schemas.comment import (
    CommentCreateRequest,
    CommentPage,
    CommentResponse,
    CommentThread,
    ReplyPage,
)
from socialhub.schemas.common import Pagination
from socialhub.services.base import NotifyingService
from socialhub.services.notification_service import NotificationEvent

logger = logging.getLogger(__name__)

# Replies embedded under each top-level comment in a listing
PREVIEW_REPLIES = 3


class CommentService(NotifyingService):

    async def create_comment(
        self, db: AsyncSession, post_id: UUID, owner_id: UUID, request: CommentCreateRequest
    ) -> CommentResponse:
        content = (request.content or "").strip()
        if not content:
            raise ValidationError("Comment content is required", field="content")

        posts = ContentStore(db, Post)
        post = await posts.require_item(post_id)
        if not post.comments_enabled:
            raise ForbiddenError(
                "Comments are disabled for this post", context={"post_id": str(post_id)}
            )

        comments = CommentRepository(db)
        parent_id = None
        if request.parent_id is not None:
            parent = await comments.get_item(request.parent_id)
            if parent is None or parent.post_id != post_id:
                raise ValidationError(
                    "Parent comment does not belong to this post", field="parent_id"
                )
            parent_id = parent.parent_id or parent.id

        comment = await comments.create_item(
            post_id=post_id, owner_id=owner_id, parent_id=parent_id, content=content
        )
        await posts.increment_counter(post_id, "comments_count", 1)

        logger.info("Comment %s on post %s by %s", comment.id, post_id, owner_id)
        await self._commit_and_notify(
            db,
            NotificationEvent(
                actor_id=owner_id,
                recipient_id=post.owner_id,
                kind=NotificationKind.COMMENT,
                entity_id=post_id,
            ),
        )
        return CommentResponse.model_validate(comment)

    async def list_comments(
        self, db: AsyncSession, post_id: UUID, page: int = 1, limit: Optional[int] = None
    ) -> CommentPage:
        """Top-level comments newest first, each with its first replies."""
        limit = limit or settings.default_page_size
        await ContentStore(db, Post).require_item(post_id)

        comments = CommentRepository(db)
        top = await comments.top_level_page(post_id, offset=(page - 1) * limit, limit=limit)
        total = await comments.count_top_level(post_id)

        ids = [c.id for c in top]
        replies = await comments.first_replies(ids, PREVIEW_REPLIES)
        counts = await comments.reply_counts(ids)

        threads = []
        for comment in top:
            thread = CommentThread.model_validate(comment)
            thread.replies = [CommentResponse.model_validate(r) for r in replies.get(comment.id, [])]
            thread.replies_count = counts.get(comment.id, 0)
            threads.append(thread)

        return CommentPage(comments=threads, pagination=Pagination.build(page, limit, total))

    async def list_replies(
        self, db: AsyncSession, comment_id: UUID, page: int = 1, limit: Optional[int] = None
    ) -> ReplyPage:
        limit = limit or settings.default_page_size
        comments = CommentRepository(db)
        await comments.require_item(comment_id)

        rows = await comments.reply_page(comment_id, offset=(page - 1) * limit, limit=limit)
        total = (await comments.reply_counts([comment_id])).get(comment_id, 0)
        return ReplyPage(
            replies=[CommentResponse.model_validate(r) for r in rows],
            pagination=Pagination.build(page, limit, total),
        )

    async def delete_comment(self, db: AsyncSession, comment_id: UUID, requester_id: UUID) -> None:
        comments = CommentRepository(db)
        comment = await comments.require_item(comment_id)
        replies = (await comments.reply_counts([comment_id])).get(comment_id, 0)

        await comments.delete_item(comment_id, requester_id)
        await ContentStore(db, Post).increment_counter(
            comment.post_id, "comments_count", -(1 + replies)
        )
