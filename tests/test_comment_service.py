"""
SocialHub Backend — Comment Service Tests
===========================================

What we test:
    ✅ Creating a comment bumps comments_count and notifies the post owner
    ✅ Comments disabled → 403; empty content → 400
    ✅ Replies attach to the top-level comment; foreign parents are rejected
    ✅ Thread listing previews the first replies and reports the reply count
    ✅ Deleting a comment removes it and its replies from the counter
"""

import pytest
from sqlalchemy import select

from socialhub.exceptions import ForbiddenError, ValidationError
from socialhub.models import Notification, NotificationKind, Post
from socialhub.repositories.content_store import ContentStore
from socialhub.schemas.comment import CommentCreateRequest
from socialhub.services.comment_service import CommentService


def _comment(content: str, parent_id=None) -> CommentCreateRequest:
    return CommentCreateRequest(content=content, parent_id=parent_id)


async def _comments_count(db_session, post_id) -> int:
    return await ContentStore(db_session, Post).counter_value(post_id, "comments_count")


class TestCreateComment:

    @pytest.mark.asyncio
    async def test_counts_and_notifies(self, db_session, make_account, make_post, dispatcher):
        owner = await make_account("owner")
        bob = await make_account("bob")
        post = await make_post(owner)

        comment = await CommentService(dispatcher).create_comment(
            db_session, post.id, bob.id, _comment("nice")
        )

        assert comment.owner.username == "bob"
        assert await _comments_count(db_session, post.id) == 1
        rows = (
            await db_session.execute(
                select(Notification).where(Notification.recipient_id == owner.id)
            )
        ).scalars().all()
        assert [r.kind for r in rows] == [NotificationKind.COMMENT]

    @pytest.mark.asyncio
    async def test_empty_content_rejected(self, db_session, make_account, make_post, dispatcher):
        owner = await make_account("owner")
        post = await make_post(owner)

        with pytest.raises(ValidationError):
            await CommentService(dispatcher).create_comment(
                db_session, post.id, owner.id, _comment("  ")
            )

    @pytest.mark.asyncio
    async def test_comments_disabled(self, db_session, make_account, make_post, dispatcher):
        owner = await make_account("owner")
        post = await make_post(owner, comments_enabled=False)

        with pytest.raises(ForbiddenError):
            await CommentService(dispatcher).create_comment(
                db_session, post.id, owner.id, _comment("hello")
            )

    @pytest.mark.asyncio
    async def test_reply_to_reply_attaches_to_top_level(
        self, db_session, make_account, make_post, dispatcher
    ):
        owner = await make_account("owner")
        post = await make_post(owner)
        service = CommentService(dispatcher)

        top = await service.create_comment(db_session, post.id, owner.id, _comment("top"))
        reply = await service.create_comment(db_session, post.id, owner.id, _comment("r1", top.id))
        nested = await service.create_comment(
            db_session, post.id, owner.id, _comment("r2", reply.id)
        )

        assert reply.parent_id == top.id
        assert nested.parent_id == top.id

    @pytest.mark.asyncio
    async def test_parent_from_another_post(self, db_session, make_account, make_post, dispatcher):
        owner = await make_account("owner")
        first = await make_post(owner, "first")
        second = await make_post(owner, "second")
        service = CommentService(dispatcher)
        top = await service.create_comment(db_session, first.id, owner.id, _comment("top"))

        with pytest.raises(ValidationError):
            await service.create_comment(db_session, second.id, owner.id, _comment("x", top.id))


class TestListing:

    @pytest.mark.asyncio
    async def test_thread_preview(self, db_session, make_account, make_post, dispatcher):
        owner = await make_account("owner")
        post = await make_post(owner)
        service = CommentService(dispatcher)

        top = await service.create_comment(db_session, post.id, owner.id, _comment("top"))
        for i in range(5):
            await service.create_comment(db_session, post.id, owner.id, _comment(f"r{i}", top.id))

        page = await service.list_comments(db_session, post.id)

        assert len(page.comments) == 1
        thread = page.comments[0]
        assert thread.replies_count == 5
        assert [r.content for r in thread.replies] == ["r0", "r1", "r2"]
        assert page.pagination.total == 1

        replies = await service.list_replies(db_session, top.id, page=2, limit=2)
        assert [r.content for r in replies.replies] == ["r2", "r3"]
        assert replies.pagination.total == 5


class TestDeleteComment:

    @pytest.mark.asyncio
    async def test_removes_replies_from_counter(
        self, db_session, make_account, make_post, dispatcher
    ):
        owner = await make_account("owner")
        post = await make_post(owner)
        service = CommentService(dispatcher)

        top = await service.create_comment(db_session, post.id, owner.id, _comment("top"))
        await service.create_comment(db_session, post.id, owner.id, _comment("r1", top.id))
        await service.create_comment(db_session, post.id, owner.id, _comment("r2", top.id))
        await service.create_comment(db_session, post.id, owner.id, _comment("other"))
        assert await _comments_count(db_session, post.id) == 4

        await service.delete_comment(db_session, top.id, owner.id)
        await db_session.commit()

        assert await _comments_count(db_session, post.id) == 1
        page = await service.list_comments(db_session, post.id)
        assert [c.content for c in page.comments] == ["other"]

    @pytest.mark.asyncio
    async def test_only_owner_can_delete(self, db_session, make_account, make_post, dispatcher):
        owner = await make_account("owner")
        other = await make_account("other")
        post = await make_post(owner)
        service = CommentService(dispatcher)
        comment = await service.create_comment(db_session, post.id, owner.id, _comment("mine"))

        with pytest.raises(ForbiddenError):
            await service.delete_comment(db_session, comment.id, other.id)
