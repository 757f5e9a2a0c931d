"""
SocialHub Backend — User Service Tests
========================================

What we test:
    ✅ Self-follow → 400, unknown account → 404, duplicate follow → 409
    ✅ Follow notifies the followee (FOLLOW)
    ✅ Unfollow without a follow → 404
    ✅ Profile stats and is_following
    ✅ Follower / following pages
"""

from uuid import uuid4

import pytest
from sqlalchemy import select

from socialhub.exceptions import ConflictError, NotFoundError, ValidationError
from socialhub.models import Notification, NotificationKind
from socialhub.services.user_service import UserService


class TestFollow:

    @pytest.mark.asyncio
    async def test_cannot_follow_yourself(self, db_session, make_account, dispatcher):
        alice = await make_account("alice")
        with pytest.raises(ValidationError):
            await UserService(dispatcher).follow(db_session, alice.id, alice.id)

    @pytest.mark.asyncio
    async def test_unknown_account(self, db_session, make_account, dispatcher):
        alice = await make_account("alice")
        with pytest.raises(NotFoundError):
            await UserService(dispatcher).follow(db_session, alice.id, uuid4())

    @pytest.mark.asyncio
    async def test_duplicate_follow_is_a_conflict(self, db_session, make_account, dispatcher):
        alice = await make_account("alice")
        bob = await make_account("bob")
        service = UserService(dispatcher)

        result = await service.follow(db_session, alice.id, bob.id)
        assert result.is_following is True

        with pytest.raises(ConflictError):
            await service.follow(db_session, alice.id, bob.id)

    @pytest.mark.asyncio
    async def test_follow_notifies_followee(self, db_session, make_account, dispatcher):
        alice = await make_account("alice")
        bob = await make_account("bob")

        await UserService(dispatcher).follow(db_session, alice.id, bob.id)

        rows = (
            await db_session.execute(select(Notification).where(Notification.recipient_id == bob.id))
        ).scalars().all()
        assert len(rows) == 1
        assert rows[0].kind == NotificationKind.FOLLOW
        assert rows[0].sender_id == alice.id

    @pytest.mark.asyncio
    async def test_unfollow_without_follow(self, db_session, make_account, dispatcher):
        alice = await make_account("alice")
        bob = await make_account("bob")
        with pytest.raises(NotFoundError):
            await UserService(dispatcher).unfollow(db_session, alice.id, bob.id)

    @pytest.mark.asyncio
    async def test_follow_unfollow_follow(self, db_session, make_account, dispatcher):
        alice = await make_account("alice")
        bob = await make_account("bob")
        service = UserService(dispatcher)

        await service.follow(db_session, alice.id, bob.id)
        result = await service.unfollow(db_session, alice.id, bob.id)
        await db_session.commit()
        assert result.is_following is False

        again = await service.follow(db_session, alice.id, bob.id)
        assert again.is_following is True


class TestProfiles:

    @pytest.mark.asyncio
    async def test_stats_and_is_following(self, db_session, make_account, make_post, dispatcher):
        alice = await make_account("alice")
        bob = await make_account("bob")
        carol = await make_account("carol")
        service = UserService(dispatcher)
        await service.follow(db_session, alice.id, bob.id)
        await service.follow(db_session, carol.id, bob.id)
        await service.follow(db_session, bob.id, carol.id)
        await make_post(bob, "one")
        await make_post(bob, "two", minutes=1)

        profile = await service.get_profile(db_session, "bob", alice.id)

        assert profile.stats.posts == 2
        assert profile.stats.followers == 2
        assert profile.stats.following == 1
        assert profile.is_following is True

        own = await service.get_profile(db_session, "bob", bob.id)
        assert own.is_following is None

    @pytest.mark.asyncio
    async def test_unknown_username(self, db_session, make_account, dispatcher):
        alice = await make_account("alice")
        with pytest.raises(NotFoundError):
            await UserService(dispatcher).get_profile(db_session, "nobody", alice.id)

    @pytest.mark.asyncio
    async def test_follower_and_following_pages(self, db_session, make_account, dispatcher):
        bob = await make_account("bob")
        service = UserService(dispatcher)
        for name in ("alice", "carol", "dave"):
            fan = await make_account(name)
            await service.follow(db_session, fan.id, bob.id)

        followers = await service.followers(db_session, "bob", page=1, limit=2)
        following = await service.following(db_session, "alice")

        assert len(followers.accounts) == 2
        assert followers.pagination.total == 3
        assert followers.pagination.total_pages == 2
        assert [a.username for a in following.accounts] == ["bob"]
