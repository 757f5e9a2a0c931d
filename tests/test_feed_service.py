"""
SocialHub Backend — Feed Service Tests
========================================

What we test:
    ✅ Feed = viewer's own posts + followees' posts, nobody else's
    ✅ A followee's private post is hidden; the viewer's own private post is shown
    ✅ Newest first, offset pagination, ceil(total / limit) pages
    ✅ A viewer with no followees sees only their own posts
    ✅ is_liked reflects the viewer's likes
    ✅ Profile grids hide other accounts' private posts
"""

import pytest

from socialhub.exceptions import NotFoundError
from socialhub.models import Post
from socialhub.repositories.account_directory import AccountDirectory
from socialhub.repositories.content_store import LIKES, ContentStore
from socialhub.services.feed_service import FeedService


async def _follow(db_session, follower, followee):
    await AccountDirectory(db_session).create_follow_edge_if_absent(follower.id, followee.id)
    await db_session.commit()


class TestGetFeed:

    def setup_method(self):
        self.service = FeedService()

    @pytest.mark.asyncio
    async def test_includes_own_and_followee_posts_only(self, db_session, make_account, make_post):
        alice = await make_account("alice")
        bob = await make_account("bob")
        carol = await make_account("carol")
        await _follow(db_session, alice, bob)

        await make_post(alice, "from alice", minutes=1)
        await make_post(bob, "from bob", minutes=2)
        await make_post(carol, "from carol", minutes=3)

        page = await self.service.get_feed(db_session, alice.id)

        assert [p.content for p in page.posts] == ["from bob", "from alice"]
        assert page.pagination.total == 2

    @pytest.mark.asyncio
    async def test_private_posts_visible_to_owner_only(self, db_session, make_account, make_post):
        alice = await make_account("alice")
        bob = await make_account("bob")
        await _follow(db_session, alice, bob)

        await make_post(bob, "bob public", minutes=1)
        await make_post(bob, "bob private", minutes=2, is_public=False)
        await make_post(alice, "alice private", minutes=3, is_public=False)

        page = await self.service.get_feed(db_session, alice.id)

        assert [p.content for p in page.posts] == ["alice private", "bob public"]
        assert page.pagination.total == 2

    @pytest.mark.asyncio
    async def test_second_page_of_twenty_five(self, db_session, make_account, make_post):
        alice = await make_account("alice")
        bob = await make_account("bob")
        await _follow(db_session, alice, bob)
        for i in range(25):
            await make_post(bob, f"post {i}", minutes=i)

        page = await self.service.get_feed(db_session, alice.id, page=2, limit=10)

        # Newest first: page 1 holds posts 24..15, page 2 holds 14..5
        assert [p.content for p in page.posts] == [f"post {i}" for i in range(14, 4, -1)]
        assert page.pagination.total == 25
        assert page.pagination.total_pages == 3
        assert page.pagination.page == 2

    @pytest.mark.asyncio
    async def test_page_past_the_end_is_empty(self, db_session, make_account, make_post):
        alice = await make_account("alice")
        await make_post(alice, "only one")

        page = await self.service.get_feed(db_session, alice.id, page=5, limit=10)

        assert page.posts == []
        assert page.pagination.total == 1

    @pytest.mark.asyncio
    async def test_no_followees_sees_only_own_posts(self, db_session, make_account, make_post):
        alice = await make_account("alice")
        bob = await make_account("bob")
        await make_post(alice, "mine", minutes=1)
        await make_post(bob, "not followed", minutes=2)

        page = await self.service.get_feed(db_session, alice.id)

        assert [p.content for p in page.posts] == ["mine"]

    @pytest.mark.asyncio
    async def test_unfollow_removes_posts_from_feed(self, db_session, make_account, make_post):
        alice = await make_account("alice")
        bob = await make_account("bob")
        await _follow(db_session, alice, bob)
        await make_post(bob, "from bob")

        await AccountDirectory(db_session).delete_follow_edge(alice.id, bob.id)
        await db_session.commit()

        page = await self.service.get_feed(db_session, alice.id)
        assert page.posts == []

    @pytest.mark.asyncio
    async def test_is_liked_annotation(self, db_session, make_account, make_post):
        alice = await make_account("alice")
        liked = await make_post(alice, "liked", minutes=1)
        await make_post(alice, "not liked", minutes=2)
        await ContentStore(db_session, Post).create_edge_if_absent(LIKES, liked.id, alice.id)
        await db_session.commit()

        page = await self.service.get_feed(db_session, alice.id)

        flags = {p.content: p.is_liked for p in page.posts}
        assert flags == {"liked": True, "not liked": False}


class TestUserPosts:

    def setup_method(self):
        self.service = FeedService()

    @pytest.mark.asyncio
    async def test_hides_private_posts_from_other_viewers(self, db_session, make_account, make_post):
        alice = await make_account("alice")
        bob = await make_account("bob")
        await make_post(bob, "public", minutes=1)
        await make_post(bob, "private", minutes=2, is_public=False)

        as_alice = await self.service.user_posts(db_session, "bob", alice.id)
        as_bob = await self.service.user_posts(db_session, "bob", bob.id)

        assert [p.content for p in as_alice.posts] == ["public"]
        assert [p.content for p in as_bob.posts] == ["private", "public"]

    @pytest.mark.asyncio
    async def test_unknown_username(self, db_session, make_account):
        alice = await make_account("alice")
        with pytest.raises(NotFoundError):
            await self.service.user_posts(db_session, "nobody", alice.id)
