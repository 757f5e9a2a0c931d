"""
SocialHub Backend — Story Service Tests
=========================================

What we test:
    ✅ Stories live for exactly 24 hours (T+23h visible, T+25h gone)
    ✅ Only the viewer's and followees' stories are listed
    ✅ Groups follow first-seen owner order over newest-first stories
    ✅ Viewing is idempotent per viewer; expired stories cannot be viewed
    ✅ Concurrent first views by one viewer record a single view
"""

import asyncio
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest

from socialhub.exceptions import ForbiddenError, NotFoundError, ValidationError
from socialhub.models import Story
from socialhub.repositories.account_directory import AccountDirectory
from socialhub.repositories.content_store import ContentStore
from socialhub.schemas.story import StoryCreateRequest
from socialhub.services.story_service import STORY_LIFETIME, StoryService, group_stories_by_owner

T = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def _story_request(caption: str = None) -> StoryCreateRequest:
    return StoryCreateRequest(media_url="https://cdn.example.com/s.jpg", caption=caption)


class TestGroupStoriesByOwner:

    def test_first_seen_owner_order(self):
        a, b = uuid4(), uuid4()
        stories = [
            SimpleNamespace(id=1, owner_id=b),
            SimpleNamespace(id=2, owner_id=a),
            SimpleNamespace(id=3, owner_id=b),
        ]

        groups = group_stories_by_owner(stories)

        assert [owner for owner, _ in groups] == [b, a]
        assert [s.id for s in groups[0][1]] == [1, 3]

    def test_empty(self):
        assert group_stories_by_owner([]) == []


class TestStoryLifetime:

    def setup_method(self):
        self.service = StoryService()

    @pytest.mark.asyncio
    async def test_expires_twenty_four_hours_after_creation(self, db_session, make_account):
        alice = await make_account("alice")

        story = await self.service.create_story(db_session, alice.id, _story_request(), now=T)

        assert story.expires_at.replace(tzinfo=None) == (T + STORY_LIFETIME).replace(tzinfo=None)

    @pytest.mark.asyncio
    async def test_visible_at_23h_gone_at_25h(self, db_session, make_account):
        alice = await make_account("alice")
        await self.service.create_story(db_session, alice.id, _story_request(), now=T)
        await db_session.commit()

        at_23h = await self.service.list_visible(db_session, alice.id, now=T + timedelta(hours=23))
        at_25h = await self.service.list_visible(db_session, alice.id, now=T + timedelta(hours=25))

        assert len(at_23h) == 1
        assert len(at_23h[0].stories) == 1
        assert at_25h == []

    @pytest.mark.asyncio
    async def test_media_is_required(self, db_session, make_account):
        alice = await make_account("alice")
        with pytest.raises(ValidationError):
            await self.service.create_story(db_session, alice.id, StoryCreateRequest(), now=T)


class TestListVisible:

    def setup_method(self):
        self.service = StoryService()

    @pytest.mark.asyncio
    async def test_groups_by_owner_in_first_seen_order(self, db_session, make_account):
        alice = await make_account("alice")
        bob = await make_account("bob")
        carol = await make_account("carol")
        await AccountDirectory(db_session).create_follow_edge_if_absent(alice.id, bob.id)

        await self.service.create_story(db_session, bob.id, _story_request("b1"), now=T)
        await self.service.create_story(
            db_session, alice.id, _story_request("a1"), now=T + timedelta(minutes=1)
        )
        await self.service.create_story(
            db_session, bob.id, _story_request("b2"), now=T + timedelta(minutes=2)
        )
        await self.service.create_story(
            db_session, carol.id, _story_request("c1"), now=T + timedelta(minutes=3)
        )
        await db_session.commit()

        groups = await self.service.list_visible(db_session, alice.id, now=T + timedelta(hours=1))

        assert [g.owner.username for g in groups] == ["bob", "alice"]
        assert [s.caption for s in groups[0].stories] == ["b2", "b1"]
        assert [s.caption for s in groups[1].stories] == ["a1"]

    @pytest.mark.asyncio
    async def test_is_viewed_flag(self, db_session, make_account):
        alice = await make_account("alice")
        story = await self.service.create_story(db_session, alice.id, _story_request(), now=T)
        await db_session.commit()
        await self.service.view_story(db_session, story.id, alice.id, now=T + timedelta(hours=1))
        await db_session.commit()

        groups = await self.service.list_visible(db_session, alice.id, now=T + timedelta(hours=2))

        assert groups[0].stories[0].is_viewed is True


class TestViewStory:

    def setup_method(self):
        self.service = StoryService()

    @pytest.mark.asyncio
    async def test_repeat_views_are_a_no_op(self, db_session, make_account):
        alice = await make_account("alice")
        bob = await make_account("bob")
        story = await self.service.create_story(db_session, alice.id, _story_request(), now=T)
        await db_session.commit()
        later = T + timedelta(hours=1)

        first = await self.service.view_story(db_session, story.id, bob.id, now=later)
        second = await self.service.view_story(db_session, story.id, bob.id, now=later)

        assert first.recorded is True
        assert first.views_count == 1
        assert second.recorded is False
        assert second.views_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_first_views_record_once(self, database, db_session, make_account):
        alice = await make_account("alice")
        bob = await make_account("bob")
        story = await self.service.create_story(db_session, alice.id, _story_request(), now=T)
        await db_session.commit()
        later = T + timedelta(hours=1)

        async def view():
            async with database.session() as session:
                result = await self.service.view_story(session, story.id, bob.id, now=later)
                await session.commit()
                return result.recorded

        results = await asyncio.gather(*(view() for _ in range(5)))

        assert sorted(results) == [False, False, False, False, True]
        assert await ContentStore(db_session, Story).counter_value(story.id, "views_count") == 1

    @pytest.mark.asyncio
    async def test_distinct_viewers_each_count(self, db_session, make_account):
        alice = await make_account("alice")
        bob = await make_account("bob")
        carol = await make_account("carol")
        story = await self.service.create_story(db_session, alice.id, _story_request(), now=T)
        later = T + timedelta(hours=1)

        await self.service.view_story(db_session, story.id, bob.id, now=later)
        result = await self.service.view_story(db_session, story.id, carol.id, now=later)

        assert result.views_count == 2

    @pytest.mark.asyncio
    async def test_expired_story_cannot_be_viewed(self, db_session, make_account):
        alice = await make_account("alice")
        bob = await make_account("bob")
        story = await self.service.create_story(db_session, alice.id, _story_request(), now=T)
        await db_session.commit()

        with pytest.raises(NotFoundError):
            await self.service.view_story(
                db_session, story.id, bob.id, now=T + timedelta(hours=25)
            )

    @pytest.mark.asyncio
    async def test_only_owner_can_delete(self, db_session, make_account):
        alice = await make_account("alice")
        bob = await make_account("bob")
        story = await self.service.create_story(db_session, alice.id, _story_request(), now=T)

        with pytest.raises(ForbiddenError):
            await self.service.delete_story(db_session, story.id, bob.id)
        await self.service.delete_story(db_session, story.id, alice.id)
