"""
SocialHub Backend — Search Service Tests
==========================================

What we test:
    ✅ Account search matches names case-insensitively and skips the caller
    ✅ Post search only returns public posts
    ✅ Hashtag search and trending rank by usage
    ✅ Blank queries are rejected
"""

import pytest

from socialhub.exceptions import ValidationError
from socialhub.schemas.post import PostCreateRequest
from socialhub.services.post_service import PostService
from socialhub.services.search_service import SearchService


class TestSearch:

    def setup_method(self):
        self.service = SearchService()

    @pytest.mark.asyncio
    async def test_accounts(self, db_session, make_account):
        ada = await make_account("ada", first_name="Ada", last_name="Lovelace")
        await make_account("adam")
        await make_account("grace", last_name="Adams")
        await make_account("linus")

        found = await self.service.search_accounts(db_session, "ADA", ada.id)

        assert [a.username for a in found] == ["adam", "grace"]

    @pytest.mark.asyncio
    async def test_posts_are_public_only(self, db_session, make_account, make_post):
        alice = await make_account("alice")
        bob = await make_account("bob")
        await make_post(alice, "coffee time", minutes=1)
        await make_post(alice, "secret coffee", minutes=2, is_public=False)
        await make_post(alice, "tea time", minutes=3)

        found = await self.service.search_posts(db_session, "coffee", bob.id)

        assert [p.content for p in found] == ["coffee time"]

    @pytest.mark.asyncio
    async def test_hashtags_rank_by_usage(self, db_session, make_account, dispatcher):
        alice = await make_account("alice")
        posts = PostService(dispatcher)
        for content in ("#python", "#python #pytest", "#python #pytest #rust"):
            await posts.create_post(db_session, alice.id, PostCreateRequest(content=content))

        matching = await self.service.search_hashtags(db_session, "#py")
        trending = await self.service.trending(db_session, limit=2)

        assert [(t.name, t.count) for t in matching] == [("python", 3), ("pytest", 2)]
        assert [t.name for t in trending] == ["python", "pytest"]

    @pytest.mark.asyncio
    async def test_blank_query(self, db_session, make_account):
        alice = await make_account("alice")
        with pytest.raises(ValidationError):
            await self.service.search_accounts(db_session, "   ", alice.id)
