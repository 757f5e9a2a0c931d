"""
SocialHub Backend — User Service
==================================

What:  Profiles with derived stats, the follow/unfollow actions, and
       follower/following lists.
Who:   User routes; AuthService (own profile rendering).

Follow Rules:
    - self-follow                  → ValidationError
    - unknown target               → NotFoundError
    - already following            → ConflictError
    - unfollow without an edge     → NotFoundError
    - new edge                     → committed, then FOLLOW notification
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.config import settings
from socialhub.exceptions import ConflictError, NotFoundError, ValidationError
from socialhub.models.account import Account
from socialhub.models.notification import NotificationKind
from socialhub.models.post import Post
from socialhub.repositories.account_directory import AccountDirectory, OwnerSet
from socialhub.repositories.content_store import ContentStore
from socialhub.schemas.account import (
    AccountPage,
    AccountProfile,
    AccountStats,
    AccountSummary,
    FollowResult,
    OwnProfile,
)
from socialhub.schemas.common import Pagination
from socialhub.services.base import NotifyingService
from socialhub.services.notification_service import NotificationEvent

logger = logging.getLogger(__name__)


class UserService(NotifyingService):

    # ═══════════════════════════════════════════════════════════════════════
    # PROFILES
    # ═══════════════════════════════════════════════════════════════════════

    async def stats(self, db: AsyncSession, account_id: UUID) -> AccountStats:
        """Relationship counters, derived by COUNT queries (never stored)."""
        directory = AccountDirectory(db)
        posts = await ContentStore(db, Post).count_by_owner_set(OwnerSet.of(account_id))
        return AccountStats(
            posts=posts,
            followers=await directory.count_followers(account_id),
            following=await directory.count_following(account_id),
        )

    async def own_profile(self, db: AsyncSession, account: Account) -> OwnProfile:
        profile = OwnProfile.model_validate(account)
        profile.stats = await self.stats(db, account.id)
        return profile

    async def get_profile(
        self, db: AsyncSession, username: str, viewer_id: UUID
    ) -> AccountProfile:
        directory = AccountDirectory(db)
        account = await directory.find_by_username(username)
        if account is None:
            raise NotFoundError("account", username)

        profile = AccountProfile.model_validate(account)
        profile.stats = await self.stats(db, account.id)
        if account.id != viewer_id:
            profile.is_following = await directory.exists_follow_edge(viewer_id, account.id)
        return profile

    # ═══════════════════════════════════════════════════════════════════════
    # FOLLOW GRAPH
    # ═══════════════════════════════════════════════════════════════════════

    async def follow(self, db: AsyncSession, follower_id: UUID, followee_id: UUID) -> FollowResult:
        if follower_id == followee_id:
            raise ValidationError("You cannot follow yourself", field="account_id")

        directory = AccountDirectory(db)
        if await directory.find_by_id(followee_id) is None:
            raise NotFoundError("account", str(followee_id))

        if not await directory.create_follow_edge_if_absent(follower_id, followee_id):
            raise ConflictError(
                "You are already following this user",
                context={"account_id": str(followee_id)},
            )

        logger.info("Account %s followed %s", follower_id, followee_id)
        await self._commit_and_notify(
            db,
            NotificationEvent(
                actor_id=follower_id,
                recipient_id=followee_id,
                kind=NotificationKind.FOLLOW,
                entity_id=follower_id,
            ),
        )
        return FollowResult(account_id=followee_id, is_following=True)

    async def unfollow(self, db: AsyncSession, follower_id: UUID, followee_id: UUID) -> FollowResult:
        if not await AccountDirectory(db).delete_follow_edge(follower_id, followee_id):
            raise NotFoundError("follow relationship", str(followee_id))
        logger.info("Account %s unfollowed %s", follower_id, followee_id)
        return FollowResult(account_id=followee_id, is_following=False)

    async def followers(
        self, db: AsyncSession, username: str, page: int = 1, limit: Optional[int] = None
    ) -> AccountPage:
        return await self._relationship_page(db, username, page, limit, followers=True)

    async def following(
        self, db: AsyncSession, username: str, page: int = 1, limit: Optional[int] = None
    ) -> AccountPage:
        return await self._relationship_page(db, username, page, limit, followers=False)

    async def _relationship_page(
        self, db: AsyncSession, username: str, page: int, limit: Optional[int], followers: bool
    ) -> AccountPage:
        limit = limit or settings.default_page_size
        directory = AccountDirectory(db)
        account = await directory.find_by_username(username)
        if account is None:
            raise NotFoundError("account", username)

        offset = (page - 1) * limit
        if followers:
            rows = await directory.list_followers(account.id, offset, limit)
            total = await directory.count_followers(account.id)
        else:
            rows = await directory.list_following(account.id, offset, limit)
            total = await directory.count_following(account.id)

        return AccountPage(
            accounts=[AccountSummary.model_validate(a) for a in rows],
            pagination=Pagination.build(page, limit, total),
        )


# Read-only uses (profile rendering) need no dispatcher
user_service = UserService()
