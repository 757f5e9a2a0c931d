"""
SocialHub Backend — Account Directory
=======================================

What:  Account rows and follow edges: lookups, the follow graph, relationship
       counts, and the viewer's visibility set.
Who:   AuthService, UserService, FeedService, StoryService, SearchService,
       and NotificationService (actor display names).

Visibility Set:
    {viewer} ∪ {accounts the viewer follows}. It is never materialised in
    Python: `visibility_set()` returns an `OwnerSet` wrapping a sub-select,
    and ContentStore applies it as

        owner_id = :viewer OR owner_id IN (SELECT followee_id FROM follows
                                           WHERE follower_id = :viewer)

    so an account following 100k others costs the same Python memory as
    one following nobody.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import ColumnElement, Select, delete, false, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.models.account import Account, Follow
from socialhub.repositories.base import BaseRepository


@dataclass(frozen=True)
class OwnerSet:
    """
    A set of account ids usable as a SQL filter.

    Explicit ids, optionally widened by a sub-select of further ids
    (the viewer's followees).
    """

    ids: Sequence[UUID] = ()
    subquery: Optional[Select] = field(default=None, compare=False, repr=False)

    @classmethod
    def of(cls, *ids: UUID) -> "OwnerSet":
        return cls(ids=tuple(ids))

    def contains(self, column) -> ColumnElement[bool]:
        """SQL predicate: `column` belongs to this set."""
        clauses = []
        if self.ids:
            clauses.append(column.in_(list(self.ids)))
        if self.subquery is not None:
            clauses.append(column.in_(self.subquery))
        if not clauses:
            return false()
        return or_(*clauses)


class AccountDirectory(BaseRepository[Account]):
    """Repository for accounts and the follow graph."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Account, session)

    # ═══════════════════════════════════════════════════════════════════════
    # LOOKUPS
    # ═══════════════════════════════════════════════════════════════════════

    async def find_by_id(self, account_id: UUID) -> Optional[Account]:
        return await self.get(account_id)

    async def find_by_username(self, username: str) -> Optional[Account]:
        result = await self._execute(select(Account).where(Account.username == username))
        return result.scalar_one_or_none()

    async def find_by_email(self, email: str) -> Optional[Account]:
        result = await self._execute(select(Account).where(Account.email == email))
        return result.scalar_one_or_none()

    async def find_by_usernames(self, usernames: Sequence[str]) -> List[Account]:
        if not usernames:
            return []
        result = await self._execute(select(Account).where(Account.username.in_(list(usernames))))
        return list(result.scalars().all())

    async def username_exists(self, username: str) -> bool:
        result = await self._execute(
            select(func.count()).select_from(Account).where(Account.username == username)
        )
        return (result.scalar() or 0) > 0

    async def create_account(self, **fields) -> Account:
        return await self.create(**fields)

    async def search(self, query: str, exclude_id: Optional[UUID], limit: int) -> List[Account]:
        """
        Case-insensitive substring match on username, first or last name.

        SQL Generated:
            SELECT * FROM accounts
            WHERE (lower(username) LIKE lower('%q%') OR ...) AND id != :exclude
            ORDER BY username LIMIT :limit
        """
        stmt = select(Account).where(
            or_(
                Account.username.icontains(query, autoescape=True),
                Account.first_name.icontains(query, autoescape=True),
                Account.last_name.icontains(query, autoescape=True),
            )
        )
        if exclude_id is not None:
            stmt = stmt.where(Account.id != exclude_id)
        result = await self._execute(stmt.order_by(Account.username).limit(limit))
        return list(result.scalars().all())

    # ═══════════════════════════════════════════════════════════════════════
    # FOLLOW GRAPH
    # ═══════════════════════════════════════════════════════════════════════

    async def exists_follow_edge(self, follower_id: UUID, followee_id: UUID) -> bool:
        result = await self._execute(
            select(func.count())
            .select_from(Follow)
            .where(Follow.follower_id == follower_id, Follow.followee_id == followee_id)
        )
        return (result.scalar() or 0) > 0

    async def create_follow_edge_if_absent(self, follower_id: UUID, followee_id: UUID) -> bool:
        """True if this call created the edge; False if it already existed."""
        return await self.insert_ignore(
            Follow.__table__,
            {"follower_id": follower_id, "followee_id": followee_id},
        )

    async def delete_follow_edge(self, follower_id: UUID, followee_id: UUID) -> bool:
        """True if an edge was removed."""
        result = await self._execute(
            delete(Follow)
            .where(Follow.follower_id == follower_id, Follow.followee_id == followee_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def list_followee_ids(self, account_id: UUID) -> List[UUID]:
        result = await self._execute(
            select(Follow.followee_id).where(Follow.follower_id == account_id)
        )
        return list(result.scalars().all())

    def visibility_set(self, viewer_id: UUID) -> OwnerSet:
        """The viewer plus every account the viewer follows, as a lazy SQL set."""
        followees = select(Follow.followee_id).where(Follow.follower_id == viewer_id)
        return OwnerSet(ids=(viewer_id,), subquery=followees)

    async def count_followers(self, account_id: UUID) -> int:
        result = await self._execute(
            select(func.count()).select_from(Follow).where(Follow.followee_id == account_id)
        )
        return result.scalar() or 0

    async def count_following(self, account_id: UUID) -> int:
        result = await self._execute(
            select(func.count()).select_from(Follow).where(Follow.follower_id == account_id)
        )
        return result.scalar() or 0

    async def list_followers(self, account_id: UUID, offset: int, limit: int) -> List[Account]:
        """Accounts following `account_id`, most recent follow first."""
        result = await self._execute(
            select(Account)
            .join(Follow, Follow.follower_id == Account.id)
            .where(Follow.followee_id == account_id)
            .order_by(Follow.created_at.desc(), Account.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_following(self, account_id: UUID, offset: int, limit: int) -> List[Account]:
        """Accounts `account_id` follows, most recent follow first."""
        result = await self._execute(
            select(Account)
            .join(Follow, Follow.followee_id == Account.id)
            .where(Follow.follower_id == account_id)
            .order_by(Follow.created_at.desc(), Account.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())
