"""
SocialHub Backend — Message Repository
========================================

What:  Direct message rows: thread pages between two accounts, the
       conversation list, unread counts, and read-marking.

Conversation List Query:
    For every partner P of account A, the newest message in either
    direction. Built as
        partner = CASE WHEN sender_id = A THEN receiver_id ELSE sender_id END
    grouped by partner with max(created_at), then joined back to the
    messages to get the row itself.
"""

from typing import Dict, List
from uuid import UUID

from sqlalchemy import and_, case, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.models.message import Message
from socialhub.repositories.base import BaseRepository


def _between(a: UUID, b: UUID):
    return or_(
        and_(Message.sender_id == a, Message.receiver_id == b),
        and_(Message.sender_id == b, Message.receiver_id == a),
    )


class MessageRepository(BaseRepository[Message]):

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Message, session)

    async def thread_page(self, a: UUID, b: UUID, offset: int, limit: int) -> List[Message]:
        """Newest first; callers reverse for display."""
        result = await self._execute(
            select(Message)
            .where(_between(a, b))
            .order_by(Message.created_at.desc(), Message.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count_thread(self, a: UUID, b: UUID) -> int:
        result = await self._execute(
            select(func.count()).select_from(Message).where(_between(a, b))
        )
        return result.scalar() or 0

    async def mark_read_from(self, sender_id: UUID, receiver_id: UUID) -> int:
        """Marks every unread message sender → receiver as read."""
        result = await self._execute(
            update(Message)
            .where(
                Message.sender_id == sender_id,
                Message.receiver_id == receiver_id,
                Message.is_read.is_(False),
            )
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def latest_per_partner(self, account_id: UUID) -> List[Message]:
        """The newest message of each conversation, newest conversation first."""
        partner = case(
            (Message.sender_id == account_id, Message.receiver_id),
            else_=Message.sender_id,
        ).label("partner_id")
        latest = (
            select(partner, func.max(Message.created_at).label("last_at"))
            .where(or_(Message.sender_id == account_id, Message.receiver_id == account_id))
            .group_by(partner)
            .subquery()
        )
        result = await self._execute(
            select(Message)
            .join(
                latest,
                and_(
                    Message.created_at == latest.c.last_at,
                    or_(
                        and_(Message.sender_id == account_id, Message.receiver_id == latest.c.partner_id),
                        and_(Message.receiver_id == account_id, Message.sender_id == latest.c.partner_id),
                    ),
                ),
            )
            .order_by(Message.created_at.desc(), Message.id.desc())
        )
        # Two messages with the same timestamp in one conversation: keep one
        seen = set()
        rows = []
        for message in result.scalars().all():
            partner_id = message.receiver_id if message.sender_id == account_id else message.sender_id
            if partner_id not in seen:
                seen.add(partner_id)
                rows.append(message)
        return rows

    async def unread_counts_by_sender(self, receiver_id: UUID) -> Dict[UUID, int]:
        result = await self._execute(
            select(Message.sender_id, func.count())
            .where(Message.receiver_id == receiver_id, Message.is_read.is_(False))
            .group_by(Message.sender_id)
        )
        return {sender_id: count for sender_id, count in result.all()}
