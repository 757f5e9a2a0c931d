"""
SocialHub Backend — Notification Repository
=============================================

What:  Inserts and reads notification rows, and flips is_read.
Who:   NotificationService only.

Queries:
    Page:    WHERE recipient_id = :r ORDER BY created_at DESC, id DESC
             → idx_notifications_recipient_created
    Unread:  WHERE recipient_id = :r AND is_read = false
             → idx_notifications_recipient_unread
"""

from typing import List
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.models.notification import Notification
from socialhub.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Notification, session)

    async def page_for_recipient(self, recipient_id: UUID, offset: int, limit: int) -> List[Notification]:
        result = await self._execute(
            select(Notification)
            .where(Notification.recipient_id == recipient_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count_for_recipient(self, recipient_id: UUID) -> int:
        result = await self._execute(
            select(func.count())
            .select_from(Notification)
            .where(Notification.recipient_id == recipient_id)
        )
        return result.scalar() or 0

    async def count_unread(self, recipient_id: UUID) -> int:
        result = await self._execute(
            select(func.count())
            .select_from(Notification)
            .where(Notification.recipient_id == recipient_id, Notification.is_read.is_(False))
        )
        return result.scalar() or 0

    async def mark_all_read(self, recipient_id: UUID) -> int:
        """
        One bulk UPDATE; returns the number of rows that changed.

        SQL Generated:
            UPDATE notifications SET is_read = true
            WHERE recipient_id = :r AND is_read = false
        """
        result = await self._execute(
            update(Notification)
            .where(Notification.recipient_id == recipient_id, Notification.is_read.is_(False))
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
