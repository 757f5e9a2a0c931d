"""
SocialHub Backend — Notification Service
==========================================

What:  Fan-out (turning a social action into a notification row) and the
       recipient's read side: list, unread count, mark one, mark all.
How:   Stateless; every method takes the session it should run on. The
       write path is normally reached through NotificationDispatcher,
       which gives it a dedicated session after the triggering action has
       committed.
Who:   NotificationDispatcher (fan_out), notification routes (read side).

Fan-out Rules:
    1. actor == recipient → nothing is written (no self-notifications)
    2. otherwise exactly one INSERT with is_read = false
    3. nothing is ever de-duplicated or updated in place:
       like → unlike → like produces two LIKE notifications
"""

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.config import settings
from socialhub.exceptions import ForbiddenError, NotFoundError
from socialhub.models.notification import Notification, NotificationKind
from socialhub.repositories.account_directory import AccountDirectory
from socialhub.repositories.notification_repository import NotificationRepository
from socialhub.schemas.common import Pagination
from socialhub.schemas.notification import NotificationPage, NotificationResponse

logger = logging.getLogger(__name__)

MESSAGE_TEMPLATES = {
    NotificationKind.LIKE: "{username} liked your post",
    NotificationKind.COMMENT: "{username} commented on your post",
    NotificationKind.MENTION: "{username} mentioned you in a post",
    NotificationKind.FOLLOW: "{username} started following you",
    NotificationKind.MESSAGE: "{username} sent you a message",
}


@dataclass(frozen=True)
class NotificationEvent:
    """
    A social action that may notify someone.

    The caller resolves recipient_id (the post owner, the followee, the
    message receiver) before emitting the event.
    """

    actor_id: UUID
    recipient_id: UUID
    kind: NotificationKind
    entity_id: Optional[UUID] = None
    message: Optional[str] = None

    @property
    def is_self_action(self) -> bool:
        return self.actor_id == self.recipient_id


class NotificationService:
    """Notification fan-out and inbox operations."""

    # ═══════════════════════════════════════════════════════════════════════
    # FAN-OUT
    # ═══════════════════════════════════════════════════════════════════════

    async def fan_out(self, db: AsyncSession, event: NotificationEvent) -> Optional[Notification]:
        """
        Writes the notification for `event`, or nothing for a self-action.

        Returns:
            The inserted row (flushed, not committed), or None when suppressed.
        """
        if event.is_self_action:
            logger.debug(
                "Suppressed %s self-notification for %s", event.kind.value, event.actor_id
            )
            return None

        message = event.message or await self._render_message(db, event)
        notification = await NotificationRepository(db).create(
            recipient_id=event.recipient_id,
            sender_id=event.actor_id,
            kind=event.kind,
            entity_id=event.entity_id,
            message=message,
            is_read=False,
        )
        logger.info(
            "Notification %s created: %s → %s",
            event.kind.value,
            event.actor_id,
            event.recipient_id,
        )
        return notification

    async def _render_message(self, db: AsyncSession, event: NotificationEvent) -> str:
        actor = await AccountDirectory(db).find_by_id(event.actor_id)
        username = actor.username if actor else "Someone"
        return MESSAGE_TEMPLATES[event.kind].format(username=username)

    # ═══════════════════════════════════════════════════════════════════════
    # READ SIDE
    # ═══════════════════════════════════════════════════════════════════════

    async def list_for_recipient(
        self,
        db: AsyncSession,
        recipient_id: UUID,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> NotificationPage:
        """Newest first, with the unread count and pagination totals."""
        limit = limit or settings.default_page_size
        repo = NotificationRepository(db)

        rows = await repo.page_for_recipient(recipient_id, offset=(page - 1) * limit, limit=limit)
        total = await repo.count_for_recipient(recipient_id)
        unread = await repo.count_unread(recipient_id)

        return NotificationPage(
            notifications=[NotificationResponse.model_validate(n) for n in rows],
            unread_count=unread,
            pagination=Pagination.build(page, limit, total),
        )

    async def count_unread(self, db: AsyncSession, recipient_id: UUID) -> int:
        return await NotificationRepository(db).count_unread(recipient_id)

    async def mark_read(
        self, db: AsyncSession, notification_id: UUID, requester_id: UUID
    ) -> NotificationResponse:
        """
        Marks one notification read.

        Raises:
            NotFoundError:  no such notification
            ForbiddenError: the requester is not its recipient
        """
        notification = await NotificationRepository(db).get(notification_id)
        if notification is None:
            raise NotFoundError("notification", str(notification_id))
        if notification.recipient_id != requester_id:
            logger.warning(
                "Account %s tried to mark notification %s of %s as read",
                requester_id,
                notification_id,
                notification.recipient_id,
            )
            raise ForbiddenError("You can only mark your own notifications as read")

        notification.is_read = True
        await db.flush()
        return NotificationResponse.model_validate(notification)

    async def mark_all_read(self, db: AsyncSession, recipient_id: UUID) -> int:
        updated = await NotificationRepository(db).mark_all_read(recipient_id)
        logger.info("Marked %d notifications read for %s", updated, recipient_id)
        return updated


# Singleton instance; the service holds no state
notification_service = NotificationService()
