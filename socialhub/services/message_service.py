"""
SocialHub Backend — Message Service
=====================================

What:  Sending direct messages, the conversation list, and reading a thread.
Who:   Message routes.

Thread Reads:
    The page is selected newest-first (so page 1 is the most recent
    messages) and returned oldest-first for display. Opening a thread marks
    every unread message from the partner as read.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.config import settings
from socialhub.exceptions import NotFoundError, ValidationError
from socialhub.models.notification import NotificationKind
from socialhub.repositories.account_directory import AccountDirectory
from socialhub.repositories.message_repository import MessageRepository
from socialhub.schemas.account import AccountSummary
from socialhub.schemas.common import Pagination
from socialhub.schemas.message import (
    ConversationSummary,
    MessageCreateRequest,
    MessageResponse,
    MessageThread,
)
from socialhub.services.base import NotifyingService
from socialhub.services.notification_service import NotificationEvent

logger = logging.getLogger(__name__)


class MessageService(NotifyingService):

    async def send(
        self, db: AsyncSession, sender_id: UUID, request: MessageCreateRequest
    ) -> MessageResponse:
        content = (request.content or "").strip() or None
        if request.receiver_id is None or (content is None and not request.media_url):
            raise ValidationError("Receiver ID and content/media are required")
        if request.receiver_id == sender_id:
            raise ValidationError("You cannot message yourself", field="receiver_id")

        if await AccountDirectory(db).find_by_id(request.receiver_id) is None:
            raise NotFoundError("account", str(request.receiver_id))

        message = await MessageRepository(db).create(
            sender_id=sender_id,
            receiver_id=request.receiver_id,
            content=content,
            media_url=request.media_url,
        )
        logger.info("Message %s sent %s → %s", message.id, sender_id, request.receiver_id)

        await self._commit_and_notify(
            db,
            NotificationEvent(
                actor_id=sender_id,
                recipient_id=request.receiver_id,
                kind=NotificationKind.MESSAGE,
                entity_id=message.id,
            ),
        )
        return MessageResponse.model_validate(message)

    async def conversations(self, db: AsyncSession, account_id: UUID) -> List[ConversationSummary]:
        """Every conversation partner with the last message, newest conversation first."""
        messages = MessageRepository(db)
        latest = await messages.latest_per_partner(account_id)
        unread = await messages.unread_counts_by_sender(account_id)

        directory = AccountDirectory(db)
        summaries = []
        for message in latest:
            partner_id = message.receiver_id if message.sender_id == account_id else message.sender_id
            partner = await directory.find_by_id(partner_id)
            if partner is None:
                continue
            summaries.append(
                ConversationSummary(
                    partner=AccountSummary.model_validate(partner),
                    last_message=MessageResponse.model_validate(message),
                    unread_count=unread.get(partner_id, 0),
                )
            )
        return summaries

    async def thread(
        self,
        db: AsyncSession,
        account_id: UUID,
        partner_id: UUID,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> MessageThread:
        limit = limit or settings.message_page_size
        partner = await AccountDirectory(db).find_by_id(partner_id)
        if partner is None:
            raise NotFoundError("account", str(partner_id))

        messages = MessageRepository(db)
        rows = await messages.thread_page(account_id, partner_id, (page - 1) * limit, limit)
        total = await messages.count_thread(account_id, partner_id)
        marked = await messages.mark_read_from(partner_id, account_id)
        if marked:
            logger.debug("Marked %d messages from %s read for %s", marked, partner_id, account_id)

        views = []
        for message in reversed(rows):
            view = MessageResponse.model_validate(message)
            if message.sender_id == partner_id:
                view.is_read = True
            views.append(view)

        return MessageThread(
            partner=AccountSummary.model_validate(partner),
            messages=views,
            pagination=Pagination.build(page, limit, total),
        )
