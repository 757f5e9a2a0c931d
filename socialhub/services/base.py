"""
Shared plumbing for services whose writes trigger notifications.

The primary mutation is committed first; only then are the events handed
to the dispatcher, which writes them in a separate transaction. A failed
notification therefore can never roll back the like/follow/comment/message
that caused it.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.services.notification_dispatcher import NotificationDispatcher
from socialhub.services.notification_service import NotificationEvent

logger = logging.getLogger(__name__)


class NotifyingService:

    def __init__(self, dispatcher: Optional[NotificationDispatcher] = None):
        self.dispatcher = dispatcher

    async def _commit_and_notify(self, db: AsyncSession, *events: NotificationEvent) -> None:
        await db.commit()
        if self.dispatcher is None:
            logger.debug("No notification dispatcher configured; %d event(s) skipped", len(events))
            return
        await self.dispatcher.dispatch_many(events)
