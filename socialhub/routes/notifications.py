"""
SocialHub Backend — Notification Route Handlers
=================================================

What:  The authenticated account's inbox.

Endpoints:
    GET /api/notifications             page, newest first, with unread count
    PUT /api/notifications/read-all    one bulk update
    PUT /api/notifications/{id}/read   403 when it belongs to someone else

/read-all is declared before /{id}/read so it is never parsed as an id.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.config import settings
from socialhub.database import get_db_session
from socialhub.dependencies import AuthenticatedAccount, get_current_account
from socialhub.schemas.common import Envelope, ErrorResponse
from socialhub.schemas.notification import (
    MarkAllReadResult,
    NotificationPage,
    NotificationResponse,
)
from socialhub.services.notification_service import notification_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


@router.get("", response_model=Envelope[NotificationPage], summary="Inbox")
async def list_notifications(
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=settings.max_page_size),
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[NotificationPage]:
    result = await notification_service.list_for_recipient(db, current.id, page, limit)
    return Envelope(data=result)


@router.put("/read-all", response_model=Envelope[MarkAllReadResult], summary="Mark all read")
async def mark_all_read(
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[MarkAllReadResult]:
    updated = await notification_service.mark_all_read(db, current.id)
    return Envelope(
        message="All notifications marked as read", data=MarkAllReadResult(updated=updated)
    )


@router.put(
    "/{notification_id}/read",
    response_model=Envelope[NotificationResponse],
    responses={
        403: {"description": "Someone else's notification", "model": ErrorResponse},
        404: {"description": "No such notification", "model": ErrorResponse},
    },
    summary="Mark one read",
)
async def mark_read(
    notification_id: UUID,
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[NotificationResponse]:
    result = await notification_service.mark_read(db, notification_id, current.id)
    return Envelope(message="Notification marked as read", data=result)
