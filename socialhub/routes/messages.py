"""
SocialHub Backend — Message Route Handlers
============================================

Endpoints:
    POST /api/messages                      send (201)
    GET  /api/messages/conversations        partners, last message, unread count
    GET  /api/messages/{other_account_id}   thread page (marks partner's messages read)
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.config import settings
from socialhub.database import get_db_session
from socialhub.dependencies import AuthenticatedAccount, get_current_account, get_message_service
from socialhub.schemas.common import Envelope, ErrorResponse
from socialhub.schemas.message import (
    ConversationSummary,
    MessageCreateRequest,
    MessageResponse,
    MessageThread,
)
from socialhub.services.message_service import MessageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/messages", tags=["Messages"])


@router.post(
    "",
    response_model=Envelope[MessageResponse],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Missing receiver or content", "model": ErrorResponse},
        404: {"description": "No such receiver", "model": ErrorResponse},
    },
    summary="Send a direct message",
)
async def send_message(
    body: MessageCreateRequest,
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    messages: MessageService = Depends(get_message_service),
) -> Envelope[MessageResponse]:
    message = await messages.send(db, current.id, body)
    return Envelope(message="Message sent successfully", data=message)


@router.get(
    "/conversations",
    response_model=Envelope[List[ConversationSummary]],
    summary="Conversation list",
)
async def list_conversations(
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    messages: MessageService = Depends(get_message_service),
) -> Envelope[List[ConversationSummary]]:
    return Envelope(data=await messages.conversations(db, current.id))


@router.get("/{other_account_id}", response_model=Envelope[MessageThread], summary="Thread")
async def get_thread(
    other_account_id: UUID,
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=settings.max_page_size),
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    messages: MessageService = Depends(get_message_service),
) -> Envelope[MessageThread]:
    return Envelope(data=await messages.thread(db, current.id, other_account_id, page, limit))
