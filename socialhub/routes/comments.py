"""
SocialHub Backend — Comment Route Handlers
============================================

Endpoints:
    POST   /api/comments/{post_id}              comment or reply (201)
    GET    /api/comments/{post_id}              threaded page
    GET    /api/comments/{comment_id}/replies   all replies, oldest first
    DELETE /api/comments/{comment_id}           owner only
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.config import settings
from socialhub.database import get_db_session
from socialhub.dependencies import AuthenticatedAccount, get_comment_service, get_current_account
from socialhub.schemas.comment import CommentCreateRequest, CommentPage, CommentResponse, ReplyPage
from socialhub.schemas.common import Envelope, ErrorResponse
from socialhub.services.comment_service import CommentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/comments", tags=["Comments"])


@router.post(
    "/{post_id}",
    response_model=Envelope[CommentResponse],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Empty content or foreign parent", "model": ErrorResponse},
        403: {"description": "Comments disabled", "model": ErrorResponse},
        404: {"description": "No such post", "model": ErrorResponse},
    },
    summary="Comment on a post",
)
async def create_comment(
    post_id: UUID,
    body: CommentCreateRequest,
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    comments: CommentService = Depends(get_comment_service),
) -> Envelope[CommentResponse]:
    comment = await comments.create_comment(db, post_id, current.id, body)
    return Envelope(message="Comment created successfully", data=comment)


@router.get("/{post_id}", response_model=Envelope[CommentPage], summary="Comments on a post")
async def list_comments(
    post_id: UUID,
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=settings.max_page_size),
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    comments: CommentService = Depends(get_comment_service),
) -> Envelope[CommentPage]:
    return Envelope(data=await comments.list_comments(db, post_id, page, limit))


@router.get("/{comment_id}/replies", response_model=Envelope[ReplyPage], summary="Replies")
async def list_replies(
    comment_id: UUID,
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=settings.max_page_size),
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    comments: CommentService = Depends(get_comment_service),
) -> Envelope[ReplyPage]:
    return Envelope(data=await comments.list_replies(db, comment_id, page, limit))


@router.delete(
    "/{comment_id}",
    response_model=Envelope[None],
    responses={
        403: {"description": "Not the owner", "model": ErrorResponse},
        404: {"description": "No such comment", "model": ErrorResponse},
    },
    summary="Delete own comment",
)
async def delete_comment(
    comment_id: UUID,
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    comments: CommentService = Depends(get_comment_service),
) -> Envelope[None]:
    await comments.delete_comment(db, comment_id, current.id)
    return Envelope(message="Comment deleted successfully")
