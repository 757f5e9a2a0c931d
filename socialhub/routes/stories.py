"""
SocialHub Backend — Story Route Handlers
==========================================

Endpoints:
    POST   /api/stories                   create (201), expires in 24h
    GET    /api/stories                   live stories grouped by owner
    POST   /api/stories/{story_id}/view   idempotent view record
    DELETE /api/stories/{story_id}        owner only
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.database import get_db_session
from socialhub.dependencies import AuthenticatedAccount, get_current_account
from socialhub.schemas.common import Envelope, ErrorResponse
from socialhub.schemas.story import StoryCreateRequest, StoryGroup, StoryResponse, StoryViewResult
from socialhub.services.story_service import story_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stories", tags=["Stories"])


@router.post(
    "",
    response_model=Envelope[StoryResponse],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Missing media", "model": ErrorResponse}},
    summary="Post a story",
)
async def create_story(
    body: StoryCreateRequest,
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[StoryResponse]:
    story = await story_service.create_story(db, current.id, body)
    return Envelope(message="Story created successfully", data=story)


@router.get("", response_model=Envelope[List[StoryGroup]], summary="Live stories")
async def list_stories(
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[List[StoryGroup]]:
    """Unexpired stories of the viewer and followees, one group per owner."""
    return Envelope(data=await story_service.list_visible(db, current.id))


@router.post(
    "/{story_id}/view",
    response_model=Envelope[StoryViewResult],
    responses={404: {"description": "No such story, or expired", "model": ErrorResponse}},
    summary="Record a view",
)
async def view_story(
    story_id: UUID,
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[StoryViewResult]:
    result = await story_service.view_story(db, story_id, current.id)
    message = "Story viewed" if result.recorded else "Story already viewed"
    return Envelope(message=message, data=result)


@router.delete(
    "/{story_id}",
    response_model=Envelope[None],
    responses={
        403: {"description": "Not the owner", "model": ErrorResponse},
        404: {"description": "No such story", "model": ErrorResponse},
    },
    summary="Delete own story",
)
async def delete_story(
    story_id: UUID,
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[None]:
    await story_service.delete_story(db, story_id, current.id)
    return Envelope(message="Story deleted successfully")
