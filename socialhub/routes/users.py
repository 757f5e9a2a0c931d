"""
SocialHub Backend — User Route Handlers
=========================================

What:  Profiles, follow / unfollow, follower and following lists.

Endpoints:
    GET    /api/users/{username}
    POST   /api/users/{account_id}/follow
    DELETE /api/users/{account_id}/unfollow
    GET    /api/users/{username}/followers
    GET    /api/users/{username}/following
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.config import settings
from socialhub.database import get_db_session
from socialhub.dependencies import AuthenticatedAccount, get_current_account, get_user_service
from socialhub.schemas.account import AccountPage, AccountProfile, FollowResult
from socialhub.schemas.common import Envelope, ErrorResponse
from socialhub.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get(
    "/{username}",
    response_model=Envelope[AccountProfile],
    responses={404: {"description": "No such account", "model": ErrorResponse}},
    summary="Public profile with stats",
)
async def get_profile(
    username: str,
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    users: UserService = Depends(get_user_service),
) -> Envelope[AccountProfile]:
    return Envelope(data=await users.get_profile(db, username, current.id))


@router.post(
    "/{account_id}/follow",
    response_model=Envelope[FollowResult],
    responses={
        400: {"description": "Self-follow", "model": ErrorResponse},
        404: {"description": "No such account", "model": ErrorResponse},
        409: {"description": "Already following", "model": ErrorResponse},
    },
    summary="Follow an account",
)
async def follow(
    account_id: UUID,
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    users: UserService = Depends(get_user_service),
) -> Envelope[FollowResult]:
    """The followee receives a FOLLOW notification after the edge is committed."""
    result = await users.follow(db, current.id, account_id)
    return Envelope(message="User followed successfully", data=result)


@router.delete(
    "/{account_id}/unfollow",
    response_model=Envelope[FollowResult],
    responses={404: {"description": "Not following", "model": ErrorResponse}},
    summary="Unfollow an account",
)
async def unfollow(
    account_id: UUID,
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    users: UserService = Depends(get_user_service),
) -> Envelope[FollowResult]:
    result = await users.unfollow(db, current.id, account_id)
    return Envelope(message="User unfollowed successfully", data=result)


@router.get("/{username}/followers", response_model=Envelope[AccountPage], summary="Followers")
async def followers(
    username: str,
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=settings.max_page_size),
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    users: UserService = Depends(get_user_service),
) -> Envelope[AccountPage]:
    return Envelope(data=await users.followers(db, username, page, limit))


@router.get("/{username}/following", response_model=Envelope[AccountPage], summary="Following")
async def following(
    username: str,
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=settings.max_page_size),
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    users: UserService = Depends(get_user_service),
) -> Envelope[AccountPage]:
    return Envelope(data=await users.following(db, username, page, limit))
