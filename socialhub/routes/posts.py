"""
SocialHub Backend — Post Route Handlers
=========================================

What:  Post creation, the home feed, profile grids, post detail,
       like / unlike and deletion.

Endpoints:
    POST   /api/posts                   create (201)
    GET    /api/posts/feed              home feed (viewer + followees)
    GET    /api/posts/user/{username}   one account's posts
    GET    /api/posts/{post_id}         detail (+1 view on every fetch)
    POST   /api/posts/{post_id}/like    409 when already liked
    DELETE /api/posts/{post_id}/unlike  404 when not liked
    DELETE /api/posts/{post_id}         owner only

Route order: /feed and /user/... are declared before /{post_id}.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.config import settings
from socialhub.database import get_db_session
from socialhub.dependencies import AuthenticatedAccount, get_current_account, get_post_service
from socialhub.schemas.common import Envelope, ErrorResponse
from socialhub.schemas.post import LikeResult, PostCreateRequest, PostDetail, PostPage, PostResponse
from socialhub.services.feed_service import feed_service
from socialhub.services.post_service import PostService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/posts", tags=["Posts"])


@router.post(
    "",
    response_model=Envelope[PostResponse],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Neither content nor media", "model": ErrorResponse}},
    summary="Create a post",
)
async def create_post(
    body: PostCreateRequest,
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    posts: PostService = Depends(get_post_service),
) -> Envelope[PostResponse]:
    """
    Creates a post. `#tags` in the content are recorded with usage counts;
    `@username` mentions of existing accounts are recorded and notified.
    """
    post = await posts.create_post(db, current.id, body)
    return Envelope(message="Post created successfully", data=post)


@router.get(
    "/feed",
    response_model=Envelope[PostPage],
    summary="Home feed",
    description=(
        "Posts by the viewer and every account the viewer follows, newest first. "
        "Private posts appear only to their owner."
    ),
)
async def get_feed(
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=settings.max_page_size),
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[PostPage]:
    return Envelope(data=await feed_service.get_feed(db, current.id, page, limit))


@router.get("/user/{username}", response_model=Envelope[PostPage], summary="Posts by one account")
async def get_user_posts(
    username: str,
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=settings.max_page_size),
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[PostPage]:
    return Envelope(data=await feed_service.user_posts(db, username, current.id, page, limit))


@router.get(
    "/{post_id}",
    response_model=Envelope[PostDetail],
    responses={404: {"description": "No such post (or private)", "model": ErrorResponse}},
    summary="Post detail",
)
async def get_post(
    post_id: UUID,
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    posts: PostService = Depends(get_post_service),
) -> Envelope[PostDetail]:
    return Envelope(data=await posts.get_post(db, post_id, current.id))


@router.post(
    "/{post_id}/like",
    response_model=Envelope[LikeResult],
    responses={
        404: {"description": "No such post", "model": ErrorResponse},
        409: {"description": "Already liked", "model": ErrorResponse},
    },
    summary="Like a post",
)
async def like_post(
    post_id: UUID,
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    posts: PostService = Depends(get_post_service),
) -> Envelope[LikeResult]:
    result = await posts.like(db, post_id, current.id)
    return Envelope(message="Post liked", data=result)


@router.delete(
    "/{post_id}/unlike",
    response_model=Envelope[LikeResult],
    responses={404: {"description": "No such post, or not liked", "model": ErrorResponse}},
    summary="Remove a like",
)
async def unlike_post(
    post_id: UUID,
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    posts: PostService = Depends(get_post_service),
) -> Envelope[LikeResult]:
    result = await posts.unlike(db, post_id, current.id)
    return Envelope(message="Post unliked", data=result)


@router.delete(
    "/{post_id}",
    response_model=Envelope[None],
    responses={
        403: {"description": "Not the owner", "model": ErrorResponse},
        404: {"description": "No such post", "model": ErrorResponse},
    },
    summary="Delete own post",
)
async def delete_post(
    post_id: UUID,
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    posts: PostService = Depends(get_post_service),
) -> Envelope[None]:
    await posts.delete_post(db, post_id, current.id)
    return Envelope(message="Post deleted successfully")
