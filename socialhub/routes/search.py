"""
SocialHub Backend — Search Route Handlers
===========================================

Endpoints:
    GET /api/search/users?query=      accounts (excludes the caller)
    GET /api/search/posts?query=      public posts
    GET /api/search/hashtags?query=   hashtags by usage
    GET /api/search/trending?limit=   most used hashtags
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.database import get_db_session
from socialhub.dependencies import AuthenticatedAccount, get_current_account
from socialhub.schemas.account import AccountSummary
from socialhub.schemas.common import Envelope
from socialhub.schemas.post import PostResponse
from socialhub.schemas.search import HashtagResponse
from socialhub.services.search_service import search_service

router = APIRouter(prefix="/api/search", tags=["Search"])


@router.get("/users", response_model=Envelope[List[AccountSummary]], summary="Search accounts")
async def search_users(
    query: Optional[str] = Query(default=None, max_length=100),
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[List[AccountSummary]]:
    return Envelope(data=await search_service.search_accounts(db, query, current.id))


@router.get("/posts", response_model=Envelope[List[PostResponse]], summary="Search posts")
async def search_posts(
    query: Optional[str] = Query(default=None, max_length=100),
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[List[PostResponse]]:
    return Envelope(data=await search_service.search_posts(db, query, current.id))


@router.get(
    "/hashtags", response_model=Envelope[List[HashtagResponse]], summary="Search hashtags"
)
async def search_hashtags(
    query: Optional[str] = Query(default=None, max_length=100),
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[List[HashtagResponse]]:
    return Envelope(data=await search_service.search_hashtags(db, query))


@router.get(
    "/trending", response_model=Envelope[List[HashtagResponse]], summary="Trending hashtags"
)
async def trending(
    limit: int = Query(default=10, ge=1, le=50),
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[List[HashtagResponse]]:
    return Envelope(data=await search_service.trending(db, limit))
