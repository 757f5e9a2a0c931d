"""
SocialHub Backend — Auth Route Handlers
=========================================

What:  POST /api/auth/register, /login, /refresh; GET /api/auth/me;
       PUT /api/auth/profile.
How:   Thin handlers: parse the body, call AuthService, wrap the result
       in the success envelope.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.database import get_db_session
from socialhub.dependencies import AuthenticatedAccount, get_current_account
from socialhub.schemas.account import (
    AuthResponse,
    LoginRequest,
    OwnProfile,
    ProfileUpdateRequest,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
)
from socialhub.schemas.common import Envelope, ErrorResponse
from socialhub.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=Envelope[AuthResponse],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Missing email or password", "model": ErrorResponse},
        409: {"description": "Email or username already taken", "model": ErrorResponse},
    },
    summary="Create an account",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[AuthResponse]:
    """
    Registers an account and returns it with a fresh token pair.

    When `username` is omitted one is generated from the first and last
    name (`first_last_1234`).
    """
    result = await auth_service.register(db, body)
    return Envelope(message="User registered successfully", data=result)


@router.post(
    "/login",
    response_model=Envelope[AuthResponse],
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Exchange email and password for tokens",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[AuthResponse]:
    result = await auth_service.login(db, body)
    return Envelope(message="Login successful", data=result)


@router.post(
    "/refresh",
    response_model=Envelope[TokenPair],
    responses={401: {"description": "Invalid or reused refresh token", "model": ErrorResponse}},
    summary="Rotate the token pair",
)
async def refresh(
    body: RefreshRequest,
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[TokenPair]:
    tokens = await auth_service.refresh(db, body.refresh_token)
    return Envelope(message="Token refreshed", data=tokens)


@router.get("/me", response_model=Envelope[OwnProfile], summary="The authenticated account")
async def me(
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[OwnProfile]:
    return Envelope(data=await auth_service.me(db, current.id))


@router.put("/profile", response_model=Envelope[OwnProfile], summary="Update own profile")
async def update_profile(
    body: ProfileUpdateRequest,
    current: AuthenticatedAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[OwnProfile]:
    profile = await auth_service.update_profile(db, current.id, body)
    return Envelope(message="Profile updated successfully", data=profile)
