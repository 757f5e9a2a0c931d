"""
SocialHub Backend — Account & Auth Schemas
============================================

What:  Request bodies for register/login/refresh/profile and the account
       views returned by the auth and user routes.

Required credentials (email, password) are Optional here: a missing value
reaches AuthService, which reports it as a 400 validation_error naming the
field rather than FastAPI's 422.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from socialhub.schemas.common import Pagination


# ══════════════════════════════════════════════════════════════════════════
# Requests
# ══════════════════════════════════════════════════════════════════════════


class RegisterRequest(BaseModel):
    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=128)
    username: Optional[str] = Field(
        default=None,
        min_length=3,
        max_length=50,
        pattern=r"^[A-Za-z0-9_]+$",
        description="Letters, digits and underscores; generated from the names when omitted",
    )
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)


class LoginRequest(BaseModel):
    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=128)


class RefreshRequest(BaseModel):
    refresh_token: Optional[str] = None


class ProfileUpdateRequest(BaseModel):
    """Partial update; only fields present in the body are changed."""
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    bio: Optional[str] = Field(default=None, max_length=500)
    avatar: Optional[str] = Field(default=None, max_length=500)
    cover_photo: Optional[str] = Field(default=None, max_length=500)
    website: Optional[str] = Field(default=None, max_length=255)
    location: Optional[str] = Field(default=None, max_length=255)
    is_private: Optional[bool] = None


# ══════════════════════════════════════════════════════════════════════════
# Responses
# ══════════════════════════════════════════════════════════════════════════


class AccountSummary(BaseModel):
    """Compact author block embedded in posts, comments, stories and lists."""
    id: uuid.UUID
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None
    is_verified: bool = False

    model_config = {"from_attributes": True}


class AccountStats(BaseModel):
    posts: int = 0
    followers: int = 0
    following: int = 0


class AccountProfile(AccountSummary):
    bio: Optional[str] = None
    cover_photo: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    is_private: bool = False
    created_at: datetime
    stats: AccountStats = Field(default_factory=AccountStats)
    is_following: Optional[bool] = Field(
        default=None, description="Whether the viewer follows this account (null on own profile)"
    )


class OwnProfile(AccountProfile):
    """The authenticated account's own profile; includes the email."""
    email: str


class AuthResponse(BaseModel):
    user: OwnProfile
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AccountPage(BaseModel):
    accounts: List[AccountSummary]
    pagination: Pagination


class FollowResult(BaseModel):
    account_id: uuid.UUID
    is_following: bool
