"""
SocialHub Backend — Route Dependencies
========================================

What:  FastAPI dependencies shared by the routers: the authenticated
       account, and per-request services wired to the notification
       dispatcher held on app.state.
How:   `Depends(get_current_account)` decodes the bearer access token;
       `Depends(get_post_service)` etc. build a service around
       `request.app.state.notification_dispatcher`.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from socialhub.exceptions import AuthenticationError
from socialhub.services.comment_service import CommentService
from socialhub.services.message_service import MessageService
from socialhub.services.notification_dispatcher import NotificationDispatcher
from socialhub.services.post_service import PostService
from socialhub.services.user_service import UserService
from socialhub.utils.security import ACCESS_TOKEN, SecurityUtils

logger = logging.getLogger(__name__)

# auto_error=False: a missing header becomes our 401 body, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthenticatedAccount:
    """Identity taken from a verified access token."""
    id: UUID
    username: str
    email: str


async def get_current_account(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthenticatedAccount:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")

    payload = SecurityUtils.decode_token(credentials.credentials, ACCESS_TOKEN)
    try:
        account_id = UUID(payload["sub"])
    except ValueError:
        raise AuthenticationError("Invalid token")

    return AuthenticatedAccount(
        id=account_id,
        username=payload.get("username", ""),
        email=payload.get("email", ""),
    )


def get_dispatcher(request: Request) -> Optional[NotificationDispatcher]:
    return getattr(request.app.state, "notification_dispatcher", None)


def get_post_service(
    dispatcher: Optional[NotificationDispatcher] = Depends(get_dispatcher),
) -> PostService:
    return PostService(dispatcher)


def get_comment_service(
    dispatcher: Optional[NotificationDispatcher] = Depends(get_dispatcher),
) -> CommentService:
    return CommentService(dispatcher)


def get_user_service(
    dispatcher: Optional[NotificationDispatcher] = Depends(get_dispatcher),
) -> UserService:
    return UserService(dispatcher)


def get_message_service(
    dispatcher: Optional[NotificationDispatcher] = Depends(get_dispatcher),
) -> MessageService:
    return MessageService(dispatcher)
