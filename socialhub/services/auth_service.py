"""
SocialHub Backend — Authentication Service
============================================

What:  Registration, login, refresh-token rotation, and own-profile reads
       and updates.
How:   Passwords hashed with passlib/bcrypt; JWT pairs issued by
       SecurityUtils. The SHA-256 digest of the most recent refresh token
       is stored on the account, so each refresh token works once.
Who:   Auth routes.

Registration Flow:
    1. Require email + password (ValidationError naming the field)
    2. Reject a taken email or username (ConflictError)
    3. Generate a username from the names when none was supplied
    4. Insert the account, issue tokens, store the refresh digest
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from socialhub.models.account import Account
from socialhub.repositories.account_directory import AccountDirectory
from socialhub.schemas.account import (
    AuthResponse,
    LoginRequest,
    OwnProfile,
    ProfileUpdateRequest,
    RegisterRequest,
    TokenPair,
)
from socialhub.services.user_service import user_service
from socialhub.utils.security import ACCESS_TOKEN, REFRESH_TOKEN, SecurityUtils
from socialhub.utils.text import generate_username

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
# Attempts at finding a free generated username before giving up
USERNAME_ATTEMPTS = 5


class AuthService:

    async def register(self, db: AsyncSession, request: RegisterRequest) -> AuthResponse:
        email = (request.email or "").strip().lower()
        if not email:
            raise ValidationError("Email and password are required", field="email")
        if not request.password:
            raise ValidationError("Email and password are required", field="password")
        if "@" not in email:
            raise ValidationError("Email address is not valid", field="email")
        if len(request.password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters", field="password"
            )

        directory = AccountDirectory(db)
        if await directory.find_by_email(email):
            raise ConflictError("Email or username already exists", context={"field": "email"})

        if request.username:
            username = request.username
            if await directory.username_exists(username):
                raise ConflictError(
                    "Email or username already exists", context={"field": "username"}
                )
        else:
            username = await self._free_username(directory, request, email)

        try:
            account = await directory.create_account(
                email=email,
                username=username,
                password_hash=SecurityUtils.hash_password(request.password),
                first_name=request.first_name,
                last_name=request.last_name,
            )
        except IntegrityError as e:
            # Lost a race with a concurrent registration of the same email/username
            raise ConflictError("Email or username already exists") from e

        tokens = await self._issue_tokens(db, account)
        logger.info("Registered account %s (%s)", account.id, account.username)
        return AuthResponse(
            user=await user_service.own_profile(db, account),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        )

    async def _free_username(
        self, directory: AccountDirectory, request: RegisterRequest, email: str
    ) -> str:
        for _ in range(USERNAME_ATTEMPTS):
            candidate = generate_username(request.first_name, request.last_name, email)
            if not await directory.username_exists(candidate):
                return candidate
        raise ConflictError("Could not generate a unique username; please choose one")

    async def login(self, db: AsyncSession, request: LoginRequest) -> AuthResponse:
        email = (request.email or "").strip().lower()
        if not email or not request.password:
            raise ValidationError("Email and password are required")

        account = await AccountDirectory(db).find_by_email(email)
        # Same message for unknown email and wrong password
        if account is None or not SecurityUtils.verify_password(
            request.password, account.password_hash
        ):
            logger.info("Failed login for %s", email)
            raise AuthenticationError("Invalid credentials")

        tokens = await self._issue_tokens(db, account)
        return AuthResponse(
            user=await user_service.own_profile(db, account),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        )

    async def refresh(self, db: AsyncSession, refresh_token: Optional[str]) -> TokenPair:
        """
        Exchanges a refresh token for a new pair.

        The presented token must be the one most recently issued; rotation
        makes the old one unusable.
        """
        if not refresh_token:
            raise ValidationError("Refresh token is required", field="refresh_token")

        payload = SecurityUtils.decode_token(refresh_token, REFRESH_TOKEN)
        account = await self._account_from_subject(db, payload["sub"])
        if account is None or account.refresh_token_hash != SecurityUtils.digest_token(refresh_token):
            raise AuthenticationError("Invalid refresh token")

        return await self._issue_tokens(db, account)

    async def me(self, db: AsyncSession, account_id: UUID) -> OwnProfile:
        account = await AccountDirectory(db).find_by_id(account_id)
        if account is None:
            raise NotFoundError("account", str(account_id))
        return await user_service.own_profile(db, account)

    async def update_profile(
        self, db: AsyncSession, account_id: UUID, request: ProfileUpdateRequest
    ) -> OwnProfile:
        account = await AccountDirectory(db).find_by_id(account_id)
        if account is None:
            raise NotFoundError("account", str(account_id))

        changes = request.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(account, field, value)
        await db.flush()

        logger.info("Account %s updated fields: %s", account_id, sorted(changes))
        return await user_service.own_profile(db, account)

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _account_from_subject(self, db: AsyncSession, subject: str) -> Optional[Account]:
        try:
            account_id = UUID(subject)
        except ValueError:
            raise AuthenticationError("Invalid token")
        return await AccountDirectory(db).find_by_id(account_id)

    async def _issue_tokens(self, db: AsyncSession, account: Account) -> TokenPair:
        claims = {"sub": str(account.id), "username": account.username, "email": account.email}
        access = SecurityUtils.create_token(claims, ACCESS_TOKEN)
        refresh = SecurityUtils.create_token(claims, REFRESH_TOKEN)

        account.refresh_token_hash = SecurityUtils.digest_token(refresh)
        await db.flush()
        return TokenPair(access_token=access, refresh_token=refresh)


auth_service = AuthService()
