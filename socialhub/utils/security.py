"""
SocialHub Backend — Security Utilities
========================================

What:  Password hashing (passlib/bcrypt) and JWT access/refresh tokens (PyJWT).
Who:   AuthService (register, login, refresh) and the `get_current_account`
       dependency.

Token Claims:
    sub       account id (UUID string)
    username  account handle at issue time
    email     account email at issue time
    type      "access" or "refresh"; each secret only signs its own type
    jti       random id, so two tokens issued in the same second differ
    iat/exp   issue and expiry times (UTC)

Refresh tokens are never stored in clear: the account row keeps a SHA-256
digest of the one currently issued, and rotation overwrites it.
"""

import hashlib
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from passlib.context import CryptContext

from socialhub.config import settings
from socialhub.exceptions import AuthenticationError

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
)


class SecurityUtils:
    """Stateless helpers; every method is a staticmethod."""

    # ═══════════════════════════════════════════════════════════════════════
    # PASSWORD HASHING
    # ═══════════════════════════════════════════════════════════════════════

    @staticmethod
    def hash_password(password: str) -> str:
        """Bcrypt hash with a random salt embedded in the result."""
        return pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def digest_token(token: str) -> str:
        """SHA-256 hex digest used to store the current refresh token."""
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    # ═══════════════════════════════════════════════════════════════════════
    # JWT TOKENS
    # ═══════════════════════════════════════════════════════════════════════

    @staticmethod
    def _secret_for(token_type: str) -> str:
        return settings.jwt_refresh_secret if token_type == REFRESH_TOKEN else settings.jwt_secret

    @staticmethod
    def create_token(claims: Dict[str, Any], token_type: str) -> str:
        """
        Signs a token of the given type.

        Args:
            claims:     Payload (must include "sub")
            token_type: ACCESS_TOKEN (expires after access_token_expire_minutes)
                        or REFRESH_TOKEN (refresh_token_expire_days)
        """
        now = datetime.now(timezone.utc)
        if token_type == REFRESH_TOKEN:
            expire = now + timedelta(days=settings.refresh_token_expire_days)
        else:
            expire = now + timedelta(minutes=settings.access_token_expire_minutes)

        to_encode = dict(claims)
        to_encode.update({
            "type": token_type,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": expire,
        })
        return jwt.encode(
            to_encode,
            SecurityUtils._secret_for(token_type),
            algorithm=settings.jwt_algorithm,
        )

    @staticmethod
    def decode_token(token: str, token_type: str) -> Dict[str, Any]:
        """
        Verifies signature, expiry and type; returns the payload.

        Raises:
            AuthenticationError: expired, malformed, wrong type, or missing subject
        """
        try:
            payload = jwt.decode(
                token,
                SecurityUtils._secret_for(token_type),
                algorithms=[settings.jwt_algorithm],
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired")
        except jwt.InvalidTokenError:
            raise AuthenticationError("Invalid token")

        if payload.get("type") != token_type or not payload.get("sub"):
            raise AuthenticationError("Invalid token")
        return payload
