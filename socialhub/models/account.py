"""
SocialHub Backend — Account & Follow Models
=============================================

What:  ORM models for the `accounts` and `follows` tables (the Account Directory).
How:   UUID primary keys, UTC timestamps, unique handle and email.

Table Design Rationale:
    - Relationship counters (followers, following, posts) are NOT stored;
      they are derived with COUNT queries when a profile is rendered.
    - follows uses a composite primary key (follower_id, followee_id): the
      database itself rejects a second identical edge, and the CHECK
      constraint rejects self-edges.
    - idx_follows_followee serves "who follows X" (followers page);
      the primary key prefix serves "whom does X follow" (visibility set).
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from socialhub.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Account(Base):
    """
    A registered user.

    Lifecycle:
        1. Created at registration (password stored as a bcrypt hash)
        2. Mutated by profile updates and token refreshes
        3. Never hard-deleted by this application
    """

    __tablename__ = "accounts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    username: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    first_name: Mapped[Optional[str]] = mapped_column(String(100))
    last_name: Mapped[Optional[str]] = mapped_column(String(100))
    bio: Mapped[Optional[str]] = mapped_column(Text)
    avatar: Mapped[Optional[str]] = mapped_column(String(500))
    cover_photo: Mapped[Optional[str]] = mapped_column(String(500))
    website: Mapped[Optional[str]] = mapped_column(String(255))
    location: Mapped[Optional[str]] = mapped_column(String(255))
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_private: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Hash of the refresh token currently issued; rotation overwrites it
    refresh_token_hash: Mapped[Optional[str]] = mapped_column(String(255))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, username='{self.username}')>"


class Follow(Base):
    """Directed follow edge: follower sees followee's content."""

    __tablename__ = "follows"

    follower_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("accounts.id", ondelete="CASCADE"), primary_key=True
    )
    followee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("accounts.id", ondelete="CASCADE"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        CheckConstraint("follower_id != followee_id", name="ck_follows_no_self_follow"),
        Index("idx_follows_followee", "followee_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Follow(follower={self.follower_id}, followee={self.followee_id})>"
