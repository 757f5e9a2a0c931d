"""
SocialHub Backend — Post, Like, Hashtag & Mention Models
==========================================================

What:  ORM models for posts and the tables hanging off them.

Counter columns (likes_count, comments_count, views_count):
    Stored and authoritative. Every insert/delete on post_likes or
    comments adjusts the matching counter in the SAME transaction with a
    SQL-side `col = col + delta`, so the counter and the edge table cannot
    drift apart under concurrent likes/unlikes. views_count is bumped on
    every fetch of the post (no per-viewer de-duplication).

Query Patterns:
    - Feed page:  WHERE owner_id IN (visibility set) ORDER BY created_at DESC, id DESC
      → idx_posts_owner_created
    - Liked-by-viewer annotation: PK lookup on post_likes (post_id, account_id)
"""

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from socialhub.database import Base
from socialhub.models.account import Account, utcnow


class Post(Base):
    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[Optional[str]] = mapped_column(Text)
    media_urls: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    media_type: Mapped[str] = mapped_column(String(20), nullable=False, default="IMAGE")
    location: Mapped[Optional[str]] = mapped_column(String(255))

    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    comments_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    likes_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comments_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    views_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    # selectin: feed pages render the author without one query per row
    owner: Mapped[Account] = relationship(Account, lazy="selectin")

    __table_args__ = (
        Index("idx_posts_owner_created", "owner_id", "created_at"),
        Index("idx_posts_created", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, owner_id={self.owner_id}, public={self.is_public})>"


class PostLike(Base):
    """Like edge. Existence is the only state; at most one per (post, account)."""

    __tablename__ = "post_likes"

    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("accounts.id", ondelete="CASCADE"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class Hashtag(Base):
    __tablename__ = "hashtags"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # Always stored lower-case
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (Index("idx_hashtags_count", "count"),)


class PostHashtag(Base):
    __tablename__ = "post_hashtags"

    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True
    )
    hashtag_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("hashtags.id", ondelete="CASCADE"), primary_key=True
    )


class PostMention(Base):
    __tablename__ = "post_mentions"

    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("accounts.id", ondelete="CASCADE"), primary_key=True
    )
