"""
SocialHub Backend — Story & Story View Models
===============================================

What:  Ephemeral stories and the per-viewer view records.

Expiry:
    expires_at is absolute (created_at + 24h) and is enforced only by
    filtering `expires_at > now` at query time. Expired rows stay in the
    table until an external retention job removes them.

Views:
    story_views has a composite primary key (story_id, viewer_id), so a
    viewer can be recorded at most once per story no matter how many
    concurrent requests race; views_count moves only with a new row.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from socialhub.database import Base
from socialhub.models.account import Account, utcnow


class Story(Base):
    __tablename__ = "stories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    media_url: Mapped[str] = mapped_column(String(500), nullable=False)
    media_type: Mapped[str] = mapped_column(String(20), nullable=False, default="IMAGE")
    caption: Mapped[Optional[str]] = mapped_column(Text)
    views_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    owner: Mapped[Account] = relationship(Account, lazy="selectin")

    __table_args__ = (
        Index("idx_stories_owner_expires", "owner_id", "expires_at"),
    )

    def __repr__(self) -> str:
        return f"<Story(id={self.id}, owner_id={self.owner_id}, expires_at='{self.expires_at}')>"


class StoryView(Base):
    __tablename__ = "story_views"

    story_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("stories.id", ondelete="CASCADE"), primary_key=True
    )
    viewer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("accounts.id", ondelete="CASCADE"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
