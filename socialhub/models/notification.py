"""
SocialHub Backend — Notification Model
========================================

What:  One row per notification produced by fan-out.

Lifecycle:
    1. Inserted exactly once per triggering action (never for self-actions)
    2. Only is_read is ever updated afterwards (mark one / mark all)
    3. Repeated identical actions produce repeated rows; nothing de-duplicates

entity_id is a polymorphic reference (post id, message id, ...) and has no
foreign key: the notification outlives a deleted post.
"""

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from socialhub.database import Base
from socialhub.models.account import Account, utcnow


class NotificationKind(str, enum.Enum):
    LIKE = "LIKE"
    COMMENT = "COMMENT"
    MENTION = "MENTION"
    FOLLOW = "FOLLOW"
    MESSAGE = "MESSAGE"


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    recipient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    # NULL for system-generated notifications
    sender_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True
    )
    kind: Mapped[NotificationKind] = mapped_column(
        Enum(NotificationKind, name="notification_kind"), nullable=False
    )
    entity_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    message: Mapped[str] = mapped_column(String(500), nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    sender: Mapped[Optional[Account]] = relationship(
        Account, foreign_keys=[sender_id], lazy="selectin"
    )

    __table_args__ = (
        Index("idx_notifications_recipient_created", "recipient_id", "created_at"),
        Index("idx_notifications_recipient_unread", "recipient_id", "is_read"),
    )

    def __repr__(self) -> str:
        return (
            f"<Notification(id={self.id}, kind={self.kind.value}, "
            f"recipient={self.recipient_id}, read={self.is_read})>"
        )
