"""Notification views."""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from socialhub.models.notification import NotificationKind
from socialhub.schemas.account import AccountSummary
from socialhub.schemas.common import Pagination


class NotificationResponse(BaseModel):
    id: uuid.UUID
    kind: NotificationKind
    sender: Optional[AccountSummary] = None
    entity_id: Optional[uuid.UUID] = None
    message: str
    is_read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationPage(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int
    pagination: Pagination


class MarkAllReadResult(BaseModel):
    updated: int
