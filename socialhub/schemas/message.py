"""Direct message bodies, threads and conversation summaries."""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from socialhub.schemas.account import AccountSummary
from socialhub.schemas.common import Pagination


class MessageCreateRequest(BaseModel):
    receiver_id: Optional[uuid.UUID] = None
    content: Optional[str] = Field(default=None, max_length=5000)
    media_url: Optional[str] = Field(default=None, max_length=500)


class MessageResponse(BaseModel):
    id: uuid.UUID
    sender_id: uuid.UUID
    receiver_id: uuid.UUID
    content: Optional[str] = None
    media_url: Optional[str] = None
    is_read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ConversationSummary(BaseModel):
    partner: AccountSummary
    last_message: MessageResponse
    unread_count: int


class MessageThread(BaseModel):
    """One page of a conversation, oldest message first."""
    partner: AccountSummary
    messages: List[MessageResponse]
    pagination: Pagination
