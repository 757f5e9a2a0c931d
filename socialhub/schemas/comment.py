"""Comment bodies and views."""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from socialhub.schemas.account import AccountSummary
from socialhub.schemas.common import Pagination


class CommentCreateRequest(BaseModel):
    content: Optional[str] = Field(default=None, max_length=2000)
    parent_id: Optional[uuid.UUID] = Field(default=None, description="Comment being replied to")


class CommentResponse(BaseModel):
    id: uuid.UUID
    post_id: uuid.UUID
    parent_id: Optional[uuid.UUID] = None
    owner: AccountSummary
    content: str
    created_at: datetime

    model_config = {"from_attributes": True}


class CommentThread(CommentResponse):
    """Top-level comment with its first replies (oldest first) and reply count."""
    replies: List[CommentResponse] = Field(default_factory=list)
    replies_count: int = 0


class CommentPage(BaseModel):
    comments: List[CommentThread]
    pagination: Pagination


class ReplyPage(BaseModel):
    replies: List[CommentResponse]
    pagination: Pagination
