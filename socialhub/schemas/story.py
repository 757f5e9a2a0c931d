"""Story bodies and grouped story views."""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from socialhub.schemas.account import AccountSummary


class StoryCreateRequest(BaseModel):
    media_url: Optional[str] = Field(default=None, max_length=500)
    media_type: str = Field(default="IMAGE", pattern=r"^(IMAGE|VIDEO)$")
    caption: Optional[str] = Field(default=None, max_length=500)


class StoryResponse(BaseModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    media_url: str
    media_type: str
    caption: Optional[str] = None
    views_count: int
    created_at: datetime
    expires_at: datetime
    is_viewed: bool = Field(default=False, description="Whether the viewer has seen this story")

    model_config = {"from_attributes": True}


class StoryGroup(BaseModel):
    """All live stories of one owner, newest first."""
    owner: AccountSummary
    stories: List[StoryResponse]


class StoryViewResult(BaseModel):
    story_id: uuid.UUID
    recorded: bool = Field(description="False when the viewer had already seen the story")
    views_count: int
