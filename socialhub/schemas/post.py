"""
SocialHub Backend — Post Schemas
==================================

What:  Post creation body, the annotated post view used by the feed,
       profile grids and search, and the detail view.

`is_liked` is per-viewer and filled by a single batched lookup per page;
likes_count / comments_count / views_count are the stored counters.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from socialhub.schemas.account import AccountSummary
from socialhub.schemas.comment import CommentResponse
from socialhub.schemas.common import Pagination


class PostCreateRequest(BaseModel):
    content: Optional[str] = Field(default=None, max_length=5000)
    media_urls: List[str] = Field(default_factory=list, max_length=10)
    media_type: str = Field(default="IMAGE", pattern=r"^(IMAGE|VIDEO|TEXT)$")
    location: Optional[str] = Field(default=None, max_length=255)
    is_public: bool = True
    comments_enabled: bool = True


class PostResponse(BaseModel):
    id: uuid.UUID
    owner: AccountSummary
    content: Optional[str] = None
    media_urls: List[str] = Field(default_factory=list)
    media_type: str
    location: Optional[str] = None
    is_public: bool
    comments_enabled: bool
    likes_count: int
    comments_count: int
    views_count: int
    created_at: datetime
    is_liked: bool = Field(default=False, description="Whether the viewer likes this post")

    model_config = {"from_attributes": True}


class PostDetail(PostResponse):
    latest_comments: List[CommentResponse] = Field(
        default_factory=list, description="Three most recent top-level comments"
    )


class PostPage(BaseModel):
    posts: List[PostResponse]
    pagination: Pagination


class LikeResult(BaseModel):
    post_id: uuid.UUID
    is_liked: bool
    likes_count: int
