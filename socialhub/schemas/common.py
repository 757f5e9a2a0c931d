"""
SocialHub Backend — Shared Response Schemas
=============================================

What:  The success envelope, pagination block, error body, and health body
       shared by every route.

Success Envelope:
    {
        "status": "success",
        "message": "Post liked",        # optional human-readable note
        "data": { ... }                 # endpoint-specific payload
    }

Error Body (rendered by the handlers in main.py):
    {
        "status": "error",
        "error": "conflict",
        "message": "You have already liked this post",
        "details": {"post_id": "..."},
        "request_id": "550e8400-e29b-41d4-a716-446655440000"
    }
"""

import math
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    status: str = Field(default="success", description="Always 'success' for 2xx responses")
    message: Optional[str] = Field(default=None, description="Human-readable summary")
    data: Optional[T] = Field(default=None, description="Endpoint payload")


class Pagination(BaseModel):
    """
    Offset pagination block.

    total_pages = ceil(total / limit); a page past the end is simply empty.
    """
    page: int = Field(description="1-based page number")
    limit: int = Field(description="Items per page")
    total: int = Field(description="Total matching items")
    total_pages: int = Field(description="ceil(total / limit)")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit))


class ErrorResponse(BaseModel):
    status: str = Field(default="error")
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Health check body for load balancers and monitoring.

    A backend that cannot reach its database reports "degraded"; the
    notification breaker state is informational (notifications are
    best-effort and never make the service unhealthy).
    """
    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    notifications: str = Field(description="Notification breaker: closed, open, half_open")
    uptime_seconds: float = Field(description="Seconds since service started")
