"""
SocialHub Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for every error the API can report.
How:   Each exception carries a user-facing message, an optional context dict,
       and the HTTP status / error code the global handlers render it with.
Who:   Raised by repositories and services; caught by handlers in main.py.

Exception Hierarchy:
    SocialHubError (base)
    ├── ValidationError          → 400 Bad Request (missing / malformed input)
    ├── AuthenticationError      → 401 Unauthorized
    ├── ForbiddenError           → 403 Forbidden (ownership / recipient mismatch)
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict (duplicate like, follow, account)
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── UnavailableError         → 503 Service Unavailable (storage unreachable)
    └── CircuitBreakerOpenError  → never rendered; the notification dispatcher
                                   catches it and skips the write
"""

from typing import Any, Dict, Optional

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError


class SocialHubError(Exception):
    """
    Base exception for all SocialHub application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged; returned only where noted)
    """

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SocialHubError):
    """
    Raised when client input fails a business rule.

    When:  Missing required field, self-follow, reply to a comment on another post.
    HTTP:  400 Bad Request (schema-level problems are FastAPI's 422)
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(SocialHubError):
    """Missing, expired or invalid credentials (401)."""

    status_code = 401
    error_code = "authentication_error"

    def __init__(
        self,
        message: str = "Authentication failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(SocialHubError):
    """
    Raised when the requester may not mutate the target.

    When:  Deleting someone else's post/comment/story, marking another
           account's notification as read, commenting where comments are off.
    HTTP:  403 Forbidden
    """

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(SocialHubError):
    """
    Raised when a referenced account, content item or notification does not exist.

    SQLAlchemy returns None for missing rows; services convert that into
    this exception so the HTTP mapping stays in one place.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource


class ConflictError(SocialHubError):
    """
    Raised when a non-idempotent action would create a duplicate edge or row.

    When:  Liking a post twice, following an account twice, registering
           with a taken email or username. Duplicate story views are NOT
           conflicts; they resolve to a successful no-op.
    HTTP:  409 Conflict
    """

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "The resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(SocialHubError):
    """Client exceeded the per-client request window (429)."""

    status_code = 429
    error_code = "rate_limit_exceeded"

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class UnavailableError(SocialHubError):
    """
    Raised when the storage layer cannot be reached.

    The client message is always generic; driver details go to the log only.
    HTTP: 503 Service Unavailable
    """

    status_code = 503
    error_code = "service_unavailable"

    def __init__(
        self,
        message: str = "The service is temporarily unavailable. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class CircuitBreakerOpenError(SocialHubError):
    """
    Raised by the notification circuit breaker while it is OPEN.

    Notification writes are best-effort, so this never reaches a client:
    the dispatcher logs it and drops the notification.
    """

    status_code = 503
    error_code = "circuit_open"

    def __init__(
        self,
        recovery_time: int = 30,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Notification delivery is paused after repeated failures; "
            f"retrying in approximately {recovery_time} seconds."
        )
        ctx = context or {}
        ctx["recovery_time"] = recovery_time
        super().__init__(message=message, context=ctx)
        self.recovery_time = recovery_time


def is_storage_unavailable(exc: BaseException) -> bool:
    """
    True when `exc` means the database could not be reached or the
    connection dropped, as opposed to a bad statement or constraint.
    """
    if isinstance(exc, (OperationalError, InterfaceError)):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    return isinstance(exc, (ConnectionError, OSError))
