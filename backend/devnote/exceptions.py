"""
DevNote Backend - Application Exception Hierarchy
=================================================

What:  Application-specific exceptions raised by services and dependencies.
How:   Each exception carries a user-facing `message` and a `context` dict.
       Global handlers registered in main.py map each type to an HTTP status
       and a JSON `ErrorResponse`. `context` is logged, and only returned to
       the client for client-side errors (4xx).

Exception Hierarchy:
    DevNoteError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── ForbiddenError           → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── UserAlreadyExistsError   → 409 Conflict
    ├── RateLimitExceededError   → 429 Too Many Requests (built by RateLimitMiddleware)
    ├── FileStorageError         → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error

The visibility policy itself never raises. It returns a decision value and
the service layer converts a denial into ForbiddenError / NotFoundError.
"""

from typing import Any, Dict, Optional


class DevNoteError(Exception):
    """
    Base exception for all DevNote application errors.

    Attributes:
        message:  User-facing description (safe to return in an API response)
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(DevNoteError):
    """
    Raised when client input violates a business rule.

    Examples: password confirmation mismatch, unsupported avatar type,
    following yourself. Schema-level problems are rejected earlier by
    FastAPI with a 422.
    """

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


class AuthenticationError(DevNoteError):
    """
    Raised when a request needs an authenticated viewer and has none, when a
    bearer token is invalid or expired, or when login credentials are wrong.

    HTTP: 401 with a `WWW-Authenticate: Bearer` header.
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(DevNoteError):
    """
    Raised when the viewer is known but not entitled to the resource.

    Used for private profile lists ("followers list is private") and for
    edits attempted on somebody else's profile or post.
    """

    def __init__(
        self,
        message: str = "You do not have permission to access this resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(DevNoteError):
    """
    Raised when a requested resource does not exist, or exists but must not
    be revealed to the viewer (e.g. another user's private post).
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class UserAlreadyExistsError(DevNoteError):
    """Raised at registration when the username or email is already taken."""

    def __init__(
        self,
        field: str = "username",
        value: str = "",
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"A user with this {field} already exists"
        if value:
            message = f"A user with {field} '{value}' already exists"
        ctx = context or {}
        ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class FileStorageError(DevNoteError):
    """
    Raised when writing an uploaded avatar to disk fails.

    The message returned to the client is generic; paths and OS errors
    stay in the context for server-side logs.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(DevNoteError):
    """
    Raised when a database operation fails unexpectedly.

    The client always receives a generic message. SQL, constraint names and
    driver errors are only logged.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(DevNoteError):
    """Raised when a client exceeds the per-IP write rate limit."""

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
