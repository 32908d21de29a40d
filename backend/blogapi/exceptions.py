"""
Blog Posts API — Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for the error scenarios of the posts API.
How:   Each exception carries a message and optional context dict. Global
       exception handlers (registered in main.py) catch these and return
       structured JSON error responses with the matching HTTP status code.
Who:   Raised by the post store and post service; caught by global handlers.

Exception Hierarchy:
    BlogAPIError (base)
    ├── ValidationError   → 400 Bad Request (store rejected the write)
    ├── NotFoundError     → 404 Not Found
    └── DatabaseError     → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class BlogAPIError(Exception):
    """
    Base exception for all Blog Posts API errors.

    Attributes:
        message:  User-facing error description (returned in the API response)
        context:  Additional debug info (logged, never returned to the client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BlogAPIError):
    """
    Raised when a write is rejected: missing or malformed fields, duplicate
    slug, or a reference to a user/category that does not exist.

    HTTP:    400 Bad Request

    Example response:
        {
            "message": "Failed to create post",
            "error": "A post with slug 'hello-world' already exists",
            "request_id": "1a2b3c4d"
        }

    `message` names the failed operation; `error` carries the underlying
    reason and is surfaced to the client.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        error: Optional[str] = None,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.error = error or message
        self.field = field

    def with_message(self, message: str) -> "ValidationError":
        """Re-label a store-level rejection with the failed operation's message."""
        return ValidationError(
            message=message,
            error=self.error,
            field=self.field,
            context=self.context,
        )


class NotFoundError(BlogAPIError):
    """
    Raised when a requested post does not exist.

    HTTP:    404 Not Found

    The store returns None for missing rows; the service converts that into
    this exception so the status code is chosen by the global handler.
    """

    def __init__(
        self,
        resource: str = "Post",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(BlogAPIError):
    """
    Raised when a read, delete or view-count update fails unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client names the failed operation only.
    The original error type is kept in `context` and logged server-side.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
