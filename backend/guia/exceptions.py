"""
Guia Backend — Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for the directory's error scenarios.
How:   Each exception carries a message and optional context dict. Global
       exception handlers (registered in main.py) translate them into JSON
       error responses with the matching HTTP status code.
Who:   Raised by services and dependencies; caught by the global handlers.

Exception Hierarchy:
    GuiaError (base)
    ├── ValidationError      → 400 Bad Request (malformed form field, bad enum value)
    ├── UnauthorizedError    → 401 Unauthorized (bad credentials, missing token)
    ├── ForbiddenError       → 403 Forbidden (invalid or expired token)
    ├── NotFoundError        → 404 Not Found (listing, comment, user)
    ├── ConflictError        → 409 Conflict (duplicate email)
    ├── MediaUploadError     → 500 (media host rejected an upload)
    ├── FileStorageError     → 500 (local storage write failed)
    └── DatabaseError        → 500 (query failed; details logged only)
"""

from typing import Any, Dict, Optional


class GuiaError(Exception):
    """
    Base exception for all Guia application errors.

    Attributes:
        message:  User-facing error description (returned in the API response)
        context:  Additional debug info (logged, returned only for some types)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(GuiaError):
    """
    Raised when client input fails validation.

    When:    A JSON-encoded form field (location, offers, time, categories) is
             malformed, a required field is missing, or a value is outside its
             enumeration (zone, category).
    HTTP:    400 Bad Request
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


class UnauthorizedError(GuiaError):
    """Bad credentials or no bearer token. HTTP 401."""

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(GuiaError):
    """A bearer token was sent but is invalid or expired. HTTP 403."""

    def __init__(
        self,
        message: str = "Invalid token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(GuiaError):
    """
    Raised when a requested resource does not exist.

    What:    The client referenced a listing, comment or user id that is not
             in the database, or a category search matched nothing.
    HTTP:    404 Not Found

    SQLAlchemy returns None for missing records; services convert that None
    into this exception so routes stay free of status-code logic.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(GuiaError):
    """Raised when a unique value (user email) is already taken. HTTP 409."""

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class MediaUploadError(GuiaError):
    """
    Raised when the external media host rejects or fails an upload.

    HTTP:    500 Internal Server Error

    Uploads that already succeeded in the same request are not rolled back;
    orphaned media on the host is an accepted limitation.
    """

    def __init__(
        self,
        message: str = "Error uploading images",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(GuiaError):
    """
    Raised when local file system operations fail.

    When:    Disk full, permission denied, directory not writable.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(GuiaError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is generic. SQL text, constraint
    names and driver errors go to the server log only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
