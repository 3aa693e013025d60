"""
Blog Backend — Custom Exception Hierarchy
===========================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Services raise typed errors; global handlers (registered in main.py)
       turn each one into exactly one HTTP status and a JSON body.
How:   Each exception class carries a message and optional context dict.

Exception Hierarchy:
    BlogAppError (base)          → 500
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── UnauthorizedError        → 401 Unauthorized
    ├── ForbiddenError           → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── FileStorageError         → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Mapping, Optional, Sequence


class BlogAppError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, only returned for validation errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BlogAppError):
    """
    Raised when client input fails validation.

    When:    Missing required fields, malformed JSON, missing upload,
             unsupported file type, duplicate email.
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


class UnauthorizedError(BlogAppError):
    """
    Raised when a request carries no usable credential.

    When:    Missing, malformed or expired token; token for a deleted author;
             wrong email/password on login.
    HTTP:    401 Unauthorized (with WWW-Authenticate: Bearer)
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(BlogAppError):
    """
    Raised when an authenticated author acts on a record that is not theirs.

    When:    Updating, deleting or changing the avatar of another author.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "You are not allowed to modify this resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(BlogAppError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert None into
    this exception so the handler can answer 404.
    """

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


class FileStorageError(BlogAppError):
    """
    Raised when file system operations fail (disk full, permission denied).
    HTTP: 500
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(BlogAppError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the original
    error is logged server-side only.
    HTTP: 500
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


def validation_error_from(
    errors: Sequence[Mapping[str, Any]],
    message: str = "Request validation failed",
) -> ValidationError:
    """
    Convert pydantic/FastAPI error dicts into a ValidationError.

    Each error becomes {"field": "a.b", "message": "..."}; pydantic's raw
    `ctx` (which may hold exception objects) is dropped.
    """
    fields = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", "Invalid value"),
        }
        for err in errors
    ]
    return ValidationError(message=message, context={"errors": fields})
