"""
Application Error Taxonomy

Business-rule failures are raised as AppError subclasses from the service
layer and rendered by the exception handlers registered in main.py:

    ValidationFailed    -> 400  malformed input, unknown references
    Unauthenticated     -> 401  missing/invalid/expired bearer token
    Forbidden           -> 403  valid token lacking a required role
    NotFound            -> 404  missing entity, or not visible to the caller
    Conflict            -> 409  duplicate names, deletes blocked by references
    ServiceUnavailable  -> 503  transient infrastructure failure

Version: 1.0.0
"""

from typing import Any, Optional


class AppError(Exception):
    """
    Base class for errors that map onto an HTTP response.

    Attributes:
        status_code: HTTP status returned to the caller
        error: Short machine-friendly label
        detail: Human readable explanation
        extra: Additional keys merged into the response body
    """

    status_code: int = 500
    error: str = "Internal Server Error"

    def __init__(self, detail: str, extra: Optional[dict[str, Any]] = None):
        super().__init__(detail)
        self.detail = detail
        self.extra = extra or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": False,
            "error": self.error,
            "detail": self.detail,
            **self.extra,
        }


class ValidationFailed(AppError):
    status_code = 400
    error = "Validation Failed"


class Unauthenticated(AppError):
    status_code = 401
    error = "Unauthorized"


class Forbidden(AppError):
    status_code = 403
    error = "Forbidden"


class NotFound(AppError):
    status_code = 404
    error = "Not Found"


class Conflict(AppError):
    status_code = 409
    error = "Conflict"


class ServiceUnavailable(AppError):
    status_code = 503
    error = "Service Unavailable"
