"""
Application error taxonomy.

Each error carries the HTTP status it maps to; the handlers registered in
``app.main`` render every one of them with the standard response envelope.
"""
from typing import Any, Optional


class AppError(Exception):
    """Base class for errors that terminate a request with a known status."""
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, data: Any = None):
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)


class InvalidToken(AppError):
    """Bearer token missing, malformed, expired or badly signed."""
    status_code = 401
    default_message = "Invalid or expired token"


class Unauthorized(AppError):
    """Token verified but the principal it names is unknown or inactive."""
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(AppError):
    """Principal is authenticated but lacks the required permission."""
    status_code = 403
    default_message = "Forbidden"

    def __init__(
        self,
        message: Optional[str] = None,
        data: Any = None,
        tenant_scope: Optional[str] = None,
    ):
        super().__init__(message, data)
        self.tenant_scope = tenant_scope


class PlanExpired(AppError):
    status_code = 403
    default_message = "Plan expired! Renew required."


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class Conflict(AppError):
    status_code = 409
    default_message = "Already exists"


class InvalidFormat(AppError):
    status_code = 400
    default_message = "Invalid input"
