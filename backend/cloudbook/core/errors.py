"""Error taxonomy shared by services and the HTTP boundary.

Every error carries the HTTP status it maps to and a message that is safe to
show to clients. Internal detail, when present, is only attached to 500s.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, *, detail: str | None = None, headers: dict[str, str] | None = None):
        self.message = message or self.default_message
        self.detail = detail
        self.headers = headers
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class UnauthenticatedError(AppError):
    status_code = 401
    default_message = "Unauthorized"


class InvalidCredentialsError(UnauthenticatedError):
    """Raised for unknown emails and wrong passwords alike."""

    default_message = "Invalid email or password"


class NotFoundError(AppError):
    """Missing resource, or one the caller does not own. Callers cannot tell which."""

    status_code = 404
    default_message = "Not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Conflict"


class RateLimitedError(AppError):
    status_code = 429
    default_message = "Too many requests"


class UnexpectedError(AppError):
    status_code = 500
