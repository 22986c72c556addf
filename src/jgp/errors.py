"""Application error taxonomy.

Services raise these; the global handlers in ``jgp.middleware.error_handler``
turn them into the standard error envelope.
"""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base class for errors that map to a client-facing code and status."""

    code = "BAD_REQUEST"
    status_code = 400
    default_message = "Request could not be processed"

    def __init__(self, message: str | None = None, details: Any = None) -> None:  # noqa: ANN401
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationFailed(AppError):
    code = "VALIDATION_ERROR"
    default_message = "Validation failed"


class Unauthenticated(AppError):
    code = "UNAUTHORIZED"
    status_code = 401
    default_message = "Authentication required"


class InvalidCredentials(Unauthenticated):
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid email or password"


class InvalidRefreshToken(Unauthenticated):
    code = "INVALID_REFRESH_TOKEN"
    default_message = "Invalid or expired refresh token"


class IncorrectPin(Unauthenticated):
    code = "INCORRECT_PIN"
    default_message = "Current PIN is incorrect"


class InvalidPin(Unauthenticated):
    code = "INVALID_PIN"
    default_message = "Invalid PIN"


class IncorrectPassword(Unauthenticated):
    code = "INCORRECT_PASSWORD"
    default_message = "Current password is incorrect"


class Forbidden(AppError):
    code = "FORBIDDEN"
    status_code = 403
    default_message = "Access denied"


class NotFound(AppError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Resource not found"


class Conflict(AppError):
    code = "CONFLICT"
    status_code = 409
    default_message = "Resource conflict"


class AlreadyExists(Conflict):
    code = "ALREADY_EXISTS"
    default_message = "User with this email already exists"


class AlreadyOwned(Conflict):
    code = "ALREADY_OWNED"
    default_message = "Item already owned"


class AlreadyCompleted(Conflict):
    code = "ALREADY_COMPLETED"
    default_message = "Drill already completed"


class SessionClosed(Conflict):
    code = "SESSION_CLOSED"
    default_message = "Session is already closed"


class PinAlreadySet(Conflict):
    code = "PIN_ALREADY_SET"
    default_message = "PIN already set. Use change-pin endpoint."


class PinNotSet(AppError):
    code = "PIN_NOT_SET"
    default_message = "PIN not set. Please set a PIN first."


class InsufficientStars(AppError):
    code = "INSUFFICIENT_STARS"
    default_message = "Not enough stars"


class NoDrillsAvailable(AppError):
    code = "NO_DRILLS_AVAILABLE"
    default_message = "No drills available for this age band"


class RateLimited(AppError):
    code = "RATE_LIMIT_EXCEEDED"
    status_code = 429
    default_message = "Too many requests, please try again later"
