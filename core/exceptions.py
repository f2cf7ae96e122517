"""
Error taxonomy for the lifecycle engine.

Components raise these; a single set of handlers in
``core.middleware.error_handling`` turns them into the JSON envelope.
"""

from typing import Any, Optional


class AppError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, details: Optional[Any] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input."""

    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Request validation failed"


class AuthenticationError(AppError):
    """No identity, or an identity that could not be verified."""

    status_code = 401
    code = "AUTHENTICATION_REQUIRED"
    default_message = "Authentication required"


class TokenExpiredAuthError(AuthenticationError):
    code = "TOKEN_EXPIRED"
    default_message = "Authentication token has expired"


class TokenInvalidAuthError(AuthenticationError):
    code = "TOKEN_INVALID"
    default_message = "Invalid authentication token"


class AuthorizationError(AppError):
    """Identity present but lacking the required role."""

    status_code = 403
    code = "FORBIDDEN"
    default_message = "You don't have permission to perform this action"


class NotFoundError(AppError):
    """Missing entity, or one the caller does not own."""

    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"
    default_message = "Resource conflict"


class DuplicateApplicationError(ConflictError):
    code = "DUPLICATE_APPLICATION"
    default_message = "You have already applied for this job"


class StaleVersionError(ConflictError):
    """The caller's expected version no longer matches the stored row."""

    code = "STALE_VERSION"
    default_message = "The resource was modified by another request"


class UnprocessableError(AppError):
    status_code = 422
    code = "UNPROCESSABLE"
    default_message = "The request cannot be processed in the current state"


class JobClosedError(UnprocessableError):
    code = "JOB_CLOSED"
    default_message = "Job is no longer accepting applications"


class InternalError(AppError):
    """Persistence or transaction failure."""
