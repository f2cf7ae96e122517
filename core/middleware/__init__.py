"""
Core middleware package.

- Error translation to the JSON envelope
- Structured request logging with credential masking
- Bearer-token authentication adapter
- Role guard dependencies
"""

from core.middleware.error_handling import (
    ErrorHandlingMiddleware,
    setup_error_handlers,
    sanitize_error_message,
    error_response,
)

from core.middleware.logging import (
    StructuredLoggingMiddleware,
    setup_logging,
)

from core.middleware.authentication import (
    AuthenticationMiddleware,
    Identity,
    Role,
    get_request_auth_error,
)

from core.middleware.authorization import (
    get_optional_identity,
    require_identity,
    require_role,
    require_employer,
    require_job_seeker,
)

__all__ = [
    # Error handling
    "ErrorHandlingMiddleware",
    "setup_error_handlers",
    "sanitize_error_message",
    "error_response",
    # Logging
    "StructuredLoggingMiddleware",
    "setup_logging",
    # Authentication
    "AuthenticationMiddleware",
    "Identity",
    "Role",
    "get_request_auth_error",
    # Authorization
    "get_optional_identity",
    "require_identity",
    "require_role",
    "require_employer",
    "require_job_seeker",
]
