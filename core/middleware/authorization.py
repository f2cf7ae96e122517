"""
Authorization guard.

Role checks are FastAPI dependencies. Ownership is not checked here: the
lifecycle services filter every lookup by owner id, so a foreign record is
indistinguishable from a missing one (404).
"""

import logging
from typing import Callable, Optional
from fastapi import Request

from core.exceptions import AuthenticationError, AuthorizationError
from core.middleware.authentication import (
    Identity,
    Role,
    get_request_auth_error,
    get_request_identity,
)

logger = logging.getLogger(__name__)


async def get_optional_identity(request: Request) -> Optional[Identity]:
    """
    Identity for routes that also serve anonymous callers.

    An expired or invalid token is not an error here: the request is served
    anonymously.
    """
    auth_error = get_request_auth_error(request)
    if auth_error is not None:
        logger.warning(
            f"{auth_error.code} on {request.method} {request.url.path}; "
            f"continuing anonymously"
        )
    return get_request_identity(request)


async def require_identity(request: Request) -> Identity:
    """
    Require an authenticated caller.

    Raises:
        AuthenticationError: If no identity is attached to the request;
            TOKEN_EXPIRED / TOKEN_INVALID when a bearer token was rejected
    """
    identity = get_request_identity(request)
    if identity is None:
        raise get_request_auth_error(request) or AuthenticationError()
    return identity


def require_role(*allowed_roles: Role) -> Callable:
    """
    Dependency to require one of ``allowed_roles``.

    Args:
        allowed_roles: Roles allowed to call the route

    Returns:
        FastAPI dependency resolving to the caller's identity
    """

    async def dependency(request: Request) -> Identity:
        identity = await require_identity(request)
        if identity.role not in allowed_roles:
            logger.warning(
                f"User {identity.id} with role {identity.role.value} attempted "
                f"{request.method} {request.url.path} requiring roles: "
                f"{', '.join(r.value for r in allowed_roles)}"
            )
            raise AuthorizationError(
                f"This action requires role: "
                f"{', '.join(r.value for r in allowed_roles)}"
            )
        return identity

    return dependency


require_employer = require_role(Role.EMPLOYER)
require_job_seeker = require_role(Role.JOB_SEEKER)
