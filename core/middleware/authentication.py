"""
Authentication middleware: the boundary with the external identity provider.

This middleware:
1. Reads a bearer JWT from the Authorization header
2. Verifies its signature and expiry with the shared secret
3. Attaches an immutable ``Identity`` (actor id + role) to the request scope

Requests without a token, or with one that fails verification, continue
without an identity; a rejected token is kept as ``auth_error`` and route
dependencies decide whether to answer 401. Tokens are never issued here.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional
import jwt
from fastapi import Request

from core.exceptions import (
    AuthenticationError,
    TokenExpiredAuthError,
    TokenInvalidAuthError,
)

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Actor roles recognised by the lifecycle engine."""

    JOB_SEEKER = "JOB_SEEKER"
    EMPLOYER = "EMPLOYER"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class Identity:
    """Authenticated actor attached to a request."""

    id: str
    role: Role

    @property
    def is_employer(self) -> bool:
        return self.role == Role.EMPLOYER

    @property
    def is_job_seeker(self) -> bool:
        return self.role == Role.JOB_SEEKER


class TokenInvalidError(Exception):
    """Raised when a bearer token cannot be turned into an identity."""


class TokenExpiredError(TokenInvalidError):
    pass


def identity_from_claims(claims: dict[str, Any]) -> Identity:
    """
    Build an ``Identity`` from verified JWT claims.

    The actor id comes from ``sub`` (or ``user_id`` for older tokens) and is
    kept as an opaque string.

    Raises:
        TokenInvalidError: If the subject is missing or the role is unknown
    """
    subject = claims.get("sub") or claims.get("user_id")
    if subject is None or str(subject).strip() == "":
        raise TokenInvalidError("Token missing subject")

    raw_role = claims.get("role")
    try:
        role = Role(str(raw_role).upper())
    except ValueError:
        raise TokenInvalidError(f"Unknown role: {raw_role}")

    return Identity(id=str(subject), role=role)


class AuthenticationMiddleware:
    """
    Verify bearer tokens and inject the caller's identity.

    The identity is stored in ``scope["state"]["identity"]`` so it is
    available as ``request.state.identity`` downstream; a token that fails
    verification leaves ``request.state.auth_error`` instead.
    """

    def __init__(
        self,
        app: Callable,
        jwt_secret: str,
        jwt_algorithm: str = "HS256",
    ):
        """
        Initialize authentication middleware.

        Args:
            app: ASGI application
            jwt_secret: Secret key for JWT verification
            jwt_algorithm: JWT signing algorithm
        """
        self.app = app
        self.jwt_secret = jwt_secret
        self.jwt_algorithm = jwt_algorithm

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        token = self._extract_token(request)
        state = scope.setdefault("state", {})
        state["identity"] = None
        state["auth_error"] = None

        if token is not None:
            try:
                state["identity"] = self._verify(token)
            except TokenExpiredError:
                state["auth_error"] = TokenExpiredAuthError()
            except TokenInvalidError as e:
                logger.warning(f"Invalid token: {str(e)}")
                state["auth_error"] = TokenInvalidAuthError()

        await self.app(scope, receive, send)

    def _extract_token(self, request: Request) -> Optional[str]:
        """
        Extract JWT token from Authorization header.

        Returns:
            JWT token, an empty string for a malformed header, or None
        """
        auth_header = request.headers.get("Authorization")
        if not auth_header:
            return None

        scheme, _, credentials = auth_header.partition(" ")
        if scheme.lower() != "bearer":
            return ""
        return credentials.strip()

    def _verify(self, token: str) -> Identity:
        if not token:
            raise TokenInvalidError("Empty bearer token")
        try:
            claims = jwt.decode(
                token,
                self.jwt_secret,
                algorithms=[self.jwt_algorithm],
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise TokenInvalidError(str(e))
        return identity_from_claims(claims)


def get_request_identity(request: Request) -> Optional[Identity]:
    """Identity attached by ``AuthenticationMiddleware``, if any."""
    return getattr(request.state, "identity", None)


def get_request_auth_error(request: Request) -> Optional[AuthenticationError]:
    """The rejected-token error, if a bearer token was sent but failed to verify."""
    return getattr(request.state, "auth_error", None)
