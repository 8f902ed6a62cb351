"""
Request-time authentication.

``AuthenticationMiddleware`` runs for every request before routing.  It
only establishes identity: a valid bearer token attaches an
``Identity`` to ``request.state.identity``, while a missing or invalid
token leaves the request anonymous.  Rejecting anonymous callers is the
job of the ``require_identity`` dependency on protected routes, so
public routes such as login keep working with a stale token.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from .errors import UnauthorizedError
from .security import TokenService


BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class Identity:
    """Authenticated caller attached to the request."""

    user_id: int
    email: str


def resolve_identity(authorization: Optional[str], token_service: TokenService) -> Optional[Identity]:
    """Turn an ``Authorization`` header value into an ``Identity``.

    Returns ``None`` when the header is absent, uses another scheme or
    carries an invalid token.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):]
    claims = token_service.decode(token)
    if claims is None:
        return None
    return Identity(user_id=claims.user_id, email=claims.email)


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """Attach the caller's identity to ``request.state`` when a valid token is sent."""

    def __init__(self, app: ASGIApp, token_service: TokenService) -> None:
        super().__init__(app)
        self.token_service = token_service

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if getattr(request.state, "identity", None) is None:
            request.state.identity = resolve_identity(
                request.headers.get("Authorization"), self.token_service
            )
        return await call_next(request)


def get_identity(request: Request) -> Optional[Identity]:
    """Return the identity established by the middleware, if any."""
    return getattr(request.state, "identity", None)


def require_identity(request: Request) -> Identity:
    """Dependency for protected routes.

    Raises ``UnauthorizedError`` (HTTP 401) when the request is anonymous.
    """
    identity = get_identity(request)
    if identity is None:
        raise UnauthorizedError("Not authenticated")
    return identity
