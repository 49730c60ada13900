"""
auth/dependencies.py -- FastAPI Depends() helpers for bearer authentication.

require_bearer() is the gate for protected routers. It is attached at router
level (APIRouter(dependencies=[Depends(require_bearer)])), so every route on
that router is rejected with 401 before its handler runs unless the request
carries a valid "Authorization: Bearer <token>" header.

On success the verified Claims are stored on request.state.claims.
request.state is created per request by Starlette, so the identity never
leaks across concurrent requests. Handlers read it with get_current_claims().

Missing header, wrong scheme, empty token, bad signature, malformed token and
expired token all produce the same AuthenticationError -> identical 401 body.

Layer rule: auth/dependencies.py may import from fastapi (for Request)
because this module is part of the FastAPI dependency injection system.
It does not import from api/ or core/.
"""

from __future__ import annotations

import logging

from fastapi import Request

from auth.errors import AuthenticationError, TokenError
from auth.models import Claims
from auth.service import AuthService
from auth.tokens import TokenService

logger = logging.getLogger("authgate.auth")

_SCHEME = "bearer"


def _extract_bearer(request: Request) -> str | None:
    """Return the token from an "Authorization: Bearer <token>" header, else None."""
    header = request.headers.get("Authorization")
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    token = token.strip()
    if scheme.lower() != _SCHEME or not token:
        return None
    return token


def require_bearer(request: Request) -> Claims:
    """Authenticate the request or raise AuthenticationError (401).

    Use at router level:
        router = APIRouter(dependencies=[Depends(require_bearer)])
    """
    token = _extract_bearer(request)
    if token is None:
        logger.debug("Rejected %s %s: missing bearer token", request.method, request.url.path)
        raise AuthenticationError()

    tokens: TokenService = request.app.state.token_service
    try:
        claims = tokens.verify(token)
    except TokenError:
        logger.info("Rejected %s %s: invalid bearer token", request.method, request.url.path)
        raise

    request.state.claims = claims
    return claims


def get_current_claims(request: Request) -> Claims:
    """Return the Claims injected by require_bearer().

    Raises AuthenticationError if used on a route that is not behind the gate,
    so a wiring mistake fails closed instead of running without an identity.
    """
    claims = getattr(request.state, "claims", None)
    if claims is None:
        raise AuthenticationError()
    return claims


def get_auth_service(request: Request) -> AuthService:
    """Return the AuthService built at startup (see api.main.lifespan)."""
    return request.app.state.auth_service
