"""
auth/tokens.py -- Signed, time-bounded session tokens.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry sub (user id), role, iat and exp.
       Lifetime is fixed at 24 hours from issuance.

  Uniform failure: verify() raises TokenError for every kind of failure --
       bad signature, malformed structure, missing or ill-typed claims, expiry.
       Callers (the bearer gate) cannot tell which check failed, and neither
       can a client probing the API.

  Secret handling: the signing secret is passed in by the caller (create_app()
       reads it from Settings once at startup). There is no module-level key,
       so tests can build independent services with different secrets.

  Thread safety: TokenService holds only immutable values after __init__, so
       one instance is shared by every request without locking.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from jose import JWTError, jwt

from auth.errors import InternalServerError, TokenError
from auth.models import Claims, Role

logger = logging.getLogger("authgate.auth")

TOKEN_LIFETIME_SECONDS = 24 * 60 * 60
_ALGORITHM = "HS256"


class TokenService:
    """Issues and verifies HS256 session tokens.

    Usage:
        tokens = TokenService(settings.jwt_secret)
        token = tokens.generate(user.id, user.role)
        claims = tokens.verify(token)   # raises TokenError
    """

    def __init__(self, secret: str, clock: Callable[[], float] = time.time) -> None:
        if not secret:
            raise ValueError("TokenService requires a non-empty signing secret.")
        self._secret = secret
        self._clock = clock

    def generate(self, user_id: int, role: Role = Role.user) -> str:
        """Encode a signed token for user_id valid for TOKEN_LIFETIME_SECONDS.

        Two calls with the same arguments differ only in iat/exp.
        """
        now = int(self._clock())
        payload = {
            # JWT requires sub to be a string; verify() converts it back.
            "sub": str(user_id),
            "role": Role(role).value,
            "iat": now,
            "exp": now + TOKEN_LIFETIME_SECONDS,
        }
        try:
            return jwt.encode(payload, self._secret, algorithm=_ALGORITHM)
        except JWTError as exc:
            logger.error("Token signing failed for user_id=%s: %s", user_id, exc)
            raise InternalServerError() from exc

    def verify(self, token: str) -> Claims:
        """Decode and verify a token. Returns Claims or raises TokenError.

        jose checks the signature and exp against wall-clock time; the
        explicit exp check below applies the injected clock as well, so a
        token is rejected once either clock says it has expired.
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[_ALGORITHM])
            claims = Claims(
                subject=int(payload["sub"]),
                role=Role(payload["role"]),
                issued_at=int(payload["iat"]),
                expires_at=int(payload["exp"]),
            )
        except (JWTError, KeyError, TypeError, ValueError) as exc:
            raise TokenError() from exc
        if claims.expires_at <= int(self._clock()):
            raise TokenError()
        return claims
