"""
auth/passwords.py -- Password policy and bcrypt hashing.

Policy: at least 8 characters drawn only from letters, digits and the special
set @$!%*?&, with at least one lowercase letter, one uppercase letter, one
digit and one special character. A violation is reported as a single
InvalidPassword; which rule failed is not disclosed.

Hashing: bcrypt directly (no passlib wrapper). gensalt() embeds a fresh salt
and the cost factor in every hash, so the stored string is self-describing.
The default cost of 12 puts one hash/verify in the hundreds of milliseconds.
That is CPU-bound work: callers in the API layer are plain `def` endpoints so
FastAPI runs them on its threadpool instead of the event loop.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import re

import bcrypt

from auth.errors import InvalidPassword

SPECIAL_CHARACTERS = "@$!%*?&"
MIN_PASSWORD_LENGTH = 8

# bcrypt only looks at the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72

_ALLOWED = re.compile(r"^[A-Za-z\d@$!%*?&]+$")
_RULES = (
    re.compile(r"[a-z]"),
    re.compile(r"[A-Z]"),
    re.compile(r"\d"),
    re.compile(r"[@$!%*?&]"),
)


def validate_password(password: str) -> None:
    """Raise InvalidPassword unless the password satisfies every policy rule."""
    if len(password) < MIN_PASSWORD_LENGTH or not _ALLOWED.match(password):
        raise InvalidPassword()
    if not all(rule.search(password) for rule in _RULES):
        raise InvalidPassword()


def _secret_bytes(plain: str) -> bytes:
    return plain.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    Input past 72 bytes is cut off before hashing, the classic bcrypt
    behaviour. Recent bcrypt releases raise ValueError instead of truncating,
    so the cut happens here and a long policy-compliant password still hashes.
    """
    return bcrypt.hashpw(_secret_bytes(plain), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    Any malformed hash (wrong prefix, truncated, empty) yields False.
    """
    try:
        return bcrypt.checkpw(_secret_bytes(plain), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False
