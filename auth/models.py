"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and services do
the work; these types only own the domain shape.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    admin = "admin"
    user = "user"


@dataclass
class User:
    """A registered identity.

    hashed_password is the bcrypt string; it never leaves the auth/ layer.
    deleted_at is set by a soft delete. Soft-deleted users are invisible to
    find_by_email/find_by_id and therefore cannot log in.
    """

    email: str
    hashed_password: str
    role: Role = Role.user
    id: int | None = None
    is_email_verified: bool = False
    created_at: str | None = None
    deleted_at: str | None = None


@dataclass(frozen=True)
class Claims:
    """Verified payload of a session token.

    Timestamps are unix seconds. At issuance expires_at = issued_at + 24h.
    """

    subject: int  # user id
    role: Role
    issued_at: int
    expires_at: int


@dataclass(frozen=True)
class LoginResult:
    """What a successful login hands back to the route layer -- never the hash."""

    token: str
    user_id: int
    email: str
