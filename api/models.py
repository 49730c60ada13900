"""
API request and response models for AuthGate REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

Separation of concerns: auth/ models = domain truth; api/ models = API contract.
No response model has a password or hash field.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from auth.models import User

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class CredentialsRequest(BaseModel):
    """Request body for POST /auth/login, POST /auth/register and POST /users.

    Both fields are plain strings with no length bounds here. Email format and
    password policy are checked in AuthService, so a rejected value is a 400
    (register) or a uniform 401 (login), never a 422 that would reveal which
    rule rejected it. Whitespace is not stripped: a password is compared
    exactly as sent.
    """

    email: str
    password: str


class UserUpdateRequest(BaseModel):
    """Request body for PUT /users/{user_id}. Omitted fields are unchanged."""

    email: Optional[str] = None
    password: Optional[str] = None


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class LoginResponse(BaseModel):
    """Response for POST /auth/login."""

    model_config = ConfigDict(frozen=True)

    token: str
    user_id: int
    email: str


class RegisterResponse(BaseModel):
    """Response for POST /auth/register. Registration never returns a token."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    email: str


class ProtectedResponse(BaseModel):
    """Response for GET /protected."""

    model_config = ConfigDict(frozen=True)

    message: str
    user_id: int


class UserResponse(BaseModel):
    """Public view of a user record."""

    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    role: str
    is_email_verified: bool
    created_at: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        """Build a UserResponse from a domain User, dropping the password hash."""
        return cls(
            id=user.id,
            email=user.email,
            role=user.role.value,
            is_email_verified=user.is_email_verified,
            created_at=user.created_at or "",
        )


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    timestamp: str
