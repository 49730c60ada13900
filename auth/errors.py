"""
auth/errors.py -- Domain error taxonomy for the auth layer.

Every failure the auth core can report is an AuthError subclass carrying a
stable machine code, a short human message and the HTTP status the API layer
maps it to. The messages are deliberately coarse: "unknown email", "wrong
password", "missing header" and "expired token" all surface as the same
AuthenticationError so responses cannot be used to enumerate accounts or probe
which token check failed.

Library failures (SQLAlchemy, jose, bcrypt) are wrapped into one of these
classes at the point they are caught. Internal detail goes to the log, never
into the error message.

Layer rule: no imports from api/ or core/. The status codes are plain ints so
auth/ does not depend on the web framework.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for auth-layer failures."""

    status_code: int = 500
    code: str = "internal_error"
    message: str = "Internal server error."

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class AuthenticationError(AuthError):
    status_code = 401
    code = "authentication_failed"
    message = "Authentication failed."


class TokenError(AuthenticationError):
    """Raised by TokenService.verify for any invalid token.

    Subclasses AuthenticationError so the gate can let it propagate unchanged:
    a bad token and a missing header produce identical 401 responses.
    """


class InvalidPassword(AuthError):
    status_code = 400
    code = "invalid_password"
    message = "Password does not meet requirements."


class InvalidEmail(AuthError):
    status_code = 400
    code = "invalid_email"
    message = "Invalid email format."


class UserAlreadyExists(AuthError):
    status_code = 409
    code = "user_exists"
    message = "User already exists."


class InsufficientPermissions(AuthError):
    status_code = 403
    code = "forbidden"
    message = "Insufficient permissions."


class NotFound(AuthError):
    status_code = 404
    code = "not_found"
    message = "Resource not found."


class InternalServerError(AuthError):
    pass
