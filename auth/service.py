"""
auth/service.py -- Login, registration and user management orchestration.

AuthService ties the password policy, bcrypt hasher, token service and the
user repository together. It raises AuthError subclasses; the API layer maps
them to HTTP responses.

Security design decisions:
  Uniform login failure: an unknown email and a wrong password both raise the
      same AuthenticationError. The unknown-email path still runs one bcrypt
      check against _DUMMY_HASH, so response time does not reveal whether an
      account exists.

  No auto-login on registration: register() persists the user and returns it.
      Clients call login() separately to obtain a token.

  Hash confinement: hashed_password is read here and in the store only. The
      objects returned to routes (LoginResult, User -> response model mapping
      in api/) never expose it, and it is never logged.

Concurrency: every method is synchronous. The API layer calls them from plain
`def` endpoints, which FastAPI runs on its threadpool, so bcrypt and store I/O
stay off the event loop.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging

from pydantic import EmailStr, TypeAdapter, ValidationError

from auth.errors import AuthenticationError, InsufficientPermissions, InvalidEmail, NotFound, UserAlreadyExists
from auth.models import Claims, LoginResult, Role, User
from auth.passwords import hash_password, validate_password, verify_password
from auth.store import UserRepository
from auth.tokens import TokenService

logger = logging.getLogger("authgate.auth")

_EMAIL = TypeAdapter(EmailStr)

# Timing equalization dummy hash. Computed once at import so the first login
# against an unknown email is not measurably slower than later ones.
_DUMMY_HASH: str = hash_password("authgate_timing_dummy")


def _validate_email(email: str) -> None:
    try:
        _EMAIL.validate_python(email)
    except ValidationError as exc:
        raise InvalidEmail() from exc


class AuthService:
    """Authentication flow and user management over a UserRepository.

    Usage:
        service = AuthService(store, TokenService(settings.jwt_secret))
        service.register("alice@example.com", "Abcdef1!")
        result = service.login("alice@example.com", "Abcdef1!")
    """

    def __init__(self, store: UserRepository, tokens: TokenService) -> None:
        self.store = store
        self.tokens = tokens

    # ------------------------------------------------------------------
    # Authentication flow
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> LoginResult:
        """Verify credentials and issue a token.

        Raises AuthenticationError for an unknown email and for a wrong
        password alike.
        """
        user = self.store.find_by_email(email)
        if user is None:
            # Equalize timing -- do NOT return before running bcrypt.
            verify_password(password, _DUMMY_HASH)
            logger.info("Login failed")
            raise AuthenticationError()
        if not verify_password(password, user.hashed_password):
            logger.info("Login failed")
            raise AuthenticationError()

        token = self.tokens.generate(user.id, user.role)
        logger.info("Login succeeded user_id=%d", user.id)
        return LoginResult(token=token, user_id=user.id, email=user.email)

    def register(self, email: str, password: str, role: Role = Role.user) -> User:
        """Create a new account with is_email_verified=False. Does not issue a token.

        Order of checks: existing email (UserAlreadyExists), email format
        (InvalidEmail), password policy (InvalidPassword).
        """
        if self.store.find_by_email(email) is not None:
            raise UserAlreadyExists()
        _validate_email(email)
        validate_password(password)

        user = self.store.create(
            User(
                email=email,
                hashed_password=hash_password(password),
                role=role,
                is_email_verified=False,
            )
        )
        logger.info("Registered user_id=%d role=%s", user.id, user.role.value)
        return user

    # ------------------------------------------------------------------
    # User management
    # ------------------------------------------------------------------

    def create_user(self, email: str, password: str) -> User:
        """Create a user on behalf of an authenticated caller. Same rules as register()."""
        return self.register(email, password)

    def get_user(self, user_id: int) -> User:
        user = self.store.find_by_id(user_id)
        if user is None:
            raise NotFound()
        return user

    def list_users(self, limit: int = 10, offset: int = 0) -> list[User]:
        return self.store.list(limit=limit, offset=offset)

    def update_user(
        self,
        caller: Claims,
        user_id: int,
        email: str | None = None,
        password: str | None = None,
    ) -> User:
        """Change a user's email and/or password.

        Only the user themselves or an admin may do this. A new password goes
        through the policy and is rehashed; a new email is format-checked.
        """
        self._check_can_modify(caller, user_id)
        self.get_user(user_id)

        hashed: str | None = None
        if email is not None:
            _validate_email(email)
        if password is not None:
            validate_password(password)
            hashed = hash_password(password)

        updated = self.store.update(user_id, email=email, hashed_password=hashed)
        if updated is None:
            raise NotFound()
        logger.info("Updated user_id=%d by user_id=%d", user_id, caller.subject)
        return updated

    def delete_user(self, caller: Claims, user_id: int) -> None:
        """Soft-delete a user. Only the user themselves or an admin may do this."""
        self._check_can_modify(caller, user_id)
        if not self.store.soft_delete(user_id):
            raise NotFound()
        logger.info("Soft-deleted user_id=%d by user_id=%d", user_id, caller.subject)

    @staticmethod
    def _check_can_modify(caller: Claims, user_id: int) -> None:
        if caller.subject != user_id and caller.role != Role.admin:
            raise InsufficientPermissions()
