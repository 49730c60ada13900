"""
auth/store.py -- User persistence: the repository interface and its
SQLAlchemy Core implementation.

Pattern: Repository + Data Mapper.
UserRepository is the abstract capability the auth core depends on; UserStore
is the SQLAlchemy-backed repository and _row_to_user is the mapper. Service
and route code never touches SQL directly, and any other persistence backend
can be substituted by implementing UserRepository.

Security:
  All queries use bound parameters. No f-strings in SQL.

Soft delete:
  soft_delete() stamps deleted_at instead of removing the row. Lookups by
  email or id ignore soft-deleted rows, so a deleted user cannot log in and
  a fresh registration with the same email is still refused by the UNIQUE
  constraint (the email stays reserved).

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Integer, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import SingletonThreadPool

from auth.errors import UserAlreadyExists
from auth.models import Role, User

_DEFAULT_DB_URL = "sqlite:///authgate.db"

# ---------------------------------------------------------------------------
# Repository interface
# ---------------------------------------------------------------------------


class UserRepository(ABC):
    """Abstract user-store capability consumed by AuthService."""

    @abstractmethod
    def find_by_email(self, email: str) -> User | None: ...

    @abstractmethod
    def find_by_id(self, user_id: int) -> User | None: ...

    @abstractmethod
    def create(self, user: User) -> User:
        """Persist a new user and return it with id and created_at filled in.

        Raises UserAlreadyExists if the email is already taken.
        """

    @abstractmethod
    def update(
        self,
        user_id: int,
        email: str | None = None,
        hashed_password: str | None = None,
        role: Role | None = None,
    ) -> User | None:
        """Apply the given field changes. Returns the updated user, or None if not found."""

    @abstractmethod
    def list(self, limit: int = 10, offset: int = 0, include_deleted: bool = False) -> list[User]: ...

    @abstractmethod
    def soft_delete(self, user_id: int) -> bool: ...

    @abstractmethod
    def verify_email(self, user_id: int) -> User | None: ...

    def close(self) -> None:  # noqa: B027 -- optional hook, not every backend holds resources
        pass


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("role", String(16), nullable=False, server_default=Role.user.value),
    Column("is_email_verified", Boolean, nullable=False, server_default="0"),
    Column("created_at", String(32), nullable=False),
    Column("deleted_at", String(32)),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _is_memory_url(db_url: str) -> bool:
    """True for sqlite:///:memory: and file: URIs opened with mode=memory."""
    return db_url.endswith(":memory:") or db_url == "sqlite://" or "mode=memory" in db_url


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore(UserRepository):
    """SQLAlchemy Core implementation of UserRepository.

    Usage:
        store = UserStore("sqlite:///authgate.db")
        user = store.create(User(email="a@example.com", hashed_password=hash_password("Abcdef1!")))
        store.find_by_email("a@example.com")
        store.close()
    """

    def __init__(self, db_url: str = _DEFAULT_DB_URL) -> None:
        engine_kwargs: dict = {}
        if db_url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if _is_memory_url(db_url):
                # One connection per thread; a shared-cache memory DB lives as
                # long as any of them stays open.
                engine_kwargs["poolclass"] = SingletonThreadPool
        self.engine: Engine = create_engine(db_url, **engine_kwargs)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_by_email(self, email: str) -> User | None:
        """Look up an active user by exact email. Returns None if absent or soft-deleted."""
        with self.engine.connect() as conn:
            row = conn.execute(
                _users.select().where((_users.c.email == email) & (_users.c.deleted_at.is_(None)))
            ).fetchone()
        return _row_to_user(row) if row is not None else None

    def find_by_id(self, user_id: int) -> User | None:
        """Look up an active user by primary key. Returns None if absent or soft-deleted."""
        with self.engine.connect() as conn:
            row = conn.execute(
                _users.select().where((_users.c.id == user_id) & (_users.c.deleted_at.is_(None)))
            ).fetchone()
        return _row_to_user(row) if row is not None else None

    def list(self, limit: int = 10, offset: int = 0, include_deleted: bool = False) -> list[User]:
        """Return a page of users ordered by id."""
        query = _users.select()
        if not include_deleted:
            query = query.where(_users.c.deleted_at.is_(None))
        query = query.order_by(_users.c.id).limit(limit).offset(offset)
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_user(r) for r in rows]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, user: User) -> User:
        """Insert a new user and return the stored record.

        A UNIQUE violation on email means another request registered the same
        address between the caller's existence check and this insert; it is
        reported as UserAlreadyExists rather than a database error.
        """
        created_at = _now_iso()
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    _users.insert().values(
                        email=user.email,
                        hashed_password=user.hashed_password,
                        role=Role(user.role).value,
                        is_email_verified=user.is_email_verified,
                        created_at=created_at,
                    )
                )
                conn.commit()
        except IntegrityError as exc:
            raise UserAlreadyExists() from exc
        return User(
            id=result.inserted_primary_key[0],
            email=user.email,
            hashed_password=user.hashed_password,
            role=Role(user.role),
            is_email_verified=user.is_email_verified,
            created_at=created_at,
        )

    def update(
        self,
        user_id: int,
        email: str | None = None,
        hashed_password: str | None = None,
        role: Role | None = None,
    ) -> User | None:
        """Update mutable fields on an active user.

        Fields left as None are unchanged. Returns the fresh record, or None
        if user_id is unknown or soft-deleted. A duplicate email raises
        UserAlreadyExists.
        """
        fields: dict = {}
        if email is not None:
            fields["email"] = email
        if hashed_password is not None:
            fields["hashed_password"] = hashed_password
        if role is not None:
            fields["role"] = Role(role).value
        if fields:
            try:
                with self.engine.connect() as conn:
                    conn.execute(
                        _users.update()
                        .where((_users.c.id == user_id) & (_users.c.deleted_at.is_(None)))
                        .values(**fields)
                    )
                    conn.commit()
            except IntegrityError as exc:
                raise UserAlreadyExists() from exc
        return self.find_by_id(user_id)

    def soft_delete(self, user_id: int) -> bool:
        """Stamp deleted_at on an active user. Returns False if not found or already deleted."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.update()
                .where((_users.c.id == user_id) & (_users.c.deleted_at.is_(None)))
                .values(deleted_at=_now_iso())
            )
            conn.commit()
        return result.rowcount > 0

    def verify_email(self, user_id: int) -> User | None:
        """Mark the user's email as verified. Returns the updated user, or None if not found."""
        with self.engine.connect() as conn:
            conn.execute(
                _users.update()
                .where((_users.c.id == user_id) & (_users.c.deleted_at.is_(None)))
                .values(is_email_verified=True)
            )
            conn.commit()
        return self.find_by_id(user_id)

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        hashed_password=row.hashed_password,
        role=Role(row.role),
        is_email_verified=bool(row.is_email_verified),
        created_at=row.created_at,
        deleted_at=row.deleted_at,
    )
