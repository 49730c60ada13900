"""
tests/conftest.py -- Shared test fixtures for AuthGate tests.

This module provides:
  - make_settings(): Settings with a fixed test secret, ignoring any .env file
  - _make_test_store(): isolated named shared-memory SQLite UserStore
  - api_client: TestClient over the real app with a generous rate limit
  - token_service: TokenService using the same secret as the app

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.
"""

from __future__ import annotations

from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from auth.store import UserStore
from auth.tokens import TokenService
from core.config import Settings

TEST_SECRET = "test-secret-0123456789abcdef0123456789abcdef"


def make_settings(**overrides) -> Settings:
    """Build Settings for tests without reading the developer's .env file."""
    values = {"jwt_secret": TEST_SECRET, "rate_limit_request": 10_000, "rate_limit_duration": 60}
    values.update(overrides)
    return Settings(_env_file=None, **values)


def _make_test_store(db_suffix: str) -> UserStore:
    """Create an isolated named shared-memory SQLite store.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state (e.g. 'api', 'ratelimit').
    """
    return UserStore(db_url=f"sqlite:///file:test_auth_{db_suffix}?mode=memory&cache=shared&uri=true")


@pytest.fixture
def store() -> Generator[UserStore, None, None]:
    """Fresh single-connection in-memory store for unit tests."""
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture(scope="session")
def token_service() -> TokenService:
    """TokenService sharing the app's secret, for minting tokens in tests."""
    return TokenService(TEST_SECRET)


@pytest.fixture(scope="module")
def api_client() -> Generator[tuple[TestClient, UserStore], None, None]:
    """Yield (client, store) for API integration tests.

    The TestClient runs the real FastAPI app (middleware, dependencies,
    exception handlers) against an isolated in-memory store. The rate limit is
    set high enough that no test in a module can trip it.
    """
    user_store = _make_test_store("api")
    app = create_app(make_settings(), user_store=user_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, user_store

    user_store.close()


@pytest.fixture(scope="session")
def make_token_service():
    """Factory for TokenServices on the app's secret with a custom clock (e.g. to mint expired tokens)."""

    def _make(clock: Callable[[], float]) -> TokenService:
        return TokenService(TEST_SECRET, clock=clock)

    return _make


@pytest.fixture(scope="session")
def settings_factory():
    """Expose make_settings() to test modules (e.g. for a small rate-limit quota)."""
    return make_settings
