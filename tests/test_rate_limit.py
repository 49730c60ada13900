"""
tests/test_rate_limit.py -- Integration tests for the global fixed-window rate limit.

Covers:
  - With quota N=3, the 4th request inside the window gets 429 with Retry-After
  - The quota is shared across routes and clients (global scope)
  - Rejected requests never reach the handler
  - After the window elapses the counter resets and requests succeed again
  - build_limiter() wiring: configured quota string and the constant key
"""

from __future__ import annotations

import time
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from api.limiter import GLOBAL_KEY, build_limiter, global_key
from api.main import create_app
from auth.store import UserStore

WINDOW_SECONDS = 1


@pytest.fixture
def limited_client(settings_factory) -> Generator[TestClient, None, None]:
    """TestClient with a quota of 3 requests per 1-second window.

    Function-scoped: every test starts with a fresh limiter and empty window.
    """
    user_store = UserStore("sqlite:///file:test_auth_ratelimit?mode=memory&cache=shared&uri=true")
    app = create_app(settings_factory(rate_limit_request=3, rate_limit_duration=WINDOW_SECONDS), user_store=user_store)
    with TestClient(app) as client:
        yield client
    user_store.close()


def test_fourth_request_in_window_is_rejected(limited_client: TestClient) -> None:
    for _ in range(3):
        assert limited_client.get("/health").status_code == 200
    resp = limited_client.get("/health")
    assert resp.status_code == 429
    assert resp.json()["error"]["code"] == "rate_limited"
    assert resp.headers["Retry-After"] == str(WINDOW_SECONDS)


def test_quota_is_shared_across_routes(limited_client: TestClient) -> None:
    assert limited_client.get("/health").status_code == 200
    assert limited_client.get("/protected").status_code == 401
    assert limited_client.get("/users").status_code == 401
    # The gate would answer 401; the limiter answers first.
    assert limited_client.get("/protected").status_code == 429


def test_login_shares_the_window_used_by_health(limited_client: TestClient) -> None:
    for _ in range(3):
        assert limited_client.get("/health").status_code == 200
    resp = limited_client.post("/auth/login", json={"email": "nobody@example.com", "password": "Abcdef1!"})
    assert resp.status_code == 429


def test_rejected_request_does_not_reach_handler(limited_client: TestClient) -> None:
    for _ in range(3):
        limited_client.get("/health")
    resp = limited_client.post("/auth/register", json={"email": "late@example.com", "password": "Abcdef1!"})
    assert resp.status_code == 429
    assert limited_client.app.state.user_store.find_by_email("late@example.com") is None


def test_counter_resets_after_window(limited_client: TestClient) -> None:
    for _ in range(3):
        assert limited_client.get("/health").status_code == 200
    assert limited_client.get("/health").status_code == 429

    time.sleep(WINDOW_SECONDS + 0.2)

    assert limited_client.get("/health").status_code == 200


def test_build_limiter_uses_configured_quota_and_global_key(settings_factory) -> None:
    settings = settings_factory(rate_limit_request=5, rate_limit_duration=30)
    limiter = build_limiter(settings)
    assert settings.rate_limit == "5/30 seconds"
    assert limiter.enabled
    assert global_key(None) == GLOBAL_KEY
