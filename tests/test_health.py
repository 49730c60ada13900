"""
tests/test_health.py -- Integration tests for GET /health.

Covers:
  - 200 response with status "healthy" and a parseable UTC timestamp
  - No authentication required
  - Unknown routes use the shared error envelope
"""

from __future__ import annotations

from datetime import datetime


def test_health_returns_200_with_timestamp(api_client):
    """Health endpoint returns 200 with status and current timestamp."""
    client, _ = api_client
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert datetime.fromisoformat(data["timestamp"]).tzinfo is not None


def test_health_no_auth_required(api_client):
    """Health endpoint is accessible even with a junk Authorization header."""
    client, _ = api_client
    resp = client.get("/health", headers={"Authorization": "Bearer junk"})
    assert resp.status_code == 200


def test_unknown_route_uses_error_envelope(api_client):
    client, _ = api_client
    resp = client.get("/does-not-exist")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "http_404"
