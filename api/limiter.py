"""
api/limiter.py -- Process-wide slowapi rate limiter.

One Limiter is built per application in create_app() and attached to
app.state.limiter, where SlowAPIMiddleware looks for it. Every routed request
counts against the same quota: RATE_LIMIT_REQUEST requests per
RATE_LIMIT_DURATION seconds.

Strategy: fixed window. The window opens on the first request after a reset
and its counter expires RATE_LIMIT_DURATION seconds later. A client can
therefore land up to 2N requests around a window boundary; a moving-window
strategy would be stricter but changes observable behaviour.

Scope: global. The quota is an application limit, which slowapi counts under
one "global" scope instead of one scope per endpoint, and the key function
returns a constant, so every client and every route share one counter.
Swap in slowapi.util.get_remote_address for per-IP limits.

Storage: "memory://" (limits MemoryStorage). Increments happen under the
storage lock before the request is dispatched, so a client disconnect cannot
leave a counter half-updated. Counters are per process; running several
workers multiplies the effective quota.
"""

from __future__ import annotations

from slowapi import Limiter
from starlette.requests import Request

from core.config import Settings

GLOBAL_KEY = "global"


def global_key(request: Request) -> str:
    """Key function that puts every request in the same bucket."""
    return GLOBAL_KEY


def build_limiter(settings: Settings) -> Limiter:
    """Create the shared fixed-window limiter for the configured quota."""
    return Limiter(
        key_func=global_key,
        application_limits=[settings.rate_limit],
        strategy="fixed-window",
        storage_uri="memory://",
        headers_enabled=False,
    )
