#!/usr/bin/env python3
"""
AuthGate -- credential login, signed session tokens and bearer-protected routes.

Usage:
  python main.py

Environment variables:
  JWT_SECRET            Required. HS256 signing secret; startup aborts without it.
  PORT                  Listen port (default 3000).
  HOST                  Bind address (default 127.0.0.1).
  RATE_LIMIT_REQUEST    Requests allowed per window (default 100).
  RATE_LIMIT_DURATION   Window length in seconds (default 60).
  DATABASE_URL          SQLAlchemy URL for the user store (default sqlite:///authgate.db).
  CORS_ORIGINS          JSON list of allowed browser origins (default ["*"]).
  LOG_LEVEL             Root log level (default INFO).
"""

import sys

import uvicorn
from pydantic import ValidationError

from core.config import get_settings


def main() -> int:
    try:
        settings = get_settings()
    except ValidationError as exc:
        print(f"Configuration error:\n{exc}", file=sys.stderr)
        return 1

    uvicorn.run(
        "asgi:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
