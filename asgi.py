"""
asgi.py -- Application assembly for AuthGate.

Resolves Settings from the environment once, configures logging, and exposes
the ASGI app. Importing this module fails fast when JWT_SECRET is missing or
a numeric variable does not parse.

Run with:  uvicorn asgi:app --reload
"""

from api.main import configure_logging, create_app
from core.config import get_settings

_settings = get_settings()
configure_logging(_settings)

app = create_app(_settings)
