"""
api/main.py -- FastAPI application factory for AuthGate.

Run with:      uvicorn asgi:app --reload
               python main.py

create_app() builds a fully wired application from a Settings instance.
Everything with process lifetime -- the signing secret, the rate limiter, the
user store -- is constructed here and hung off app.state, then handed to the
code that needs it via FastAPI dependencies. Nothing reads configuration or
shared state from module globals.

Middleware stack (outermost to innermost):
  1. CORSMiddleware     -- adds CORS headers for allowed browser origins
  2. SlowAPIMiddleware  -- global fixed-window rate limit (429 before dispatch)
  3. log_requests       -- method, path, status, latency, client host

Lifespan handles startup (user store, token service, auth service) and
shutdown (close the store) symmetrically.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException

from api.limiter import build_limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.protected import router as protected_router
from api.routes.users import router as users_router
from auth.errors import AuthError
from auth.service import AuthService
from auth.store import UserRepository, UserStore
from auth.tokens import TokenService
from core.config import Settings, get_settings

logger = logging.getLogger("authgate.api")

__version__ = "0.1.0"


def configure_logging(settings: Settings) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _error_response(status_code: int, code: str, message: str, detail: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail)).model_dump(
            exclude_none=True
        ),
    )


def create_app(settings: Settings | None = None, user_store: UserRepository | None = None) -> FastAPI:
    """Build the AuthGate application.

    Args:
        settings:   Resolved configuration. Defaults to get_settings(), which
                    raises if JWT_SECRET is missing -- the process never starts
                    without a signing secret.
        user_store: Repository to use instead of a UserStore on
                    settings.database_url. The caller keeps ownership and
                    closes it; a store created here is closed on shutdown.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Open the user store and build the services on startup; close on shutdown."""
        logger.info("AuthGate starting up")
        owns_store = user_store is None
        store = user_store if user_store is not None else UserStore(settings.database_url)
        app.state.user_store = store
        app.state.auth_service = AuthService(store, app.state.token_service)
        logger.info(
            "Auth initialized (rate_limit=%s, database=%s)",
            settings.rate_limit,
            "external" if not owns_store else settings.database_url.split("://", 1)[0],
        )

        yield

        if owns_store:
            store.close()
        logger.info("AuthGate shutdown complete")

    app = FastAPI(
        title="AuthGate API",
        description="Credential login, signed session tokens and bearer-protected routes.",
        version=__version__,
        lifespan=lifespan,
    )

    # Built eagerly (not in lifespan) so a bad secret fails at create_app() time.
    app.state.settings = settings
    app.state.token_service = TokenService(settings.jwt_secret)
    # SlowAPIMiddleware looks for app.state.limiter by convention.
    app.state.limiter = build_limiter(settings)

    # ---------------------------------------------------------------------
    # Middleware stack
    #
    # add_middleware() wraps the existing stack, so the last one added is the
    # outermost. Register innermost-first: SlowAPI, then CORS.
    # ---------------------------------------------------------------------

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s %d %.1fms %s",
            request.method,
            request.url.path,
            response.status_code,
            ms,
            request.client.host if request.client else "unknown",
        )
        return response

    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=3600,
    )

    # ---------------------------------------------------------------------
    # Router registration
    # ---------------------------------------------------------------------

    app.include_router(auth_router, tags=["Auth"])
    app.include_router(protected_router, tags=["Protected"])
    app.include_router(users_router, tags=["Users"])

    @app.get("/health", tags=["Health"])
    async def health() -> HealthResponse:
        """Liveness probe. Counts against the rate limit like every other route."""
        return HealthResponse(timestamp=datetime.now(timezone.utc).isoformat())

    # ---------------------------------------------------------------------
    # Exception handlers
    #
    # All handlers return the same ErrorResponse envelope so API clients can
    # parse errors uniformly without inspecting status codes to choose a schema.
    # ---------------------------------------------------------------------

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
        """Map domain errors to their status code with a stable, detail-free body."""
        response = _error_response(exc.status_code, exc.code, exc.message)
        if exc.status_code == 401:
            response.headers["WWW-Authenticate"] = "Bearer"
        return response

    @app.exception_handler(RateLimitExceeded)
    def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        """Return 429 when the global quota for the current window is used up.

        Plain def: SlowAPIMiddleware invokes this handler synchronously.

        Retry-After is the full window length: the fixed window's exact reset
        time is not exposed by slowapi on the exception.
        """
        logger.warning("Rate limit exceeded on %s %s (%s)", request.method, request.url.path, exc.detail)
        response = _error_response(429, "rate_limited", "Too many requests.")
        response.headers["Retry-After"] = str(settings.rate_limit_duration)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Return 422 when the body or query fails validation.

        Only field locations and messages are echoed back -- never the input
        values, which may contain a password.
        """
        fields = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}" for err in exc.errors()
        )
        return _error_response(422, "validation_error", "Request validation failed.", fields)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        """Return a structured error for framework HTTP exceptions (404 route, 405 method)."""
        return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail))

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all handler for unexpected server errors.

        The traceback goes to the log only. The client receives a generic
        message so store or library internals never leak into responses.
        """
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return _error_response(500, "internal_error", "Internal server error.")

    return app
