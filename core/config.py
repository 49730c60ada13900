"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for AuthGate happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead,
or accept a Settings instance from the caller (create_app() does this).

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file. Field names map to env var names
      (e.g. jwt_secret -> JWT_SECRET, rate_limit_request -> RATE_LIMIT_REQUEST).
      Type coercion is built in, so PORT=abc fails at startup, not at runtime.

  @model_validator(mode="after"): Enforces the signing secret policy once all
      fields are resolved. A missing JWT_SECRET is a hard startup failure.

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

import logging
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("authgate.config")


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    jwt_secret is the only required value. Everything else has a default that
    matches the documented environment contract (PORT=3000,
    RATE_LIMIT_REQUEST=100, RATE_LIMIT_DURATION=60).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = Field(default=3000, ge=1, le=65535)

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    # Empty string is the "not configured" sentinel; the validator below
    # refuses to start with it.
    jwt_secret: str = ""

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    database_url: str = "sqlite:///authgate.db"

    # ------------------------------------------------------------------
    # Rate limiting (fixed window, process-wide)
    # ------------------------------------------------------------------

    rate_limit_request: int = Field(default=100, gt=0)
    rate_limit_duration: int = Field(default=60, gt=0)

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    cors_origins: list[str] = ["*"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_jwt_secret(self) -> "Settings":
        """Refuse to start without a signing secret.

        Tokens signed with a throwaway key would be invalidated on every
        restart, so there is no dev-mode fallback. Short secrets are accepted
        but logged, since HS256 strength depends on key entropy.
        """
        if not self.jwt_secret:
            raise ValueError("JWT_SECRET must be set. Set JWT_SECRET in your environment or .env file.")
        if len(self.jwt_secret) < 32:
            logger.warning("JWT_SECRET is shorter than 32 characters; use a longer random value in production.")
        return self

    @property
    def rate_limit(self) -> str:
        """Quota in the limits string notation, e.g. "100/60 seconds"."""
        return f"{self.rate_limit_request}/{self.rate_limit_duration} seconds"


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: construct Settings(...) directly and pass it to create_app(), or
    call get_settings.cache_clear() after changing environment variables.
    """
    return Settings()
