"""Main settings object for the auth core.

This module composes the application and authentication settings into a single
``Settings`` class loaded from environment variables and ``.env`` files.

The settings object is read-only once constructed. Services receive it through
their constructors; ``get_settings`` caches the process-wide instance used by
callers that do not build their own.

Environment Support:
- Development: Uses .env
- Test: Uses .env.test
- Staging: Uses .env.staging
- Production: Uses .env.production
"""

import os
from functools import lru_cache
from pathlib import Path

import structlog
from pydantic_settings import SettingsConfigDict

from .app import AppSettings
from .auth import AuthSettings

logger = structlog.get_logger(__name__)

ENV_FILES = {
    "development": ".env",
    "test": ".env.test",
    "staging": ".env.staging",
    "production": ".env.production",
}


class Settings(AppSettings, AuthSettings):
    """The settings class that aggregates every configuration group.

    Security Note:
        - Sensitive fields (signing secrets) are ``SecretStr`` and are never
          rendered by ``repr`` or logged.
    Usage:
        - ``get_settings()`` for the cached instance, or ``Settings(...)`` with
          explicit values in tests.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )


def create_settings() -> Settings:
    """Create a settings instance for the current ``APP_ENV``.

    Returns:
        Settings: Configured settings instance
    """
    env = os.getenv("APP_ENV", "development")
    env_file = ENV_FILES.get(env, ".env")

    if Path(env_file).exists():
        logger.info("Loading environment configuration", env_file=env_file, environment=env)
        return Settings(_env_file=env_file)

    logger.warning("No env file found, using environment variables only", environment=env)
    return Settings(_env_file=None)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached process-wide settings."""
    return create_settings()
