"""
Application-wide settings.
"""
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """
    Defines environment and logging settings shared by the whole package.

    Security Note:
        - Keep LOG_LEVEL at INFO or above in production; DEBUG output includes
          masked identifiers that are still useful to an attacker in bulk.
    """
    PROJECT_NAME: str = "linguaflip-auth"
    VERSION: str = "0.1.0"
    APP_ENV: Literal["development", "test", "staging", "production"] = "development"

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """
        Uppercases the log level so ``info`` and ``INFO`` are equivalent.
        """
        return str(v).upper()
