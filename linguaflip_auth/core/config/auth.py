"""Authentication, token and lockout settings.
"""

import re

import structlog
from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings

logger = structlog.get_logger(__name__)

DURATION_PATTERN = re.compile(r"^(\d+)([smhd])$")


class AuthSettings(BaseSettings):
    """Defines settings for credential hashing, signed tokens, lockout and sessions.

    Security Note:
        - JWT_SECRET and JWT_REFRESH_SECRET must be long random strings and must
          differ, otherwise a refresh token would verify as an access token
          (OWASP A02:2021 - Cryptographic Failures).
        - Never log either secret; both are held as ``SecretStr``.
    """

    # Signing
    JWT_SECRET: SecretStr = SecretStr("")
    JWT_REFRESH_SECRET: SecretStr = SecretStr("")
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_IN: str = "15m"
    JWT_REFRESH_EXPIRES_IN: str = "7d"

    # Password hashing
    BCRYPT_ROUNDS: int = Field(default=12, ge=4, le=31)

    # Brute-force protection
    MAX_LOGIN_ATTEMPTS: int = Field(default=5, ge=1)
    LOCKOUT_DURATION_MS: int = Field(default=30 * 60 * 1000, ge=0)

    # Sessions
    AUTH_MAX_ACTIVE_SESSIONS: int = Field(default=5, ge=1)

    # One-time tokens
    PASSWORD_RESET_EXPIRES_HOURS: int = Field(default=24, ge=1)
    EMAIL_VERIFICATION_EXPIRES_HOURS: int = Field(default=48, ge=1)
    EMAIL_VERIFIED_BY_DEFAULT: bool = True

    @model_validator(mode="after")
    def _validate_signing_secrets(self) -> "AuthSettings":
        """Rejects missing or shared signing secrets.

        Returns:
            Self instance once both secrets are present and distinct.
        """
        access_secret = self.JWT_SECRET.get_secret_value()
        refresh_secret = self.JWT_REFRESH_SECRET.get_secret_value()

        if not access_secret or not refresh_secret:
            error_msg = (
                "JWT secrets not found. Please provide JWT_SECRET and JWT_REFRESH_SECRET "
                "via environment variables or the .env file."
            )
            logger.error(error_msg)
            raise ValueError(error_msg)

        if access_secret == refresh_secret:
            error_msg = "JWT_SECRET and JWT_REFRESH_SECRET must be different values."
            logger.error(error_msg)
            raise ValueError(error_msg)

        for name in ("JWT_EXPIRES_IN", "JWT_REFRESH_EXPIRES_IN"):
            if not DURATION_PATTERN.match(getattr(self, name)):
                logger.warning(
                    "Unparsable token lifetime, 15 minute fallback will apply",
                    setting=name,
                    value=getattr(self, name),
                )

        return self
