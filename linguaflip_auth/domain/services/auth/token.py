import secrets
import time
from datetime import timedelta
from typing import Any, Dict, Mapping, Optional

import jwt
from pydantic import ValidationError as PydanticValidationError
from structlog import get_logger

from linguaflip_auth.core.config.auth import DURATION_PATTERN
from linguaflip_auth.core.config.settings import Settings
from linguaflip_auth.core.exceptions import DatabaseError, ValidationError
from linguaflip_auth.domain.entities.user import RefreshTokenEntry, UserAuthRecord, utc_now
from linguaflip_auth.domain.interfaces.repositories import IUserRepository
from linguaflip_auth.domain.interfaces.token_management import ITokenSigner, TokenVerificationError
from linguaflip_auth.domain.value_objects.auth import (
    AccessTokenPayload,
    AuthTokens,
    RefreshTokenPayload,
    SessionInfo,
)

logger = get_logger(__name__)

DEFAULT_TTL_MS = 15 * 60 * 1000
_UNIT_MS = {"s": 1000, "m": 60 * 1000, "h": 60 * 60 * 1000, "d": 24 * 60 * 60 * 1000}

PASSWORD_RESET_TOKEN_TYPE = "password_reset"
EMAIL_VERIFICATION_TOKEN_TYPE = "email_verification"


def parse_duration(value: str) -> int:
    """Convert a ``<n><s|m|h|d>`` duration string to milliseconds.

    Unparsable values fall back to 15 minutes and log a warning.
    """
    match = DURATION_PATTERN.match(value or "")
    if not match:
        logger.warning("Unparsable token lifetime, using 15 minute fallback", value=value)
        return DEFAULT_TTL_MS
    amount, unit = match.groups()
    return int(amount) * _UNIT_MS[unit]


class JwtTokenSigner(ITokenSigner):
    """HMAC-signed JWTs via PyJWT."""

    def __init__(self, algorithm: str = "HS256"):
        self.algorithm = algorithm

    def sign(self, claims: Mapping[str, Any], secret: str, ttl: timedelta) -> str:
        now = utc_now()
        payload = dict(claims)
        payload["iat"] = now
        payload["exp"] = now + ttl
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def verify(self, token: str, secret: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, secret, algorithms=[self.algorithm])
        except jwt.PyJWTError as exc:
            raise TokenVerificationError(str(exc)) from exc


class TokenIssuer:
    """Mints, verifies and persists signed tokens for the auth operations.

    Access tokens are signed with ``JWT_SECRET``; refresh tokens and the
    single-purpose reset/verification tokens with ``JWT_REFRESH_SECRET``. Every
    successful ``generate_tokens`` call records a session entry on the user,
    keeping at most ``AUTH_MAX_ACTIVE_SESSIONS`` entries, newest first.

    Attributes:
        repository (IUserRepository): Where the refresh-token list is persisted.
        settings (Settings): Secrets, lifetimes and the session bound.
        signer (ITokenSigner): Signing primitive, PyJWT by default.
    """

    def __init__(
        self,
        repository: IUserRepository,
        settings: Settings,
        signer: Optional[ITokenSigner] = None,
    ):
        self.repository = repository
        self.settings = settings
        self.signer = signer or JwtTokenSigner(settings.JWT_ALGORITHM)

    @property
    def _access_secret(self) -> str:
        return self.settings.JWT_SECRET.get_secret_value()

    @property
    def _refresh_secret(self) -> str:
        return self.settings.JWT_REFRESH_SECRET.get_secret_value()

    # ------------------------------------------------------------------
    # Opaque values
    # ------------------------------------------------------------------

    @staticmethod
    def generate_secure_token() -> str:
        """32 random bytes, hex encoded."""
        return secrets.token_hex(32)

    @staticmethod
    def generate_user_id() -> str:
        """Time-seeded id with a random suffix, e.g. ``user_1718000000000_9f2c1a0b``.

        Uniqueness is only enforced later, when the repository creates the record.
        """
        return f"user_{int(time.time() * 1000)}_{secrets.token_hex(4)}"

    # ------------------------------------------------------------------
    # Access / refresh pair
    # ------------------------------------------------------------------

    async def generate_tokens(self, user: UserAuthRecord, session_info: SessionInfo) -> AuthTokens:
        """Sign a new access/refresh pair and record the session on the user.

        Args:
            user (UserAuthRecord): The authenticated user. Its authentication
                block is replaced with the persisted one on success.
            session_info (SessionInfo): Device and address the session was opened from.

        Returns:
            AuthTokens: The new pair with ``expires_in`` in milliseconds.

        Raises:
            DatabaseError: If the user has no email or the session cannot be persisted.
        """
        if not user.email:
            raise DatabaseError(
                "User email is required for token generation",
                "generate_tokens",
                "users",
                code="TOKEN_GENERATION_FAILED",
                detail={"user_id": user.user_id},
            )

        access_ttl_ms = parse_duration(self.settings.JWT_EXPIRES_IN)
        refresh_ttl_ms = parse_duration(self.settings.JWT_REFRESH_EXPIRES_IN)

        access_token = self.signer.sign(
            {
                "userId": user.user_id,
                "email": user.email,
                "type": "access",
                "jti": secrets.token_urlsafe(16),
            },
            self._access_secret,
            timedelta(milliseconds=access_ttl_ms),
        )
        refresh_token = self.signer.sign(
            {"userId": user.user_id, "type": "refresh", "jti": secrets.token_urlsafe(16)},
            self._refresh_secret,
            timedelta(milliseconds=refresh_ttl_ms),
        )

        now = utc_now()
        entry = RefreshTokenEntry(
            token=refresh_token,
            created_at=now,
            expires_at=now + timedelta(milliseconds=refresh_ttl_ms),
            device_info=session_info.device_info,
            ip_address=session_info.ip_address,
        )

        authentication = user.authentication.model_copy(deep=True)
        authentication.refresh_tokens = [entry, *authentication.refresh_tokens][
            : self.settings.AUTH_MAX_ACTIVE_SESSIONS
        ]

        # Only the authentication block is written so a concurrent security
        # update (attempt reset, last login) is not overwritten with stale data.
        result = await self.repository.update_user(
            user.user_id, {"authentication": authentication}, user.user_id
        )
        if not result.success:
            raise DatabaseError(
                result.error or "Failed to persist refresh token",
                "generate_tokens",
                "users",
                code="REFRESH_TOKEN_STORE_FAILED",
            )

        user.authentication = authentication
        logger.debug(
            "Tokens issued",
            user_id=user.user_id,
            active_sessions=len(authentication.refresh_tokens),
        )
        return AuthTokens(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=access_ttl_ms,
        )

    def decode_access_token(self, token: str) -> AccessTokenPayload:
        """Verify an access token and return its payload.

        Raises:
            ValidationError: For any malformed, tampered, expired or mistyped token.
        """
        claims = self._verify(token, self._access_secret, "access", "Invalid access token", "verify_token")
        try:
            return AccessTokenPayload.model_validate(claims)
        except PydanticValidationError as exc:
            raise ValidationError("Invalid access token", "verify_token", "users") from exc

    def decode_refresh_token(self, token: str) -> RefreshTokenPayload:
        """Verify a refresh token and return its payload.

        Raises:
            ValidationError: For any malformed, tampered, expired or mistyped token.
        """
        claims = self._verify(
            token, self._refresh_secret, "refresh", "Invalid refresh token", "refresh_token"
        )
        try:
            return RefreshTokenPayload.model_validate(claims)
        except PydanticValidationError as exc:
            raise ValidationError("Invalid refresh token", "refresh_token", "users") from exc

    # ------------------------------------------------------------------
    # Single-purpose tokens
    # ------------------------------------------------------------------

    def issue_password_reset_token(self, user_id: str) -> str:
        return self._issue_purpose_token(
            user_id, PASSWORD_RESET_TOKEN_TYPE, self.settings.PASSWORD_RESET_EXPIRES_HOURS
        )

    def decode_password_reset_token(self, token: str) -> str:
        """Return the user id a reset token was issued for."""
        return self._decode_purpose_token(
            token,
            PASSWORD_RESET_TOKEN_TYPE,
            "Invalid or expired reset token",
            "confirm_password_reset",
        )

    def issue_email_verification_token(self, user_id: str) -> str:
        return self._issue_purpose_token(
            user_id, EMAIL_VERIFICATION_TOKEN_TYPE, self.settings.EMAIL_VERIFICATION_EXPIRES_HOURS
        )

    def decode_email_verification_token(self, token: str) -> str:
        """Return the user id a verification token was issued for."""
        return self._decode_purpose_token(
            token,
            EMAIL_VERIFICATION_TOKEN_TYPE,
            "Invalid or expired verification token",
            "verify_email",
        )

    def _issue_purpose_token(self, user_id: str, token_type: str, hours: int) -> str:
        return self.signer.sign(
            {"userId": user_id, "type": token_type, "nonce": self.generate_secure_token()},
            self._refresh_secret,
            timedelta(hours=hours),
        )

    def _decode_purpose_token(self, token: str, token_type: str, message: str, operation: str) -> str:
        claims = self._verify(token, self._refresh_secret, token_type, message, operation)
        user_id = claims.get("userId")
        if not isinstance(user_id, str) or not user_id:
            raise ValidationError(message, operation, "users")
        return user_id

    def _verify(
        self, token: str, secret: str, expected_type: str, message: str, operation: str
    ) -> Dict[str, Any]:
        if not token:
            raise ValidationError(message, operation, "users")
        try:
            claims = self.signer.verify(token, secret)
        except TokenVerificationError as exc:
            logger.debug("Token rejected", expected_type=expected_type, reason=str(exc))
            raise ValidationError(message, operation, "users") from exc

        if claims.get("type") != expected_type:
            logger.warning(
                "Token type mismatch", expected_type=expected_type, token_type=claims.get("type")
            )
            raise ValidationError(message, operation, "users")
        return claims
