"""Password reset: request a reset token, then redeem it once.

Delivery of the token (email) is the caller's concern; the token is stored on
the user record and the initiating call only ever returns a generic message.
"""

from datetime import timedelta

from structlog import get_logger

from linguaflip_auth.core.exceptions import ValidationError, safe_async, validate_required
from linguaflip_auth.domain.entities.user import utc_now
from linguaflip_auth.domain.interfaces.security import SecurityEventSeverity
from linguaflip_auth.domain.services.authentication.base import COLLECTION, AuthOperationHandler
from linguaflip_auth.domain.validation import normalize_email
from linguaflip_auth.domain.value_objects.auth import (
    MessageResult,
    OperationResult,
    PasswordResetConfirmData,
    PasswordResetData,
)

logger = get_logger(__name__)

RESET_REQUESTED = "If the email exists, a password reset link has been sent"
PASSWORD_UPDATED = "Password successfully updated"
INVALID_RESET_TOKEN = "Invalid or expired reset token"


class InitiatePasswordResetHandler(AuthOperationHandler):
    """Stores a fresh reset token on the account, if there is one.

    The response is identical whether or not the email is registered.
    """

    async def __call__(self, data: PasswordResetData) -> OperationResult[MessageResult]:
        async with safe_async("password_reset", COLLECTION):
            validate_required(data, ["email"], "password_reset", COLLECTION)

            email = normalize_email(data.email)
            user = await self._find_user_by_email(email)
            if user is None:
                logger.info("Password reset requested for unknown email")
                return OperationResult(data=MessageResult(message=RESET_REQUESTED))

            authentication = user.authentication.model_copy(deep=True)
            authentication.password_reset_token = self.token_issuer.issue_password_reset_token(
                user.user_id
            )
            authentication.password_reset_expires = utc_now() + timedelta(
                hours=self.settings.PASSWORD_RESET_EXPIRES_HOURS
            )
            await self._update_user(user, {"authentication": authentication}, "password_reset")

            self._audit(
                "PASSWORD_RESET_INITIATED",
                {"user_id": user.user_id, "email": user.email},
                SecurityEventSeverity.MEDIUM,
            )
            return OperationResult(data=MessageResult(message=RESET_REQUESTED))


class ConfirmPasswordResetHandler(AuthOperationHandler):
    """Sets a new password using a reset token and consumes the token."""

    async def __call__(self, data: PasswordResetConfirmData) -> OperationResult[MessageResult]:
        async with safe_async("password_reset_confirm", COLLECTION):
            validate_required(
                data, ["token", "new_password", "confirm_password"], "password_reset_confirm", COLLECTION
            )
            self.password_manager.ensure_strength(data.new_password, "password_reset_confirm")

            if data.new_password != data.confirm_password:
                raise ValidationError(
                    "Passwords do not match",
                    "password_reset_confirm",
                    COLLECTION,
                    field="confirm_password",
                )

            user_id = self.token_issuer.decode_password_reset_token(data.token)
            user = await self._find_user_by_id(user_id)
            if user is None:
                raise ValidationError(INVALID_RESET_TOKEN, "password_reset_confirm", COLLECTION)

            authentication = user.authentication.model_copy(deep=True)
            token_matches = authentication.password_reset_token == data.token
            expires = authentication.password_reset_expires
            if not token_matches or expires is None or expires <= utc_now():
                raise ValidationError(INVALID_RESET_TOKEN, "password_reset_confirm", COLLECTION)

            authentication.password_hash = await self.password_manager.hash(data.new_password)
            authentication.password_changed_at = utc_now()
            authentication.password_reset_token = None
            authentication.password_reset_expires = None
            await self._update_user(user, {"authentication": authentication}, "password_reset_confirm")

            self._audit("PASSWORD_CHANGED", {"user_id": user.user_id}, SecurityEventSeverity.MEDIUM)
            return OperationResult(data=MessageResult(message=PASSWORD_UPDATED))
