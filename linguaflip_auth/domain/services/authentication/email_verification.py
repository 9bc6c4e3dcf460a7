from structlog import get_logger

from linguaflip_auth.core.exceptions import ValidationError, safe_async, validate_required
from linguaflip_auth.domain.entities.user import utc_now
from linguaflip_auth.domain.services.authentication.base import COLLECTION, AuthOperationHandler
from linguaflip_auth.domain.value_objects.auth import (
    EmailVerificationData,
    MessageResult,
    OperationResult,
)

logger = get_logger(__name__)

INVALID_VERIFICATION_TOKEN = "Invalid or expired verification token"


class VerifyEmailHandler(AuthOperationHandler):
    """Confirms an email address with the token issued at registration.

    Only used when ``EMAIL_VERIFIED_BY_DEFAULT`` is off. The token is consumed
    on success.
    """

    async def __call__(self, data: EmailVerificationData) -> OperationResult[MessageResult]:
        async with safe_async("verify_email", COLLECTION):
            validate_required(data, ["token"], "verify_email", COLLECTION)

            user_id = self.token_issuer.decode_email_verification_token(data.token)
            user = await self._find_user_by_id(user_id)
            if user is None:
                raise ValidationError(INVALID_VERIFICATION_TOKEN, "verify_email", COLLECTION)

            authentication = user.authentication.model_copy(deep=True)
            expires = authentication.email_verification_expires
            if (
                authentication.email_verification_token != data.token
                or expires is None
                or expires <= utc_now()
            ):
                raise ValidationError(INVALID_VERIFICATION_TOKEN, "verify_email", COLLECTION)

            authentication.email_verified = True
            authentication.email_verified_at = utc_now()
            authentication.email_verification_token = None
            authentication.email_verification_expires = None
            await self._update_user(user, {"authentication": authentication}, "verify_email")

            self._audit("EMAIL_VERIFIED", {"user_id": user.user_id, "email": user.email})
            logger.info("Email verified", user_id=user.user_id)
            return OperationResult(data=MessageResult(message="Email successfully verified"))
