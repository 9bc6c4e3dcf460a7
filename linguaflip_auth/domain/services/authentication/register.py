"""User registration."""

from datetime import timedelta
from typing import Optional

from structlog import get_logger

from linguaflip_auth.core.exceptions import (
    DatabaseError,
    DuplicateError,
    ValidationError,
    safe_async,
    validate_required,
)
from linguaflip_auth.domain.entities.user import new_user_record, utc_now
from linguaflip_auth.domain.services.authentication.base import COLLECTION, AuthOperationHandler
from linguaflip_auth.domain.validation import assert_valid_email, normalize_email, sanitize_string
from linguaflip_auth.domain.value_objects.auth import (
    AuthResult,
    OperationResult,
    RegisterData,
    SessionInfo,
)

logger = get_logger(__name__)


class RegisterHandler(AuthOperationHandler):
    """Creates an account and opens its first session.

    Every check that does not need the repository (required fields, email
    format, password strength, confirmation) runs first, so invalid input never
    costs a lookup or a hash.
    """

    async def __call__(
        self, data: RegisterData, ip_address: Optional[str] = None
    ) -> OperationResult[AuthResult]:
        async with safe_async("register", COLLECTION):
            validate_required(data, ["email", "password", "confirm_password"], "auth_register", COLLECTION)
            assert_valid_email(data.email, "register")
            self.password_manager.ensure_strength(data.password, "register")

            if data.password != data.confirm_password:
                raise ValidationError(
                    "Passwords do not match", "register", COLLECTION, field="confirm_password"
                )

            email = normalize_email(data.email)
            username = sanitize_string(data.username) if data.username else None

            if await self._find_user_by_email(email) is not None:
                raise DuplicateError(
                    "User with this email already exists", "register", COLLECTION, field="email"
                )

            password_hash = await self.password_manager.hash(data.password)

            user_id = self.token_issuer.generate_user_id()
            email_verified = self.settings.EMAIL_VERIFIED_BY_DEFAULT
            verification_token = None
            verification_expires = None
            if not email_verified:
                verification_token = self.token_issuer.issue_email_verification_token(user_id)
                verification_expires = utc_now() + timedelta(
                    hours=self.settings.EMAIL_VERIFICATION_EXPIRES_HOURS
                )

            record = new_user_record(
                user_id=user_id,
                email=email,
                password_hash=password_hash,
                username=username,
                email_verified=email_verified,
                email_verification_token=verification_token,
                email_verification_expires=verification_expires,
            )

            created = await self.repository.create_user(record)
            if not created.success or created.data is None:
                raise DatabaseError(
                    created.error or "Failed to create user",
                    "register",
                    COLLECTION,
                    code="USER_CREATION_FAILED",
                )
            user = created.data

            tokens = await self.token_issuer.generate_tokens(
                user, SessionInfo(device_info="registration", ip_address=ip_address or "unknown")
            )

            self._audit(
                "USER_REGISTERED",
                {"user_id": user.user_id, "email": email, "ip_address": ip_address},
            )
            logger.info("User registered", user_id=user.user_id, email_verified=email_verified)

            return OperationResult(data=AuthResult(user=user.sanitized(), tokens=tokens))
