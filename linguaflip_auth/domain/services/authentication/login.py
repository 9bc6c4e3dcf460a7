"""Credential login with brute-force lockout."""

from linguaflip_auth.core.exceptions import (
    PermissionError,
    ValidationError,
    safe_async,
    validate_required,
)
from linguaflip_auth.domain.interfaces.security import SecurityEventSeverity
from linguaflip_auth.domain.services.authentication.base import COLLECTION, AuthOperationHandler
from linguaflip_auth.domain.validation import normalize_email
from linguaflip_auth.domain.value_objects.auth import (
    AuthResult,
    LoginData,
    OperationResult,
    SessionInfo,
)

INVALID_CREDENTIALS = "Invalid email or password"
ACCOUNT_LOCKED = "Account is temporarily locked due to too many failed login attempts"
EMAIL_NOT_VERIFIED = "Please verify your email address before logging in"


class LoginHandler(AuthOperationHandler):
    """Authenticates email and password and opens a new session.

    Lock handling:
        - A lock whose deadline is still ahead rejects the attempt before the
          password is checked.
        - An expired lock is cleared (attempts back to 0) and the attempt
          proceeds normally.
        - A failed attempt that brings the count to ``MAX_LOGIN_ATTEMPTS`` locks
          the account for ``LOCKOUT_DURATION_MS``.

    Unknown emails and wrong passwords produce the same message.
    """

    async def __call__(self, data: LoginData) -> OperationResult[AuthResult]:
        async with safe_async("login", COLLECTION):
            validate_required(data, ["email", "password"], "auth_login", COLLECTION)

            email = normalize_email(data.email)
            user = await self._find_user_by_email(email)
            if user is None:
                self._audit(
                    "USER_LOGIN_FAILED",
                    {"email": email, "ip_address": data.ip_address, "reason": "unknown_email"},
                    SecurityEventSeverity.MEDIUM,
                )
                raise ValidationError(INVALID_CREDENTIALS, "login", COLLECTION)

            security = user.security
            if security.account_locked:
                if security.is_lock_active():
                    raise PermissionError(ACCOUNT_LOCKED, "login", COLLECTION, user_id=user.user_id)

                await self.account_security.unlock_account(user.user_id)
                security.account_locked = False
                security.account_locked_until = None
                security.login_attempts = 0

            password_ok = await self.password_manager.verify(
                data.password, user.authentication.password_hash
            )
            if not password_ok:
                await self._handle_failed_attempt(user.user_id, email, security.login_attempts, data)
                raise ValidationError(INVALID_CREDENTIALS, "login", COLLECTION)

            if not user.authentication.email_verified:
                raise PermissionError(EMAIL_NOT_VERIFIED, "login", COLLECTION, user_id=user.user_id)

            await self.account_security.reset_login_attempts(user.user_id)
            await self.account_security.update_last_login(user.user_id, data.ip_address)

            tokens = await self.token_issuer.generate_tokens(
                user,
                SessionInfo(
                    device_info=data.device_info or "web",
                    ip_address=data.ip_address or "unknown",
                ),
            )

            self._audit(
                "USER_LOGIN_SUCCESS",
                {
                    "user_id": user.user_id,
                    "email": email,
                    "ip_address": data.ip_address,
                    "device_info": data.device_info,
                },
            )

            return OperationResult(data=AuthResult(user=user.sanitized(), tokens=tokens))

    async def _handle_failed_attempt(
        self, user_id: str, email: str, previous_attempts: int, data: LoginData
    ) -> None:
        """Record the failure and lock the account once the limit is reached.

        Raises:
            PermissionError: When this failure locks the account.
        """
        await self.account_security.increment_login_attempts(user_id, data.ip_address)
        attempts = previous_attempts + 1

        self._audit(
            "USER_LOGIN_FAILED",
            {
                "user_id": user_id,
                "email": email,
                "ip_address": data.ip_address,
                "reason": "invalid_password",
                "login_attempts": attempts,
            },
            SecurityEventSeverity.MEDIUM,
        )

        if attempts >= self.settings.MAX_LOGIN_ATTEMPTS:
            duration_ms = self.settings.LOCKOUT_DURATION_MS
            await self.account_security.lock_account(user_id, duration_ms)
            self._audit(
                "ACCOUNT_LOCKED",
                {
                    "user_id": user_id,
                    "ip_address": data.ip_address,
                    "login_attempts": attempts,
                    "locked_for_ms": duration_ms,
                },
                SecurityEventSeverity.HIGH,
            )
            raise PermissionError(
                "Account locked due to too many failed attempts. "
                f"Try again in {duration_ms // (60 * 1000)} minutes.",
                "login",
                COLLECTION,
                user_id=user_id,
            )
