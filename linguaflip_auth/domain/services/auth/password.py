"""Password hashing, verification and strength policy.

Hashing uses bcrypt through passlib's ``CryptContext`` with a configurable work
factor. Verification relies on passlib's constant-time comparison.
"""

import asyncio
import re
from functools import partial

import structlog
from passlib.context import CryptContext
from passlib.exc import PasswordValueError

from linguaflip_auth.core.exceptions import ValidationError

logger = structlog.get_logger(__name__)

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_BYTES = 72
CHARACTER_CLASSES = re.compile(r"(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


class PasswordCredentialManager:
    """Hashes and verifies passwords and enforces the strength policy.

    bcrypt is CPU bound, so hashing and verification run in the loop's default
    executor instead of blocking other requests.
    """

    def __init__(self, rounds: int = 12):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    @staticmethod
    def ensure_strength(password: str, operation: str = "validate_password") -> None:
        """Validate password strength before any hashing or storage happens.

        Requirements:
            - At least 8 characters
            - At least one lowercase letter, one uppercase letter and one digit
            - No NUL characters and at most 72 bytes once UTF-8 encoded

        Raises:
            ValidationError: If a requirement is not met.
        """
        if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
                operation,
                "users",
                field="password",
            )

        if "\x00" in password:
            raise ValidationError(
                "Password must not contain null characters",
                operation,
                "users",
                field="password",
            )

        # bcrypt silently ignores everything past this many bytes
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes long",
                operation,
                "users",
                field="password",
            )

        if not CHARACTER_CLASSES.match(password):
            raise ValidationError(
                "Password must contain at least one lowercase letter, "
                "one uppercase letter, and one number",
                operation,
                "users",
                field="password",
            )

    async def hash(self, password: str) -> str:
        """Hash a plain text password with bcrypt.

        Args:
            password: Plain text password to hash

        Returns:
            str: Bcrypt-hashed password

        Raises:
            ValidationError: If bcrypt refuses the password value.
        """
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, self._context.hash, password)
        except PasswordValueError as exc:
            raise ValidationError(str(exc), "hash_password", "users", field="password") from exc

    async def verify(self, password: str, hashed_password: str) -> bool:
        """Verify a password against its hash.

        Returns False for empty input or a hash passlib cannot identify; the
        caller only learns "match" or "no match".
        """
        if not password or not hashed_password:
            return False

        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(
                None, partial(self._context.verify, password, hashed_password)
            )
        except (ValueError, TypeError) as exc:
            logger.warning("Password hash could not be verified", error_type=type(exc).__name__)
            return False
