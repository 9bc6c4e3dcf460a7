"""Brute-force bookkeeping on a user's ``SecurityState``.

Every method reads the current record, changes the security block in memory
and writes it back with ``update_user_security``. There is no version check, so
two concurrent requests for the same account can overwrite each other's update.
Which transition fires when is decided by the login handler.
"""

from datetime import timedelta
from typing import Optional

import structlog

from linguaflip_auth.core.exceptions import NotFoundError
from linguaflip_auth.domain.entities.user import SecurityState, SuspiciousActivityEntry, utc_now
from linguaflip_auth.domain.interfaces.repositories import IUserRepository

logger = structlog.get_logger(__name__)

FAILED_LOGIN_ATTEMPT = "FAILED_LOGIN_ATTEMPT"


class AccountSecurityTracker:
    """Tracks failed attempts, lock state and last login per account."""

    def __init__(self, repository: IUserRepository):
        self.repository = repository

    async def increment_login_attempts(self, user_id: str, ip_address: Optional[str] = None) -> int:
        """Count a failed login and record it as suspicious activity.

        Returns:
            int: The new attempt count, or 0 when the user does not exist.
        """
        security = await self._load_security(user_id)
        if security is None:
            return 0

        attempts = security.login_attempts + 1
        entry = SuspiciousActivityEntry(
            type=FAILED_LOGIN_ATTEMPT,
            timestamp=utc_now(),
            ip_address=ip_address or "unknown",
            details=f"Attempt {attempts}",
        )
        await self.repository.update_user_security(
            user_id,
            {
                "login_attempts": attempts,
                "suspicious_activity": [entry, *security.suspicious_activity],
            },
        )
        logger.info("Failed login recorded", user_id=user_id, login_attempts=attempts)
        return attempts

    async def reset_login_attempts(self, user_id: str) -> None:
        if await self._load_security(user_id) is None:
            return
        await self.repository.update_user_security(user_id, {"login_attempts": 0})

    async def lock_account(self, user_id: str, duration_ms: int) -> None:
        if await self._load_security(user_id) is None:
            return
        locked_until = utc_now() + timedelta(milliseconds=duration_ms)
        await self.repository.update_user_security(
            user_id, {"account_locked": True, "account_locked_until": locked_until}
        )
        logger.warning("Account locked", user_id=user_id, locked_until=locked_until.isoformat())

    async def unlock_account(self, user_id: str) -> None:
        if await self._load_security(user_id) is None:
            return
        await self.repository.update_user_security(
            user_id,
            {"account_locked": False, "account_locked_until": None, "login_attempts": 0},
        )
        logger.info("Account unlocked", user_id=user_id)

    async def update_last_login(self, user_id: str, ip_address: Optional[str] = None) -> None:
        if await self._load_security(user_id) is None:
            return
        await self.repository.update_user_security(
            user_id, {"last_login": utc_now(), "last_login_ip": ip_address}
        )

    async def _load_security(self, user_id: str) -> Optional[SecurityState]:
        try:
            result = await self.repository.get_user_by_id(user_id)
        except NotFoundError:
            result = None
        if result is None or not result.success or result.data is None:
            logger.debug("Security update skipped, user not found", user_id=user_id)
            return None
        return result.data.security
