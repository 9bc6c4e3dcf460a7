from datetime import datetime, timezone  # For timestamp fields
from typing import Any, Dict, List, Optional  # For optional fields

from pydantic import BaseModel, ConfigDict, Field, field_validator

SUSPICIOUS_ACTIVITY_LIMIT = 10


def utc_now() -> datetime:
    """Timezone-aware UTC helper to avoid naive datetime usage."""
    return datetime.now(timezone.utc)


class RefreshTokenEntry(BaseModel):
    """One active session, identified by the refresh token issued to it.

    Attributes:
        token: The signed refresh token string, matched verbatim on refresh/logout.
        created_at: When the session was opened.
        expires_at: When the refresh token stops verifying.
        device_info: Free-form client description (``web``, ``registration``...).
        ip_address: Client address at issue time, ``unknown`` if not supplied.
    """

    token: str
    created_at: datetime = Field(default_factory=utc_now)
    expires_at: datetime
    device_info: str = "web"
    ip_address: str = "unknown"


class SuspiciousActivityEntry(BaseModel):
    """A security-relevant observation kept on the account for review."""

    type: str
    timestamp: datetime = Field(default_factory=utc_now)
    ip_address: str = "unknown"
    details: str = ""


class SecurityState(BaseModel):
    """Per-account brute-force and login bookkeeping.

    The account is ``Unlocked(login_attempts)`` or ``Locked(account_locked_until)``.
    A lock whose deadline has passed is still stored as locked until the next
    login attempt unlocks it.
    """

    login_attempts: int = Field(default=0, ge=0)
    account_locked: bool = False
    account_locked_until: Optional[datetime] = None
    last_login: Optional[datetime] = None
    last_login_ip: Optional[str] = None
    suspicious_activity: List[SuspiciousActivityEntry] = Field(default_factory=list)

    @field_validator("suspicious_activity")
    @classmethod
    def keep_most_recent(cls, value: List[SuspiciousActivityEntry]) -> List[SuspiciousActivityEntry]:
        """Newest first, bounded to the most recent entries."""
        return value[:SUSPICIOUS_ACTIVITY_LIMIT]

    def is_lock_active(self, now: Optional[datetime] = None) -> bool:
        """True while the account is locked and the lock deadline is still ahead."""
        if not self.account_locked:
            return False
        if self.account_locked_until is None:
            return True
        return self.account_locked_until > (now or utc_now())


class AuthenticationState(BaseModel):
    """Credential and token fields of a user record.

    Attributes:
        password_hash: Bcrypt hash of the current password.
        email_verified: Whether the email address has been confirmed.
        password_changed_at: Last time the password was set.
        password_reset_token: Outstanding single-use reset token, if any.
        password_reset_expires: Deadline for ``password_reset_token``.
        refresh_tokens: Active sessions, newest first.
    """

    password_hash: str
    email_verified: bool = False
    email_verified_at: Optional[datetime] = None
    email_verification_token: Optional[str] = None
    email_verification_expires: Optional[datetime] = None
    password_changed_at: datetime = Field(default_factory=utc_now)
    password_reset_token: Optional[str] = None
    password_reset_expires: Optional[datetime] = None
    refresh_tokens: List[RefreshTokenEntry] = Field(default_factory=list)

    def has_refresh_token(self, token: str) -> bool:
        return any(entry.token == token for entry in self.refresh_tokens)


class UserAuthRecord(BaseModel):
    """The user document as far as authentication is concerned.

    Owned by the repository. The auth core mutates it only by reading the whole
    record, changing it in memory and writing the changed block back.
    """

    model_config = ConfigDict(validate_assignment=True)

    user_id: str = Field(frozen=True, description="Stable external identifier, never changes.")
    email: Optional[str] = None
    username: Optional[str] = None
    authentication: AuthenticationState
    security: SecurityState = Field(default_factory=SecurityState)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def sanitized(self) -> Dict[str, Any]:
        """Return the user view that is safe to hand to a caller.

        The password hash is blanked, refresh tokens are emptied, reset and
        verification tokens are dropped and the security block is omitted.
        """
        auth = self.authentication
        return {
            "user_id": self.user_id,
            "email": self.email,
            "username": self.username,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "authentication": {
                "password": "",
                "email_verified": auth.email_verified,
                "email_verified_at": auth.email_verified_at,
                "password_changed_at": auth.password_changed_at,
                "refresh_tokens": [],
            },
        }


def new_user_record(
    user_id: str,
    email: str,
    password_hash: str,
    username: Optional[str] = None,
    email_verified: bool = False,
    email_verification_token: Optional[str] = None,
    email_verification_expires: Optional[datetime] = None,
) -> UserAuthRecord:
    """Build the record for a freshly registered user.

    Counters start at zero, no sessions exist and no reset is outstanding.
    """
    now = utc_now()
    return UserAuthRecord(
        user_id=user_id,
        email=email,
        username=username,
        authentication=AuthenticationState(
            password_hash=password_hash,
            email_verified=email_verified,
            email_verified_at=now if email_verified else None,
            email_verification_token=email_verification_token,
            email_verification_expires=email_verification_expires,
            password_changed_at=now,
        ),
        security=SecurityState(),
        created_at=now,
        updated_at=now,
    )
