"""Export the user record and its nested authentication and security blocks."""

from .user import (
    AuthenticationState,
    RefreshTokenEntry,
    SecurityState,
    SuspiciousActivityEntry,
    UserAuthRecord,
    new_user_record,
)

__all__ = [
    "AuthenticationState",
    "RefreshTokenEntry",
    "SecurityState",
    "SuspiciousActivityEntry",
    "UserAuthRecord",
    "new_user_record",
]
