"""Authentication and session-security core for LinguaFlip.

Typical use::

    from linguaflip_auth import AuthService, InMemoryUserRepository

    service = AuthService(InMemoryUserRepository())
    result = await service.login(LoginData(email="a@x.com", password="Abc12345"))
"""

from linguaflip_auth.domain.services.authentication.auth_service import AuthService
from linguaflip_auth.domain.value_objects.auth import (
    AuthResult,
    AuthTokens,
    EmailVerificationData,
    LoginData,
    MessageResult,
    OperationResult,
    PasswordResetConfirmData,
    PasswordResetData,
    RefreshTokenData,
    RegisterData,
)
from linguaflip_auth.infrastructure.repositories.user_repository import InMemoryUserRepository

__version__ = "0.1.0"

__all__ = [
    "AuthService",
    "InMemoryUserRepository",
    "AuthResult",
    "AuthTokens",
    "EmailVerificationData",
    "LoginData",
    "MessageResult",
    "OperationResult",
    "PasswordResetConfirmData",
    "PasswordResetData",
    "RefreshTokenData",
    "RegisterData",
]
