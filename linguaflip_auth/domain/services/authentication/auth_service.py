"""Authentication service facade.

``AuthService`` wires the credential, token and lockout components to one
repository and exposes every authentication operation. All state lives in the
injected collaborators, so two service instances never share sessions, audit
trails or configuration.
"""

from typing import Any, Dict, Optional

from structlog import get_logger

from linguaflip_auth.core.config.settings import Settings, get_settings
from linguaflip_auth.domain.interfaces.repositories import IUserRepository
from linguaflip_auth.domain.interfaces.security import ISecurityAuditor
from linguaflip_auth.domain.interfaces.token_management import ITokenSigner
from linguaflip_auth.domain.security.audit import SecurityAuditor
from linguaflip_auth.domain.services.auth.account_security import AccountSecurityTracker
from linguaflip_auth.domain.services.auth.password import PasswordCredentialManager
from linguaflip_auth.domain.services.auth.token import TokenIssuer
from linguaflip_auth.domain.services.authentication.email_verification import VerifyEmailHandler
from linguaflip_auth.domain.services.authentication.login import LoginHandler
from linguaflip_auth.domain.services.authentication.logout import LogoutHandler
from linguaflip_auth.domain.services.authentication.password_reset import (
    ConfirmPasswordResetHandler,
    InitiatePasswordResetHandler,
)
from linguaflip_auth.domain.services.authentication.refresh_token import RefreshTokenHandler
from linguaflip_auth.domain.services.authentication.register import RegisterHandler
from linguaflip_auth.domain.services.authentication.verify_access_token import (
    VerifyAccessTokenHandler,
)
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

logger = get_logger(__name__)


class AuthService:
    """Entry point for registration, login, sessions and password recovery.

    Every method returns an ``OperationResult`` on success and raises an
    ``AuthCoreError`` subclass on failure. Nothing is retried internally.

    Args:
        repository: User document store.
        settings: Auth configuration. Defaults to the cached process settings.
        auditor: Audit sink. Defaults to a fresh ``SecurityAuditor``.
        signer: Token signing primitive. Defaults to PyJWT.
        token_issuer / password_manager / account_security: Override the
            default components, mostly useful in tests.
    """

    def __init__(
        self,
        repository: IUserRepository,
        settings: Optional[Settings] = None,
        auditor: Optional[ISecurityAuditor] = None,
        signer: Optional[ITokenSigner] = None,
        token_issuer: Optional[TokenIssuer] = None,
        password_manager: Optional[PasswordCredentialManager] = None,
        account_security: Optional[AccountSecurityTracker] = None,
    ):
        self.repository = repository
        self.settings = settings or get_settings()
        self.auditor = auditor or SecurityAuditor()
        self.token_issuer = token_issuer or TokenIssuer(repository, self.settings, signer)
        self.password_manager = password_manager or PasswordCredentialManager(
            self.settings.BCRYPT_ROUNDS
        )
        self.account_security = account_security or AccountSecurityTracker(repository)

        deps = (
            self.repository,
            self.settings,
            self.auditor,
            self.token_issuer,
            self.password_manager,
            self.account_security,
        )
        self._register = RegisterHandler(*deps)
        self._login = LoginHandler(*deps)
        self._logout = LogoutHandler(*deps)
        self._refresh_token = RefreshTokenHandler(*deps)
        self._initiate_password_reset = InitiatePasswordResetHandler(*deps)
        self._confirm_password_reset = ConfirmPasswordResetHandler(*deps)
        self._verify_email = VerifyEmailHandler(*deps)
        self._verify_access_token = VerifyAccessTokenHandler(*deps)

        logger.debug(
            "AuthService initialized",
            max_login_attempts=self.settings.MAX_LOGIN_ATTEMPTS,
            max_active_sessions=self.settings.AUTH_MAX_ACTIVE_SESSIONS,
        )

    async def register(
        self, data: RegisterData, ip_address: Optional[str] = None
    ) -> OperationResult[AuthResult]:
        return await self._register(data, ip_address)

    async def login(self, data: LoginData) -> OperationResult[AuthResult]:
        return await self._login(data)

    async def logout(self, user_id: str, refresh_token: str) -> OperationResult[MessageResult]:
        return await self._logout(user_id, refresh_token)

    async def refresh_token(self, data: RefreshTokenData) -> OperationResult[AuthTokens]:
        return await self._refresh_token(data)

    async def initiate_password_reset(self, data: PasswordResetData) -> OperationResult[MessageResult]:
        return await self._initiate_password_reset(data)

    async def confirm_password_reset(
        self, data: PasswordResetConfirmData
    ) -> OperationResult[MessageResult]:
        return await self._confirm_password_reset(data)

    async def verify_email(self, data: EmailVerificationData) -> OperationResult[MessageResult]:
        return await self._verify_email(data)

    async def verify_access_token(self, token: str) -> OperationResult[Dict[str, Any]]:
        return await self._verify_access_token(token)
