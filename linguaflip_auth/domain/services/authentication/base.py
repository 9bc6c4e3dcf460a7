"""Shared plumbing for the authentication operation handlers."""

from typing import Any, Mapping, Optional

from linguaflip_auth.core.config.settings import Settings
from linguaflip_auth.core.exceptions import DatabaseError, NotFoundError
from linguaflip_auth.domain.entities.user import UserAuthRecord
from linguaflip_auth.domain.interfaces.repositories import IUserRepository, RepositoryResult
from linguaflip_auth.domain.interfaces.security import ISecurityAuditor, SecurityEventSeverity
from linguaflip_auth.domain.services.auth.account_security import AccountSecurityTracker
from linguaflip_auth.domain.services.auth.password import PasswordCredentialManager
from linguaflip_auth.domain.services.auth.token import TokenIssuer

COLLECTION = "users"


class AuthOperationHandler:
    """Base class holding the collaborators every operation handler uses.

    Handlers are stateless apart from these injected collaborators, so one
    instance serves any number of concurrent requests.
    """

    def __init__(
        self,
        repository: IUserRepository,
        settings: Settings,
        auditor: ISecurityAuditor,
        token_issuer: TokenIssuer,
        password_manager: PasswordCredentialManager,
        account_security: AccountSecurityTracker,
    ):
        self.repository = repository
        self.settings = settings
        self.auditor = auditor
        self.token_issuer = token_issuer
        self.password_manager = password_manager
        self.account_security = account_security

    async def _find_user_by_email(self, email: str) -> Optional[UserAuthRecord]:
        """Return the user or None. ``NotFoundError`` and failed results both mean absent."""
        try:
            result = await self.repository.get_user_by_email(email)
        except NotFoundError:
            return None
        return self._data_or_none(result)

    async def _find_user_by_id(self, user_id: str) -> Optional[UserAuthRecord]:
        try:
            result = await self.repository.get_user_by_id(user_id)
        except NotFoundError:
            return None
        return self._data_or_none(result)

    async def _update_user(
        self, user: UserAuthRecord, updates: Mapping[str, Any], operation: str
    ) -> UserAuthRecord:
        result = await self.repository.update_user(user.user_id, updates, user.user_id)
        if not result.success or result.data is None:
            raise DatabaseError(
                result.error or "Failed to update user",
                operation,
                COLLECTION,
                code="USER_UPDATE_FAILED",
                detail={"user_id": user.user_id},
            )
        return result.data

    def _audit(
        self,
        event: str,
        context: Mapping[str, Any],
        severity: SecurityEventSeverity = SecurityEventSeverity.LOW,
    ) -> None:
        self.auditor.log_security_event(event, context, severity)

    @staticmethod
    def _data_or_none(result: Optional[RepositoryResult[UserAuthRecord]]) -> Optional[UserAuthRecord]:
        if result is None or not result.success:
            return None
        return result.data
