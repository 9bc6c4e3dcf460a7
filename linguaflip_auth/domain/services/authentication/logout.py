from structlog import get_logger

from linguaflip_auth.core.exceptions import ValidationError, safe_async
from linguaflip_auth.domain.services.authentication.base import COLLECTION, AuthOperationHandler
from linguaflip_auth.domain.value_objects.auth import MessageResult, OperationResult

logger = get_logger(__name__)


class LogoutHandler(AuthOperationHandler):
    """Ends one session by dropping its refresh token. Other sessions stay valid."""

    async def __call__(self, user_id: str, refresh_token: str) -> OperationResult[MessageResult]:
        async with safe_async("logout", COLLECTION, user_id=user_id):
            user = await self._find_user_by_id(user_id)
            if user is None:
                raise ValidationError("User not found", "logout", COLLECTION, field="user_id")

            authentication = user.authentication.model_copy(deep=True)
            before = len(authentication.refresh_tokens)
            authentication.refresh_tokens = [
                entry for entry in authentication.refresh_tokens if entry.token != refresh_token
            ]

            await self._update_user(user, {"authentication": authentication}, "logout")

            self._audit("USER_LOGOUT", {"user_id": user_id})
            logger.info(
                "User logged out",
                user_id=user_id,
                sessions_removed=before - len(authentication.refresh_tokens),
            )
            return OperationResult(data=MessageResult(message="Successfully logged out"))
