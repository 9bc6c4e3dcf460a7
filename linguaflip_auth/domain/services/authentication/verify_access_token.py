from typing import Any, Dict

from linguaflip_auth.core.exceptions import ValidationError, safe_async
from linguaflip_auth.domain.services.authentication.base import COLLECTION, AuthOperationHandler
from linguaflip_auth.domain.value_objects.auth import OperationResult


class VerifyAccessTokenHandler(AuthOperationHandler):
    """Resolves an access token to the sanitized view of its user."""

    async def __call__(self, token: str) -> OperationResult[Dict[str, Any]]:
        async with safe_async("verify_token", COLLECTION):
            payload = self.token_issuer.decode_access_token(token)

            user = await self._find_user_by_id(payload.user_id)
            if user is None:
                raise ValidationError("User not found", "verify_token", COLLECTION)

            return OperationResult(data=user.sanitized())
