from linguaflip_auth.core.exceptions import ValidationError, safe_async
from linguaflip_auth.domain.services.authentication.base import COLLECTION, AuthOperationHandler
from linguaflip_auth.domain.value_objects.auth import (
    AuthTokens,
    OperationResult,
    RefreshTokenData,
    SessionInfo,
)

INVALID_REFRESH_TOKEN = "Invalid refresh token"


class RefreshTokenHandler(AuthOperationHandler):
    """Exchanges a live refresh token for a new token pair.

    The presented token must still be in the user's session list; a token whose
    session was logged out or evicted is rejected even while its signature is
    valid. The presented session is not removed, it ages out as newer sessions
    are added.
    """

    async def __call__(self, data: RefreshTokenData) -> OperationResult[AuthTokens]:
        async with safe_async("refresh_token", COLLECTION):
            payload = self.token_issuer.decode_refresh_token(data.refresh_token)

            user = await self._find_user_by_id(payload.user_id)
            if user is None or not user.authentication.has_refresh_token(data.refresh_token):
                raise ValidationError(INVALID_REFRESH_TOKEN, "refresh_token", COLLECTION)

            tokens = await self.token_issuer.generate_tokens(
                user,
                SessionInfo(
                    device_info=data.device_info or "web",
                    ip_address=data.ip_address or "unknown",
                ),
            )

            self._audit("TOKEN_REFRESHED", {"user_id": user.user_id, "ip_address": data.ip_address})
            return OperationResult(data=tokens)
