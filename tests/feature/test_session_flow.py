"""Session bookkeeping across logins, refreshes and logouts."""

import pytest

from linguaflip_auth.core.exceptions import ValidationError
from linguaflip_auth.domain.services.authentication.auth_service import AuthService
from linguaflip_auth.domain.value_objects.auth import LoginData, RefreshTokenData, RegisterData
from tests.utils.config import STRONG_PASSWORD, make_settings

LOGIN = LoginData(email="a@x.com", password=STRONG_PASSWORD)


async def _sessions(repository):
    return [e.token for e in (await repository.get_user_by_email("a@x.com")).data.authentication.refresh_tokens]


@pytest.mark.asyncio
async def test_session_count_is_bounded_and_oldest_evicted(auth_service, repository, registered_user):
    issued = [registered_user.tokens.refresh_token]
    for _ in range(6):
        issued.append((await auth_service.login(LOGIN)).data.tokens.refresh_token)
    issued.append((await auth_service.refresh_token(RefreshTokenData(refresh_token=issued[-1]))).data.refresh_token)

    sessions = await _sessions(repository)

    assert len(sessions) == 5
    assert sessions == list(reversed(issued))[:5]


@pytest.mark.asyncio
async def test_evicted_session_cannot_refresh(repository, auditor):
    service = AuthService(repository, settings=make_settings(AUTH_MAX_ACTIVE_SESSIONS=2), auditor=auditor)
    registered = await service.register(
        RegisterData(email="a@x.com", password=STRONG_PASSWORD, confirm_password=STRONG_PASSWORD)
    )
    evicted = registered.data.tokens.refresh_token
    await service.login(LOGIN)
    await service.login(LOGIN)

    assert evicted not in await _sessions(repository)
    with pytest.raises(ValidationError, match="Invalid refresh token"):
        await service.refresh_token(RefreshTokenData(refresh_token=evicted))


@pytest.mark.asyncio
async def test_logout_leaves_other_sessions_usable(auth_service, registered_user):
    user_id = registered_user.user["user_id"]
    token_a = (await auth_service.login(LOGIN)).data.tokens.refresh_token
    token_b = (await auth_service.login(LOGIN)).data.tokens.refresh_token

    await auth_service.logout(user_id, token_a)

    with pytest.raises(ValidationError):
        await auth_service.refresh_token(RefreshTokenData(refresh_token=token_a))
    refreshed = await auth_service.refresh_token(RefreshTokenData(refresh_token=token_b))
    assert refreshed.success is True


@pytest.mark.asyncio
async def test_services_do_not_share_state(repository, settings):
    first, second = AuthService(repository, settings=settings), AuthService(repository, settings=settings)

    assert first.auditor is not second.auditor
    assert first.token_issuer is not second.token_issuer
