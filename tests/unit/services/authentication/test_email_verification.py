import pytest
import pytest_asyncio

from linguaflip_auth.core.exceptions import PermissionError, ValidationError
from linguaflip_auth.domain.services.authentication.auth_service import AuthService
from linguaflip_auth.domain.value_objects.auth import EmailVerificationData, LoginData, RegisterData
from tests.utils.config import STRONG_PASSWORD, make_settings


@pytest.fixture
def service(repository, auditor):
    return AuthService(repository, settings=make_settings(EMAIL_VERIFIED_BY_DEFAULT=False), auditor=auditor)


@pytest_asyncio.fixture
async def verification_token(service, repository):
    await service.register(
        RegisterData(email="a@x.com", password=STRONG_PASSWORD, confirm_password=STRONG_PASSWORD)
    )
    return (await repository.get_user_by_email("a@x.com")).data.authentication.email_verification_token


@pytest.mark.asyncio
async def test_unverified_user_cannot_log_in(service, verification_token):
    with pytest.raises(PermissionError, match="verify your email"):
        await service.login(LoginData(email="a@x.com", password=STRONG_PASSWORD))


@pytest.mark.asyncio
async def test_verify_email_unlocks_login(service, repository, auditor, verification_token):
    result = await service.verify_email(EmailVerificationData(token=verification_token))

    authentication = (await repository.get_user_by_email("a@x.com")).data.authentication
    assert result.data.message == "Email successfully verified"
    assert authentication.email_verified is True
    assert authentication.email_verified_at is not None
    assert authentication.email_verification_token is None
    assert auditor.events_named("EMAIL_VERIFIED")
    assert await service.login(LoginData(email="a@x.com", password=STRONG_PASSWORD))


@pytest.mark.asyncio
async def test_verification_token_is_single_use(service, verification_token):
    await service.verify_email(EmailVerificationData(token=verification_token))

    with pytest.raises(ValidationError, match="Invalid or expired verification token"):
        await service.verify_email(EmailVerificationData(token=verification_token))


@pytest.mark.asyncio
async def test_reset_token_is_not_a_verification_token(service, repository, verification_token):
    user = (await repository.get_user_by_email("a@x.com")).data
    reset_token = service.token_issuer.issue_password_reset_token(user.user_id)

    with pytest.raises(ValidationError, match="Invalid or expired verification token"):
        await service.verify_email(EmailVerificationData(token=reset_token))


@pytest.mark.asyncio
async def test_missing_token(service):
    with pytest.raises(ValidationError, match="Missing required fields: token"):
        await service.verify_email(EmailVerificationData())
