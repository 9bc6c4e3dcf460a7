import pytest
import pytest_asyncio

from linguaflip_auth.core.logging import configure_logging
from linguaflip_auth.domain.security.audit import SecurityAuditor
from linguaflip_auth.domain.services.authentication.auth_service import AuthService
from linguaflip_auth.domain.value_objects.auth import RegisterData
from linguaflip_auth.infrastructure.repositories.user_repository import InMemoryUserRepository
from tests.utils.config import STRONG_PASSWORD, make_settings


@pytest.fixture(scope="session", autouse=True)
def _logging():
    configure_logging("DEBUG", json_logs=False)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def repository():
    return InMemoryUserRepository()


@pytest.fixture
def auditor():
    return SecurityAuditor()


@pytest.fixture
def auth_service(repository, settings, auditor):
    return AuthService(repository, settings=settings, auditor=auditor)


@pytest_asyncio.fixture
async def registered_user(auth_service):
    """A verified user registered through the service; returns the register result data."""
    result = await auth_service.register(
        RegisterData(
            email="a@x.com",
            username="learner_01",
            password=STRONG_PASSWORD,
            confirm_password=STRONG_PASSWORD,
        ),
        ip_address="203.0.113.7",
    )
    return result.data
