import pytest

from linguaflip_auth.core.exceptions import ValidationError
from linguaflip_auth.domain.services.auth.password import PasswordCredentialManager


@pytest.fixture
def password_manager():
    return PasswordCredentialManager(rounds=4)


@pytest.mark.asyncio
async def test_hash_and_verify(password_manager):
    # Arrange
    password = "Abc12345"

    # Act
    hashed = await password_manager.hash(password)

    # Assert
    assert hashed != password
    assert hashed.startswith("$2b$04$")
    assert await password_manager.verify(password, hashed) is True
    assert await password_manager.verify("Abc123456", hashed) is False


@pytest.mark.asyncio
async def test_hashes_are_salted(password_manager):
    assert await password_manager.hash("Abc12345") != await password_manager.hash("Abc12345")


@pytest.mark.asyncio
@pytest.mark.parametrize("stored", ["", "not-a-hash", "$2b$04$tooshort"])
async def test_malformed_hash_verifies_false(password_manager, stored):
    assert await password_manager.verify("Abc12345", stored) is False


@pytest.mark.asyncio
async def test_empty_password_verifies_false(password_manager):
    hashed = await password_manager.hash("Abc12345")

    assert await password_manager.verify("", hashed) is False


@pytest.mark.parametrize("password", ["Abc1234", "", "a1B"])
def test_short_passwords_rejected(password):
    with pytest.raises(ValidationError, match="at least 8 characters"):
        PasswordCredentialManager.ensure_strength(password)


@pytest.mark.parametrize("password", ["abcdefgh1", "ABCDEFGH1", "Abcdefghi", "12345678"])
def test_missing_character_class_rejected(password):
    with pytest.raises(ValidationError) as exc_info:
        PasswordCredentialManager.ensure_strength(password, "register")

    assert "one lowercase letter, one uppercase letter, and one number" in exc_info.value.message
    assert exc_info.value.field == "password"
    assert exc_info.value.operation == "register"


@pytest.mark.parametrize("password", ["Abc12345", "S3cure-Passphrase!"])
def test_strong_passwords_accepted(password):
    PasswordCredentialManager.ensure_strength(password)


@pytest.mark.asyncio
async def test_weak_password_is_never_hashed(password_manager, mocker):
    hash_spy = mocker.spy(password_manager._context, "hash")

    with pytest.raises(ValidationError):
        password_manager.ensure_strength("weak")

    hash_spy.assert_not_called()


def test_null_character_rejected():
    with pytest.raises(ValidationError, match="must not contain null characters") as exc_info:
        PasswordCredentialManager.ensure_strength("Abc1234\x005", "register")

    assert exc_info.value.field == "password"


def test_longest_bcrypt_input_accepted():
    PasswordCredentialManager.ensure_strength("Abc12345" + "x" * 64)


@pytest.mark.parametrize("password", ["Abc12345" + "x" * 65, "Abc12345" + "é" * 33])
def test_password_over_bcrypt_limit_rejected(password):
    with pytest.raises(ValidationError, match="at most 72 bytes"):
        PasswordCredentialManager.ensure_strength(password)


@pytest.mark.asyncio
async def test_hash_reports_refused_password_as_validation_error(password_manager):
    with pytest.raises(ValidationError) as exc_info:
        await password_manager.hash("Abc1234\x005")

    assert exc_info.value.field == "password"
    assert exc_info.value.operation == "hash_password"
