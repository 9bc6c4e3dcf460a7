import pytest

from linguaflip_auth.core.exceptions import (
    DuplicateError,
    NotFoundError,
    PermissionError,
    ValidationError,
)
from tests.factories import create_fake_refresh_entry, create_fake_user_record


@pytest.mark.asyncio
async def test_create_and_fetch(repository):
    # Arrange
    user = create_fake_user_record(email="a@x.com")

    # Act
    created = await repository.create_user(user)
    by_id = await repository.get_user_by_id(user.user_id)
    by_email = await repository.get_user_by_email("A@X.com")

    # Assert
    assert created.success
    assert by_id.data.user_id == by_email.data.user_id == user.user_id
    assert len(repository) == 1


@pytest.mark.asyncio
async def test_records_are_copied(repository):
    user = create_fake_user_record()
    await repository.create_user(user)

    fetched = (await repository.get_user_by_id(user.user_id)).data
    fetched.security.login_attempts = 4
    user.authentication.refresh_tokens.append(create_fake_refresh_entry())

    stored = (await repository.get_user_by_id(user.user_id)).data
    assert stored.security.login_attempts == 0
    assert stored.authentication.refresh_tokens == []


@pytest.mark.asyncio
async def test_duplicate_email_rejected(repository):
    await repository.create_user(create_fake_user_record(email="a@x.com"))

    with pytest.raises(DuplicateError) as exc_info:
        await repository.create_user(create_fake_user_record(email="a@x.com"))

    assert exc_info.value.field == "email"


@pytest.mark.asyncio
async def test_duplicate_id_rejected(repository):
    await repository.create_user(create_fake_user_record(user_id="user_1"))

    with pytest.raises(DuplicateError):
        await repository.create_user(create_fake_user_record(user_id="user_1"))


@pytest.mark.asyncio
async def test_absent_users_raise_not_found(repository):
    with pytest.raises(NotFoundError):
        await repository.get_user_by_id("user_missing")
    with pytest.raises(NotFoundError):
        await repository.get_user_by_email("nobody@x.com")
    with pytest.raises(NotFoundError):
        await repository.update_user_security("user_missing", {"login_attempts": 1})


@pytest.mark.asyncio
async def test_update_user_replaces_only_given_fields(repository):
    user = create_fake_user_record()
    await repository.create_user(user)
    await repository.update_user_security(user.user_id, {"login_attempts": 3})

    authentication = user.authentication.model_copy(deep=True)
    authentication.refresh_tokens = [create_fake_refresh_entry("token-a")]
    result = await repository.update_user(user.user_id, {"authentication": authentication}, user.user_id)

    assert result.data.authentication.refresh_tokens[0].token == "token-a"
    assert result.data.security.login_attempts == 3
    assert result.data.updated_at >= user.updated_at


@pytest.mark.asyncio
async def test_update_user_requires_owner(repository):
    user = create_fake_user_record()
    await repository.create_user(user)

    with pytest.raises(PermissionError):
        await repository.update_user(user.user_id, {"username": "intruder"}, "user_other")


@pytest.mark.asyncio
async def test_update_user_cannot_change_id(repository):
    user = create_fake_user_record()
    await repository.create_user(user)

    with pytest.raises(ValidationError):
        await repository.update_user(user.user_id, {"user_id": "user_other"}, user.user_id)


@pytest.mark.asyncio
async def test_update_user_reindexes_email(repository):
    user = create_fake_user_record(email="old@x.com")
    await repository.create_user(user)

    await repository.update_user(user.user_id, {"email": "new@x.com"}, user.user_id)

    assert (await repository.get_user_by_email("new@x.com")).data.user_id == user.user_id
    with pytest.raises(NotFoundError):
        await repository.get_user_by_email("old@x.com")


@pytest.mark.asyncio
async def test_invalid_security_update_rejected(repository):
    user = create_fake_user_record()
    await repository.create_user(user)

    with pytest.raises(ValidationError):
        await repository.update_user_security(user.user_id, {"login_attempts": -1})
