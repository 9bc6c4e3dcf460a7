from datetime import timedelta

import pytest
import pytest_asyncio

from linguaflip_auth.domain.entities.user import SecurityState, SuspiciousActivityEntry, utc_now
from linguaflip_auth.domain.services.auth.account_security import AccountSecurityTracker
from tests.factories import create_fake_user_record


@pytest.fixture
def tracker(repository):
    return AccountSecurityTracker(repository)


@pytest_asyncio.fixture
async def user(repository):
    record = create_fake_user_record()
    await repository.create_user(record)
    return record


async def _security(repository, user_id) -> SecurityState:
    return (await repository.get_user_by_id(user_id)).data.security


@pytest.mark.asyncio
async def test_increment_records_failed_attempt(tracker, repository, user):
    # Act
    first = await tracker.increment_login_attempts(user.user_id, "203.0.113.7")
    second = await tracker.increment_login_attempts(user.user_id)

    # Assert
    security = await _security(repository, user.user_id)
    assert (first, second) == (1, 2)
    assert security.login_attempts == 2
    assert [e.details for e in security.suspicious_activity] == ["Attempt 2", "Attempt 1"]
    assert security.suspicious_activity[0].ip_address == "unknown"
    assert security.suspicious_activity[1].ip_address == "203.0.113.7"
    assert security.suspicious_activity[0].type == "FAILED_LOGIN_ATTEMPT"


@pytest.mark.asyncio
async def test_suspicious_activity_keeps_ten_most_recent(tracker, repository):
    history = [SuspiciousActivityEntry(type="FAILED_LOGIN_ATTEMPT", details=f"Attempt {n}") for n in range(10, 0, -1)]
    record = create_fake_user_record(security=SecurityState(login_attempts=10, suspicious_activity=history))
    await repository.create_user(record)

    await tracker.increment_login_attempts(record.user_id)

    activity = (await _security(repository, record.user_id)).suspicious_activity
    assert len(activity) == 10
    assert activity[0].details == "Attempt 11"
    assert activity[-1].details == "Attempt 2"


@pytest.mark.asyncio
async def test_reset_login_attempts(tracker, repository, user):
    await tracker.increment_login_attempts(user.user_id)

    await tracker.reset_login_attempts(user.user_id)

    assert (await _security(repository, user.user_id)).login_attempts == 0


@pytest.mark.asyncio
async def test_lock_and_unlock(tracker, repository, user):
    before = utc_now()

    await tracker.lock_account(user.user_id, 60_000)

    locked = await _security(repository, user.user_id)
    assert locked.account_locked is True
    assert before + timedelta(seconds=59) < locked.account_locked_until <= utc_now() + timedelta(minutes=1)

    await tracker.increment_login_attempts(user.user_id)
    await tracker.unlock_account(user.user_id)

    unlocked = await _security(repository, user.user_id)
    assert unlocked.account_locked is False
    assert unlocked.account_locked_until is None
    assert unlocked.login_attempts == 0


@pytest.mark.asyncio
async def test_update_last_login(tracker, repository, user):
    await tracker.update_last_login(user.user_id, "198.51.100.4")

    security = await _security(repository, user.user_id)
    assert security.last_login is not None
    assert security.last_login_ip == "198.51.100.4"


@pytest.mark.asyncio
async def test_missing_user_is_a_no_op(tracker, repository, mocker):
    update_spy = mocker.spy(repository, "update_user_security")

    assert await tracker.increment_login_attempts("user_missing") == 0
    await tracker.lock_account("user_missing", 1000)
    await tracker.unlock_account("user_missing")
    await tracker.reset_login_attempts("user_missing")
    await tracker.update_last_login("user_missing")

    update_spy.assert_not_called()
