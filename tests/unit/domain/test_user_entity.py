from datetime import timedelta

import pytest
from pydantic import ValidationError as PydanticValidationError

from linguaflip_auth.domain.entities.user import (
    SecurityState,
    SuspiciousActivityEntry,
    new_user_record,
    utc_now,
)
from tests.factories import create_fake_refresh_entry, create_fake_user_record


def test_new_user_record_starts_clean():
    record = new_user_record("user_1_abcd", "a@x.com", "$2b$04$hash", email_verified=True)

    assert record.security.login_attempts == 0
    assert record.security.account_locked is False
    assert record.authentication.refresh_tokens == []
    assert record.authentication.password_reset_token is None
    assert record.authentication.email_verified_at is not None


def test_user_id_is_immutable():
    record = create_fake_user_record()

    with pytest.raises(PydanticValidationError):
        record.user_id = "user_other"


def test_sanitized_view_hides_secrets():
    record = create_fake_user_record(refresh_tokens=[create_fake_refresh_entry()])
    record.authentication.password_reset_token = "reset-token"

    view = record.sanitized()

    assert view["authentication"]["password"] == ""
    assert view["authentication"]["refresh_tokens"] == []
    assert "password_reset_token" not in view["authentication"]
    assert "security" not in view
    assert view["user_id"] == record.user_id


def test_suspicious_activity_is_bounded():
    entries = [SuspiciousActivityEntry(type="FAILED_LOGIN_ATTEMPT", details=f"Attempt {n}") for n in range(15, 0, -1)]

    state = SecurityState(suspicious_activity=entries)

    assert len(state.suspicious_activity) == 10
    assert state.suspicious_activity[0].details == "Attempt 15"


def test_negative_attempts_rejected():
    with pytest.raises(PydanticValidationError):
        SecurityState(login_attempts=-1)


@pytest.mark.parametrize(
    "locked, until_offset, expected",
    [
        (False, None, False),
        (True, None, True),
        (True, timedelta(minutes=5), True),
        (True, timedelta(minutes=-5), False),
    ],
)
def test_is_lock_active(locked, until_offset, expected):
    until = utc_now() + until_offset if until_offset is not None else None
    state = SecurityState(account_locked=locked, account_locked_until=until)

    assert state.is_lock_active() is expected


def test_has_refresh_token():
    entry = create_fake_refresh_entry(token="token-a")
    record = create_fake_user_record(refresh_tokens=[entry])

    assert record.authentication.has_refresh_token("token-a")
    assert not record.authentication.has_refresh_token("token-b")
