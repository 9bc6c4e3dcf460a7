import pytest

from linguaflip_auth.core.exceptions import ValidationError
from linguaflip_auth.domain.validation import (
    assert_valid_email,
    is_email_format_valid,
    normalize_email,
    sanitize_string,
)


class TestSanitizeString:
    def test_strips_control_characters_and_whitespace(self):
        assert sanitize_string("  learner\x00_01\x1f\x7f\x9f  ") == "learner_01"

    def test_truncates_to_max_length(self):
        assert sanitize_string("a" * 1500) == "a" * 1000
        assert sanitize_string("abcdef", max_length=3) == "abc"

    @pytest.mark.parametrize("value", [None, 42, ["a"], b"bytes"])
    def test_non_strings_become_empty(self, value):
        assert sanitize_string(value) == ""


class TestEmail:
    def test_normalize_lowercases_and_trims(self):
        assert normalize_email("  A@X.Com\n") == "a@x.com"

    @pytest.mark.parametrize("email", ["a@x.com", "first.last+tag@sub.example.org"])
    def test_valid_formats(self, email):
        assert is_email_format_valid(email)
        assert_valid_email(email, "register")

    @pytest.mark.parametrize("email", ["", "plainaddress", "a@x", "a b@x.com", "@x.com", "a@@x.com"])
    def test_invalid_formats(self, email):
        with pytest.raises(ValidationError) as exc_info:
            assert_valid_email(email, "register")

        assert exc_info.value.message == "Invalid email format"
        assert exc_info.value.field == "email"
        assert exc_info.value.operation == "register"
