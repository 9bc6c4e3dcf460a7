from .input_sanitizer import (
    assert_valid_email,
    is_email_format_valid,
    normalize_email,
    sanitize_string,
)

__all__ = ["assert_valid_email", "is_email_format_valid", "normalize_email", "sanitize_string"]
