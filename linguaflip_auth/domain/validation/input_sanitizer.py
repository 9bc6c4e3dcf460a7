"""Input sanitization and format checks applied before any lookup or write.

Sanitization here is deliberately narrow: it strips control characters that
could poison logs or storage keys, trims, and bounds length. Richer sanitization
belongs to the caller's input layer.
"""

import re
from typing import Any

import structlog

from linguaflip_auth.core.exceptions import ValidationError

logger = structlog.get_logger(__name__)

CONTROL_CHARS = re.compile(r"[\x00-\x1F\x7F-\x9F]")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DEFAULT_MAX_LENGTH = 1000


def sanitize_string(value: Any, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """Remove control characters, trim and truncate.

    Args:
        value: Raw input. Non-string input sanitizes to an empty string.
        max_length: Maximum length of the returned value.

    Returns:
        str: The sanitized value.
    """
    if not isinstance(value, str):
        return ""

    sanitized = CONTROL_CHARS.sub("", value).strip()
    if len(sanitized) > max_length:
        logger.debug("Input truncated", original_length=len(sanitized), max_length=max_length)
        sanitized = sanitized[:max_length]
    return sanitized


def normalize_email(value: Any) -> str:
    """Sanitize an email address and fold it to lower case."""
    return sanitize_string(value, max_length=254).lower()


def is_email_format_valid(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ""))


def assert_valid_email(email: str, operation: str) -> None:
    """Raise ``ValidationError`` unless ``email`` looks like ``local@domain.tld``."""
    if not is_email_format_valid(email):
        raise ValidationError("Invalid email format", operation, "users", field="email")
