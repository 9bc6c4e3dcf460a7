"""Re-export factory functions for generating fake test data."""

from .user import PLACEHOLDER_HASH, create_fake_refresh_entry, create_fake_user_record

__all__ = ["PLACEHOLDER_HASH", "create_fake_refresh_entry", "create_fake_user_record"]
