"""Authentication operations, one handler per operation, composed by ``AuthService``."""

from .auth_service import AuthService

__all__ = ["AuthService"]
