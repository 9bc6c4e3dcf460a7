"""Security service interfaces consumed by the auth core."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Mapping


class SecurityEventSeverity(str, Enum):
    """Audit event severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ISecurityAuditor(ABC):
    """Sink for security audit events.

    Implementations are fire-and-forget: ``log_security_event`` must return
    promptly and must never raise into the calling operation.
    """

    @abstractmethod
    def log_security_event(
        self,
        event: str,
        context: Mapping[str, Any],
        severity: SecurityEventSeverity = SecurityEventSeverity.LOW,
    ) -> None:
        """Record a security event such as ``USER_LOGIN_SUCCESS``."""
        raise NotImplementedError
