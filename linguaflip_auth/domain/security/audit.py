"""Security audit logging for authentication events.

``SecurityAuditor`` is the default audit sink. Events go to the
``security.audit`` structlog logger and into a bounded, per-instance trail so a
caller (or a test) can inspect what happened without a log pipeline.

Key properties:
- Fire-and-forget: recording an event never raises into the operation that
  emitted it.
- Data masking: emails, IP addresses and token-like values are masked before
  they reach the log or the trail.
- Bounded memory: only the most recent events are retained.
"""

import hashlib
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Mapping, Union

import structlog

from linguaflip_auth.domain.interfaces.security import ISecurityAuditor, SecurityEventSeverity

logger = structlog.get_logger(__name__)

MAX_AUDIT_ENTRIES = 1000

_EMAIL_KEYS = frozenset({"email"})
_IP_KEYS = frozenset({"ip_address", "ipAddress", "client_ip"})
_TOKEN_KEYS = frozenset({"token", "refresh_token", "access_token", "reset_token"})


@dataclass(frozen=True)
class AuditEntry:
    """Immutable record of one audit event."""

    action: str
    severity: SecurityEventSeverity
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def mask_email(email: str) -> str:
    """Keep enough of an email to correlate events without exposing it.

    ``alice@example.com`` becomes ``al***<hash>@ex***.com``.
    """
    if not email:
        return "[empty]"
    if "@" not in email:
        return mask_token(email)

    local, domain = email.split("@", 1)
    digest = hashlib.sha256(email.lower().encode()).hexdigest()[:8]
    domain_parts = domain.split(".")
    if len(domain_parts) > 1:
        masked_domain = f"{domain_parts[0][:2]}***.{domain_parts[-1]}"
    else:
        masked_domain = f"{domain[:2]}***"
    return f"{local[:2]}***{digest}@{masked_domain}"


def mask_ip_address(ip_address: str) -> str:
    """Mask the last IPv4 octet or the last IPv6 group."""
    if not ip_address or ip_address == "unknown":
        return "[unknown]"
    if "." in ip_address:
        parts = ip_address.split(".")
        if len(parts) == 4:
            return f"{parts[0]}.{parts[1]}.{parts[2]}.***"
    if ":" in ip_address:
        return ip_address.rsplit(":", 1)[0] + ":***"
    return ip_address[:8] + "***"


def mask_token(token: str) -> str:
    """Show the first and last four characters only."""
    if not token:
        return "[empty]"
    if len(token) <= 8:
        return "*" * len(token)
    return f"{token[:4]}***{token[-4:]}"


class SecurityAuditor(ISecurityAuditor):
    """Default audit sink backed by structlog and a bounded in-memory trail.

    Each service instance owns its auditor, so tests get an isolated trail.
    """

    def __init__(self, max_entries: int = MAX_AUDIT_ENTRIES):
        self._entries: Deque[AuditEntry] = deque(maxlen=max_entries)
        self._logger = structlog.get_logger("security.audit")

    def log_security_event(
        self,
        event: str,
        context: Mapping[str, Any],
        severity: Union[SecurityEventSeverity, str] = SecurityEventSeverity.LOW,
    ) -> None:
        try:
            level = SecurityEventSeverity(severity)
            details = self._mask_context(context)
            self._entries.append(AuditEntry(action=event, severity=level, details=details))

            if level is SecurityEventSeverity.HIGH:
                self._logger.warning("security_event", action=event, severity=level.value, **details)
            else:
                self._logger.info("security_event", action=event, severity=level.value, **details)
        except Exception as exc:  # audit must never fail the caller
            logger.error("Security audit event dropped", action=event, error=str(exc))

    def get_audit_log(self) -> List[AuditEntry]:
        return list(self._entries)

    def get_high_severity_events(self) -> List[AuditEntry]:
        return [entry for entry in self._entries if entry.severity is SecurityEventSeverity.HIGH]

    def events_named(self, action: str) -> List[AuditEntry]:
        return [entry for entry in self._entries if entry.action == action]

    @staticmethod
    def _mask_context(context: Mapping[str, Any]) -> Dict[str, Any]:
        masked: Dict[str, Any] = {}
        for key, value in (context or {}).items():
            if value is None:
                masked[key] = None
            elif key in _EMAIL_KEYS:
                masked[key] = mask_email(str(value))
            elif key in _IP_KEYS:
                masked[key] = mask_ip_address(str(value))
            elif key in _TOKEN_KEYS:
                masked[key] = mask_token(str(value))
            else:
                masked[key] = value
        return masked
