from __future__ import annotations

"""Centralized, structured exception hierarchy for the auth core.

Every failure raised by this package is an ``AuthCoreError`` tagged with an
``ErrorKind``. The kind is the discriminator callers match on; the concrete
subclasses exist so ``except ValidationError`` keeps working the way Python
code expects. Each error carries:

- ``kind``: the variant (validation, not_found, duplicate, ...)
- ``code``: a stable machine-readable code
- ``operation`` / ``collection``: where the error happened
- ``detail``: structured context for logs, never shown to clients

``safe_async`` is the single propagation boundary wrapped around every public
operation: it attaches context, normalises unknown exceptions into
``DatabaseError`` and logs by kind before re-raising.
"""

import builtins
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from enum import Enum
from typing import Any, AsyncIterator, Dict, Final, Iterable, Mapping, Optional

import structlog

__all__: Final = [
    "ErrorKind",
    "AuthCoreError",
    "ValidationError",
    "NotFoundError",
    "DuplicateError",
    "PermissionError",
    "DatabaseError",
    "ConnectionError",
    "safe_async",
    "validate_required",
    "user_message",
    "status_code_for",
]

logger = structlog.get_logger(__name__)


class ErrorKind(str, Enum):
    """Discriminator for the error variants produced by the auth core."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"
    PERMISSION = "permission"
    DATABASE = "database"
    CONNECTION = "connection"


class AuthCoreError(Exception):
    """Base exception for all auth-core errors.

    Attributes:
        message (str): Human-readable message. For validation and permission
            errors this text is safe to show to the end user.
        kind (ErrorKind): The error variant.
        code (str): Machine-readable error code.
        operation (str): Operation in which the error was raised.
        collection (str | None): Data collection involved, if any.
        detail (dict): Structured context for logging.
        timestamp (datetime): When the error was created (UTC).
    """

    kind: ErrorKind = ErrorKind.DATABASE
    default_code: str = "DATABASE_ERROR"

    def __init__(
        self,
        message: str,
        operation: str = "unknown",
        collection: Optional[str] = None,
        *,
        code: Optional[str] = None,
        detail: Optional[Mapping[str, Any]] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.operation = operation
        self.collection = collection
        self.detail: Dict[str, Any] = dict(detail or {})
        self.timestamp = datetime.now(timezone.utc)
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message

    def attach_context(
        self,
        operation: Optional[str] = None,
        collection: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> "AuthCoreError":
        """Record the boundary context on the error without discarding what is already set."""
        if operation and self.operation == "unknown":
            self.operation = operation
        if collection and not self.collection:
            self.collection = collection
        context = self.detail.setdefault("context", {})
        if operation:
            context.setdefault("operation", operation)
        if collection:
            context.setdefault("collection", collection)
        if user_id:
            context.setdefault("user_id", user_id)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "code": self.code,
            "message": self.message,
            "operation": self.operation,
            "collection": self.collection,
            "timestamp": self.timestamp.isoformat(),
            "detail": self.detail,
        }


# ---------------------------------------------------------------------------
# Client errors
# ---------------------------------------------------------------------------


class ValidationError(AuthCoreError):
    """Malformed input or a failed business-rule check.

    Wrong credentials and invalid or expired tokens are reported with this
    error using generic messages, so it is always safe to show to the user.
    """

    kind = ErrorKind.VALIDATION
    default_code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        operation: str = "validate",
        collection: Optional[str] = None,
        field: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, operation, collection, **kwargs)
        self.field = field


class NotFoundError(AuthCoreError):
    """A referenced entity is absent.

    Auth handlers translate this into a generic ``ValidationError`` so the
    existence of an account is never revealed.
    """

    kind = ErrorKind.NOT_FOUND
    default_code = "NOT_FOUND_ERROR"

    def __init__(
        self,
        message: str,
        operation: str = "find",
        collection: Optional[str] = None,
        document_id: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, operation, collection, **kwargs)
        self.document_id = document_id


class DuplicateError(AuthCoreError):
    """A uniqueness constraint was violated, e.g. the email is already registered."""

    kind = ErrorKind.DUPLICATE
    default_code = "DUPLICATE_ERROR"

    def __init__(
        self,
        message: str,
        operation: str = "insert",
        collection: Optional[str] = None,
        field: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, operation, collection, **kwargs)
        self.field = field


class PermissionError(AuthCoreError):
    """Authorization or account-state violation (locked account, unverified email)."""

    kind = ErrorKind.PERMISSION
    default_code = "PERMISSION_ERROR"

    def __init__(
        self,
        message: str,
        operation: str = "authorize",
        collection: Optional[str] = None,
        user_id: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, operation, collection, **kwargs)
        self.user_id = user_id


# ---------------------------------------------------------------------------
# Server errors
# ---------------------------------------------------------------------------


class DatabaseError(AuthCoreError):
    """Repository or token-persistence failure. Not user-actionable."""

    kind = ErrorKind.DATABASE
    default_code = "DATABASE_ERROR"


class ConnectionError(DatabaseError):
    """Transport-level failure reaching the repository."""

    kind = ErrorKind.CONNECTION
    default_code = "CONNECTION_ERROR"

    def __init__(self, message: str, operation: str = "connect", **kwargs: Any):
        super().__init__(message, operation, **kwargs)


# ---------------------------------------------------------------------------
# Propagation helpers
# ---------------------------------------------------------------------------

_GENERIC_SERVER_MESSAGE = "An unexpected error occurred. Please try again."
_CONNECTION_MESSAGE = "The service is temporarily unavailable. Please try again."


def _log_error(error: AuthCoreError) -> None:
    kind = error.kind
    if kind in (ErrorKind.VALIDATION, ErrorKind.NOT_FOUND, ErrorKind.DUPLICATE):
        logger.info("Operation rejected", **_log_fields(error))
    elif kind is ErrorKind.PERMISSION:
        logger.warning("Operation denied", **_log_fields(error))
    elif kind in (ErrorKind.DATABASE, ErrorKind.CONNECTION):
        logger.error("Operation failed", **error.to_dict())
    else:  # pragma: no cover - exhaustive over ErrorKind
        raise AssertionError(f"Unhandled error kind: {kind!r}")


def _log_fields(error: AuthCoreError) -> Dict[str, Any]:
    return {
        "kind": error.kind.value,
        "code": error.code,
        "operation": error.operation,
        "collection": error.collection,
        "error_message": error.message,
    }


@asynccontextmanager
async def safe_async(
    operation: str,
    collection: Optional[str] = None,
    user_id: Optional[str] = None,
) -> AsyncIterator[None]:
    """Error boundary for a public operation.

    Usage::

        async with safe_async("login", "users"):
            ...

    Any ``AuthCoreError`` escaping the block gets the boundary context and is
    re-raised. Any other exception is wrapped in ``DatabaseError`` with the
    original chained as ``__cause__``.
    """
    try:
        yield
    except AuthCoreError as error:
        error.attach_context(operation, collection, user_id)
        _log_error(error)
        raise
    except Exception as exc:
        wrapped = DatabaseError(
            str(exc) or exc.__class__.__name__,
            operation,
            collection,
            code="UNKNOWN_ERROR",
            detail={"original_error": exc.__class__.__name__},
        )
        wrapped.attach_context(operation, collection, user_id)
        _log_error(wrapped)
        raise wrapped from exc


def validate_required(
    data: Any,
    required_fields: Iterable[str],
    operation: str = "validate_required_fields",
    collection: Optional[str] = None,
) -> None:
    """Raise ``ValidationError`` if any of ``required_fields`` is None or empty."""
    missing = []
    for name in required_fields:
        value = data.get(name) if isinstance(data, Mapping) else getattr(data, name, None)
        if value is None or value == "":
            missing.append(name)
    if missing:
        raise ValidationError(
            f"Missing required fields: {', '.join(missing)}",
            operation,
            collection,
            field=missing[0],
        )


def user_message(error: builtins.BaseException) -> str:
    """Return text that can be shown to the client for ``error``.

    Database and connection detail is withheld and only logged.
    """
    if not isinstance(error, AuthCoreError):
        return _GENERIC_SERVER_MESSAGE
    kind = error.kind
    if kind in (ErrorKind.VALIDATION, ErrorKind.PERMISSION, ErrorKind.DUPLICATE, ErrorKind.NOT_FOUND):
        return error.message
    if kind is ErrorKind.CONNECTION:
        return _CONNECTION_MESSAGE
    if kind is ErrorKind.DATABASE:
        return _GENERIC_SERVER_MESSAGE
    raise AssertionError(f"Unhandled error kind: {kind!r}")  # pragma: no cover


_STATUS_CODES: Final[Dict[ErrorKind, int]] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.PERMISSION: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.DUPLICATE: 409,
    ErrorKind.DATABASE: 500,
    ErrorKind.CONNECTION: 503,
}

assert set(_STATUS_CODES) == set(ErrorKind), "every ErrorKind needs a status code"


def status_code_for(kind: ErrorKind) -> int:
    """Reference transport mapping for callers that expose this core over HTTP."""
    return _STATUS_CODES[kind]
