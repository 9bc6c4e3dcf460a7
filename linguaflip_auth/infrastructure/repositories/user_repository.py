"""In-memory user repository.

A reference adapter for ``IUserRepository`` used by tests and local tooling.
It mirrors the behaviour expected of a document store adapter:

- Records are deep-copied on the way in and out, so callers only ever change
  stored state by writing it back.
- Email and user id are unique; a clash raises ``DuplicateError``.
- ``update_user`` only accepts writes from the record's owner.
- Absent ids and emails raise ``NotFoundError``.

It is not a storage engine: there is no persistence and no cross-process
sharing. Updates are last-writer-wins, like the read-modify-write callers
expect.
"""

from typing import Any, Dict, Mapping

from pydantic import ValidationError as PydanticValidationError
from structlog import get_logger

from linguaflip_auth.core.exceptions import (
    DuplicateError,
    NotFoundError,
    PermissionError,
    ValidationError,
)
from linguaflip_auth.domain.entities.user import SecurityState, UserAuthRecord, utc_now
from linguaflip_auth.domain.interfaces.repositories import IUserRepository, RepositoryResult

logger = get_logger(__name__)

COLLECTION = "users"


class InMemoryUserRepository(IUserRepository):
    """Dictionary-backed implementation of ``IUserRepository``."""

    def __init__(self):
        self._users: Dict[str, UserAuthRecord] = {}
        self._ids_by_email: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._users)

    async def get_user_by_id(self, user_id: str) -> RepositoryResult[UserAuthRecord]:
        record = self._users.get(user_id)
        if record is None:
            raise NotFoundError("User not found", "get_user_by_id", COLLECTION, document_id=user_id)
        return RepositoryResult.ok(record.model_copy(deep=True))

    async def get_user_by_email(self, email: str) -> RepositoryResult[UserAuthRecord]:
        user_id = self._ids_by_email.get(self._email_key(email))
        if user_id is None:
            raise NotFoundError("User not found", "get_user_by_email", COLLECTION)
        return RepositoryResult.ok(self._users[user_id].model_copy(deep=True))

    async def create_user(self, record: UserAuthRecord) -> RepositoryResult[UserAuthRecord]:
        if record.user_id in self._users:
            raise DuplicateError("User already exists", "create_user", COLLECTION, field="user_id")
        if record.email and self._email_key(record.email) in self._ids_by_email:
            raise DuplicateError(
                "User with this email already exists", "create_user", COLLECTION, field="email"
            )

        stored = record.model_copy(deep=True)
        self._users[stored.user_id] = stored
        if stored.email:
            self._ids_by_email[self._email_key(stored.email)] = stored.user_id
        logger.debug("User created", user_id=stored.user_id)
        return RepositoryResult.ok(stored.model_copy(deep=True))

    async def update_user(
        self, user_id: str, updates: Mapping[str, Any], requester_id: str
    ) -> RepositoryResult[UserAuthRecord]:
        current = self._require(user_id, "update_user")
        if requester_id != user_id:
            raise PermissionError(
                "Not allowed to update another user's record",
                "update_user",
                COLLECTION,
                user_id=requester_id,
            )
        if "user_id" in updates and updates["user_id"] != user_id:
            raise ValidationError("user_id cannot be changed", "update_user", COLLECTION, field="user_id")

        data = current.model_dump()
        data.update(updates)
        data["updated_at"] = utc_now()
        updated = self._validated(UserAuthRecord, data, "update_user").model_copy(deep=True)

        new_email = self._email_key(updated.email) if updated.email else None
        old_email = self._email_key(current.email) if current.email else None
        if new_email != old_email:
            if new_email and self._ids_by_email.get(new_email, user_id) != user_id:
                raise DuplicateError(
                    "User with this email already exists", "update_user", COLLECTION, field="email"
                )
            if old_email:
                del self._ids_by_email[old_email]
            if new_email:
                self._ids_by_email[new_email] = user_id

        self._users[user_id] = updated
        return RepositoryResult.ok(updated.model_copy(deep=True))

    async def update_user_security(
        self, user_id: str, security_updates: Mapping[str, Any]
    ) -> RepositoryResult[UserAuthRecord]:
        current = self._require(user_id, "update_user_security")

        security_data = current.security.model_dump()
        security_data.update(security_updates)
        security = self._validated(SecurityState, security_data, "update_user_security")

        updated = current.model_copy(update={"security": security, "updated_at": utc_now()})
        self._users[user_id] = updated
        return RepositoryResult.ok(updated.model_copy(deep=True))

    def _require(self, user_id: str, operation: str) -> UserAuthRecord:
        record = self._users.get(user_id)
        if record is None:
            raise NotFoundError("User not found", operation, COLLECTION, document_id=user_id)
        return record

    @staticmethod
    def _validated(model, data: Dict[str, Any], operation: str):
        try:
            return model.model_validate(data)
        except PydanticValidationError as exc:
            raise ValidationError(
                "Invalid user record update", operation, COLLECTION, detail={"errors": exc.errors()}
            ) from exc

    @staticmethod
    def _email_key(email: str) -> str:
        return email.strip().lower()
