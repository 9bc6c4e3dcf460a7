"""Repository interfaces for abstracting data persistence in the domain layer.

This module defines the abstract base class (interface) for the user document
repository, which acts as a "port" in the context of Hexagonal Architecture. The
auth core reads and writes user records only through this interface, never
through a concrete store.

Concrete implementations reside in the ``infrastructure`` layer.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Mapping, Optional, TypeVar

from pydantic import BaseModel

from linguaflip_auth.domain.entities.user import UserAuthRecord

T = TypeVar("T")


class RepositoryResult(BaseModel, Generic[T]):
    """Outcome of a repository call.

    ``success`` is False with an ``error`` message when the call did not
    produce ``data``. Implementations may also raise ``NotFoundError`` for
    absent records; callers treat both as "absent".
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: T) -> "RepositoryResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "RepositoryResult[T]":
        return cls(success=False, error=error)


class IUserRepository(ABC):
    """An interface defining the contract for user persistence operations.

    Records handed out are copies: mutating a returned record has no effect
    until it is written back with ``update_user`` or ``update_user_security``.
    Updates are last-writer-wins; there is no version check.
    """

    @abstractmethod
    async def get_user_by_id(self, user_id: str) -> RepositoryResult[UserAuthRecord]:
        """Retrieves a user by their stable identifier.

        Args:
            user_id: The user's external identifier.

        Returns:
            A result whose ``data`` is the record when found.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_user_by_email(self, email: str) -> RepositoryResult[UserAuthRecord]:
        """Retrieves a user by email address.

        Args:
            email: The (already sanitized) email address.

        Returns:
            A result whose ``data`` is the record when found.
        """
        raise NotImplementedError

    @abstractmethod
    async def create_user(self, record: UserAuthRecord) -> RepositoryResult[UserAuthRecord]:
        """Persists a new user record.

        Raises:
            DuplicateError: If the user id or email is already taken.
        """
        raise NotImplementedError

    @abstractmethod
    async def update_user(
        self, user_id: str, updates: Mapping[str, Any], requester_id: str
    ) -> RepositoryResult[UserAuthRecord]:
        """Replaces top-level fields of a user record.

        Args:
            user_id: Record to update.
            updates: Mapping of top-level field name to its new value
                (e.g. ``{"authentication": AuthenticationState(...)}``).
            requester_id: Identity performing the update; must own the record.
        """
        raise NotImplementedError

    @abstractmethod
    async def update_user_security(
        self, user_id: str, security_updates: Mapping[str, Any]
    ) -> RepositoryResult[UserAuthRecord]:
        """Replaces fields of the record's security block.

        Args:
            user_id: Record to update.
            security_updates: Mapping of ``SecurityState`` field name to value.
        """
        raise NotImplementedError
