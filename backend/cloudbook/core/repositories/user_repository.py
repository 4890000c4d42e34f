from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cloudbook.core.models.user import User


class UserRepository(ABC):
    """Abstract repository interface for users. Emails are stored lower-cased."""

    @abstractmethod
    async def ensure_schema(self) -> None:  # pragma: no cover - interface only
        """Create backing tables if absent."""

    @abstractmethod
    async def get_by_id(self, user_id: int) -> User | None:  # pragma: no cover
        ...

    @abstractmethod
    async def get_by_email(self, email: str) -> User | None:  # pragma: no cover
        ...

    @abstractmethod
    async def create(self, *, name: str, email: str, password_hash: str) -> User:  # pragma: no cover
        """Insert a user. Raises ConflictError when the email is taken."""

    @abstractmethod
    async def ensure_by_email(self, *, name: str, email: str) -> User:  # pragma: no cover
        """Return the user with ``email``, inserting one with a placeholder hash if absent.

        Idempotent: repeated or concurrent calls yield the same single row.
        """
