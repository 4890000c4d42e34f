from __future__ import annotations

import itertools

from cloudbook.core.errors import ConflictError
from cloudbook.core.models.user import User
from cloudbook.core.repositories.user_repository import UserRepository
from cloudbook.core.security import PLACEHOLDER_PASSWORD_HASH


class InMemoryUserRepository(UserRepository):
    """Process-local user store with a unique index on email."""

    def __init__(self) -> None:
        self._by_id: dict[int, User] = {}
        self._ids_by_email: dict[str, int] = {}
        self._sequence = itertools.count(1)

    async def ensure_schema(self) -> None:
        return None

    async def get_by_id(self, user_id: int) -> User | None:
        user = self._by_id.get(user_id)
        return user.model_copy() if user else None

    async def get_by_email(self, email: str) -> User | None:
        user_id = self._ids_by_email.get(email)
        return self._by_id[user_id].model_copy() if user_id is not None else None

    async def create(self, *, name: str, email: str, password_hash: str) -> User:
        if email in self._ids_by_email:
            raise ConflictError("Email already in use")
        return self._insert(name, email, password_hash)

    async def ensure_by_email(self, *, name: str, email: str) -> User:
        user_id = self._ids_by_email.get(email)
        if user_id is not None:
            return self._by_id[user_id].model_copy()
        return self._insert(name, email, PLACEHOLDER_PASSWORD_HASH)

    def _insert(self, name: str, email: str, password_hash: str) -> User:
        user = User(id=next(self._sequence), name=name, email=email, password_hash=password_hash)
        self._by_id[user.id] = user
        self._ids_by_email[email] = user.id
        return user.model_copy()
