from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from postgrest.exceptions import APIError

from cloudbook.core.errors import ConflictError
from cloudbook.core.models.user import User
from cloudbook.core.repositories.user_repository import UserRepository
from cloudbook.core.security import PLACEHOLDER_PASSWORD_HASH
from cloudbook.db.schema import ensure_schema
from cloudbook.utils.logging import get_logger

if TYPE_CHECKING:
    from supabase import Client

logger = get_logger(__name__)

UNIQUE_VIOLATION = "23505"


class SupabaseUserRepository(UserRepository):
    """Supabase implementation of the UserRepository backed by the `users` table."""

    TABLE_NAME = "users"

    def __init__(self, client: Client) -> None:
        self._client: Client = client

    async def ensure_schema(self) -> None:
        await ensure_schema(self._client)

    async def get_by_id(self, user_id: int) -> User | None:
        resp = await asyncio.to_thread(
            lambda: self._client.table(self.TABLE_NAME)
            .select("*")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        return self._first_user(resp.data)

    async def get_by_email(self, email: str) -> User | None:
        resp = await asyncio.to_thread(
            lambda: self._client.table(self.TABLE_NAME)
            .select("*")
            .eq("email", email)
            .limit(1)
            .execute()
        )
        return self._first_user(resp.data)

    async def create(self, *, name: str, email: str, password_hash: str) -> User:
        row = {"name": name, "email": email, "password_hash": password_hash}
        try:
            resp = await asyncio.to_thread(
                lambda: self._client.table(self.TABLE_NAME)
                .insert(row)
                .execute()
            )
        except APIError as err:
            if err.code == UNIQUE_VIOLATION:
                logger.info("Duplicate email rejected by unique index", extra={"email": email})
                raise ConflictError("Email already in use") from err
            raise
        user = self._first_user(resp.data)
        if user is None:
            raise RuntimeError("Insert into users returned no row")
        return user

    async def ensure_by_email(self, *, name: str, email: str) -> User:
        row = {"name": name, "email": email, "password_hash": PLACEHOLDER_PASSWORD_HASH}
        # ON CONFLICT (email) DO NOTHING: the unique index decides the single winner.
        await asyncio.to_thread(
            lambda: self._client.table(self.TABLE_NAME)
            .upsert(row, on_conflict="email", ignore_duplicates=True)
            .execute()
        )
        user = await self.get_by_email(email)
        if user is None:
            raise RuntimeError(f"User row missing after upsert for {email}")
        return user

    @staticmethod
    def _first_user(data: Any) -> User | None:
        if isinstance(data, list):
            data = data[0] if data else None
        if not data:
            return None
        return User.model_validate(data)
