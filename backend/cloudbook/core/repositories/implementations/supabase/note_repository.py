from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from cloudbook.core.models.note import Note
from cloudbook.core.repositories.note_repository import NoteRepository
from cloudbook.db.schema import ensure_schema
from cloudbook.utils.logging import get_logger

logger = get_logger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from supabase import Client


class SupabaseNoteRepository(NoteRepository):
    """Supabase implementation of the NoteRepository.

    Uses Supabase's PostgREST client for CRUD against the `notes` table. Every
    statement carries an `eq("user_id", ...)` filter next to the id filter.
    """

    TABLE_NAME = "notes"

    def __init__(self, client: Client) -> None:
        self._client: Client = client

    async def ensure_schema(self) -> None:
        await ensure_schema(self._client)

    async def create(self, note: Note) -> Note:
        row = self._note_to_row(note)
        resp = await self._run(
            lambda: self._client.table(self.TABLE_NAME)
            .insert(row)
            .execute()
        )
        data = self._first(resp.data)
        if not data:
            logger.error("Insert returned no row", extra={"note_id": note.id, "user_id": note.user_id})
            raise RuntimeError("Insert into notes returned no row")
        return self._row_to_note(data)

    async def get(self, note_id: str, *, user_id: int) -> Note | None:
        resp = await self._run(
            lambda: self._client.table(self.TABLE_NAME)
            .select("*")
            .eq("id", note_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        items = resp.data or []
        if not items:
            return None
        return self._row_to_note(items[0])

    async def list(self, *, user_id: int) -> Sequence[Note]:
        resp = await self._run(
            lambda: self._client.table(self.TABLE_NAME)
            .select("*")
            .eq("user_id", user_id)
            .order("pinned", desc=True)
            .order("updated_at", desc=True)
            .execute()
        )
        items = resp.data or []
        return [self._row_to_note(i) for i in items]

    async def update_fields(self, note_id: str, changes: dict[str, Any], *, user_id: int) -> Note | None:
        # id, owner and creation time are never rewritten
        sanitized = {k: v for k, v in (changes or {}).items() if k not in {"id", "user_id", "created_at"}}
        if not sanitized:
            return await self.get(note_id, user_id=user_id)

        row = self._changes_to_row(sanitized)
        resp = await self._run(
            lambda: self._client.table(self.TABLE_NAME)
            .update(row)
            .eq("id", note_id)
            .eq("user_id", user_id)
            .execute()
        )
        items = resp.data or []
        if not items:
            return None
        return self._row_to_note(items[0])

    async def delete(self, note_id: str, *, user_id: int) -> bool:
        resp = await self._run(
            lambda: self._client.table(self.TABLE_NAME)
            .delete()
            .eq("id", note_id)
            .eq("user_id", user_id)
            .execute()
        )
        items = resp.data or []
        return len(items) > 0

    @staticmethod
    async def _run(func: Callable[[], Any]) -> Any:
        return await asyncio.to_thread(func)

    @staticmethod
    def _first(data: Any) -> dict[str, Any]:
        if isinstance(data, list) and data:
            return data[0]
        if isinstance(data, dict):
            return data
        return {}

    @staticmethod
    def _row_to_note(row: dict[str, Any]) -> Note:
        normalized = dict(row)
        if normalized.get("tags") is None:
            normalized["tags"] = []
        if normalized.get("title") is None:
            normalized["title"] = ""
        if normalized.get("content") is None:
            normalized["content"] = ""
        return Note.model_validate(normalized)

    @staticmethod
    def _note_to_row(note: Note) -> dict[str, Any]:
        # mode="json" renders datetimes as ISO strings and the folder enum as its value,
        # which is what PostgREST expects.
        return note.model_dump(mode="json")

    @staticmethod
    def _changes_to_row(changes: dict[str, Any]) -> dict[str, Any]:
        row: dict[str, Any] = {}
        for key, value in changes.items():
            if hasattr(value, "isoformat"):
                value = value.isoformat()
            elif hasattr(value, "value"):
                value = value.value
            row[key] = value
        return row
