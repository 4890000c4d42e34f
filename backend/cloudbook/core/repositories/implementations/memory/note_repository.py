from __future__ import annotations

from typing import TYPE_CHECKING, Any

from cloudbook.core.models.note import Note
from cloudbook.core.repositories.note_repository import NoteRepository

if TYPE_CHECKING:
    from collections.abc import Sequence


def store_order_key(note: Note) -> tuple:
    """Pinned first, then most recently updated."""
    return (not note.pinned, -note.updated_at.timestamp())


class InMemoryNoteRepository(NoteRepository):
    """Process-local note store for development and tests.

    Methods never await between reading and writing state, so each call is
    atomic with respect to other coroutines on the same loop.
    """

    def __init__(self) -> None:
        self._rows: dict[str, Note] = {}

    async def ensure_schema(self) -> None:
        return None

    async def create(self, note: Note) -> Note:
        if note.id in self._rows:
            raise ValueError(f"Duplicate note id {note.id}")
        self._rows[note.id] = note.model_copy(deep=True)
        return note.model_copy(deep=True)

    async def get(self, note_id: str, *, user_id: int) -> Note | None:
        note = self._rows.get(note_id)
        if note is None or note.user_id != user_id:
            return None
        return note.model_copy(deep=True)

    async def list(self, *, user_id: int) -> Sequence[Note]:
        owned = [n for n in self._rows.values() if n.user_id == user_id]
        return [n.model_copy(deep=True) for n in sorted(owned, key=store_order_key)]

    async def update_fields(self, note_id: str, changes: dict[str, Any], *, user_id: int) -> Note | None:
        note = self._rows.get(note_id)
        if note is None or note.user_id != user_id:
            return None
        sanitized = {k: v for k, v in (changes or {}).items() if k not in {"id", "user_id", "created_at"}}
        updated = Note.model_validate({**note.model_dump(), **sanitized})
        self._rows[note_id] = updated
        return updated.model_copy(deep=True)

    async def delete(self, note_id: str, *, user_id: int) -> bool:
        note = self._rows.get(note_id)
        if note is None or note.user_id != user_id:
            return False
        del self._rows[note_id]
        return True
