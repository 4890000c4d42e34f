from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING
from uuid import uuid4

from cloudbook.core.errors import NotFoundError
from cloudbook.core.models.base import utcnow
from cloudbook.core.models.note import DEFAULT_FOLDER, Note

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from cloudbook.api.v1.schemas.note import NoteCreate, NoteUpdate
    from cloudbook.core.repositories.note_repository import NoteRepository


ALLOWED_UPDATE_FIELDS = frozenset({"title", "content", "folder_id", "tags", "pinned"})


def next_updated_at(previous: datetime) -> datetime:
    """Current time, but never at or before ``previous``."""
    now = utcnow()
    if now <= previous:
        return previous + timedelta(microseconds=1)
    return now


class NoteService:
    """Service for managing notes with user-scoped access."""

    def __init__(self, repo: NoteRepository) -> None:
        self._repo = repo

    async def list_notes(self, user_id: int) -> Sequence[Note]:
        """List the user's notes, pinned first, then most recently updated."""
        return await self._repo.list(user_id=user_id)

    async def get_note(self, note_id: str, user_id: int) -> Note:
        note = await self._repo.get(note_id, user_id=user_id)
        if note is None:
            raise NotFoundError("Note not found")
        return note

    async def create_note(self, create_dto: NoteCreate, user_id: int) -> Note:
        """Create a note with defaults for every field the client left out."""
        fields = create_dto.changes()
        now = utcnow()
        note = Note(
            id=str(uuid4()),
            user_id=user_id,
            title=fields.get("title", ""),
            content=fields.get("content", ""),
            folder_id=fields.get("folder_id", DEFAULT_FOLDER),
            tags=fields.get("tags", []),
            pinned=fields.get("pinned", False),
            created_at=now,
            updated_at=now,
        )
        return await self._repo.create(note)

    async def update_note(self, note_id: str, update_dto: NoteUpdate, user_id: int) -> Note:
        """Apply a partial update.

        Only supplied fields change. The update timestamp moves forward even when
        no value differs from what is stored.
        """
        existing = await self.get_note(note_id, user_id)

        changes = {k: v for k, v in update_dto.changes().items() if k in ALLOWED_UPDATE_FIELDS}
        changes["updated_at"] = next_updated_at(existing.updated_at)

        updated = await self._repo.update_fields(note_id, changes, user_id=user_id)
        if updated is None:
            # deleted between the read and the write
            raise NotFoundError("Note not found")
        return updated

    async def delete_note(self, note_id: str, user_id: int) -> None:
        if not await self._repo.delete(note_id, user_id=user_id):
            raise NotFoundError("Note not found")
