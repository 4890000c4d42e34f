from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

    from cloudbook.core.models.note import Note


class NoteRepository(ABC):
    """Abstract repository interface for notes.

    Every read and write takes the owning user id and filters on it, so a note
    owned by somebody else behaves exactly like a missing one.
    """

    @abstractmethod
    async def ensure_schema(self) -> None:  # pragma: no cover - interface only
        """Create backing tables if absent. Safe to call repeatedly and concurrently."""

    @abstractmethod
    async def create(self, note: Note) -> Note:  # pragma: no cover
        """Persist a new note and return the stored entity."""

    @abstractmethod
    async def get(self, note_id: str, *, user_id: int) -> Note | None:  # pragma: no cover
        """Fetch a user's note by id or return None."""

    @abstractmethod
    async def list(self, *, user_id: int) -> Sequence[Note]:  # pragma: no cover
        """Return the user's notes, pinned first, then most recently updated."""

    @abstractmethod
    async def update_fields(self, note_id: str, changes: dict[str, Any], *, user_id: int) -> Note | None:  # pragma: no cover
        """Partially update a user's note and return it, or None if missing."""

    @abstractmethod
    async def delete(self, note_id: str, *, user_id: int) -> bool:  # pragma: no cover
        """Delete a user's note. Return True if a row was removed."""
