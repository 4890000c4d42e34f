"""Pure filtering and ordering of a note working set."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cloudbook.api.v1.schemas.note import NoteRead


class ScopeKind(str, Enum):
    ALL = "all"
    FOLDER = "folder"
    TAG = "tag"


@dataclass(frozen=True)
class SidebarScope:
    kind: ScopeKind = ScopeKind.ALL
    id: str | None = None

    @classmethod
    def all(cls) -> SidebarScope:
        return cls()

    @classmethod
    def folder(cls, folder_id: str) -> SidebarScope:
        return cls(ScopeKind.FOLDER, folder_id)

    @classmethod
    def tag(cls, tag_id: str) -> SidebarScope:
        return cls(ScopeKind.TAG, tag_id)


@dataclass(frozen=True)
class NoteFilter:
    """The three independent filter axes. All of them must match."""

    scope: SidebarScope = SidebarScope()
    query: str = ""
    tag: str | None = None


def matches_scope(note: NoteRead, scope: SidebarScope) -> bool:
    if scope.kind is ScopeKind.FOLDER and scope.id:
        return note.folder_id.value == scope.id
    if scope.kind is ScopeKind.TAG and scope.id:
        return scope.id in note.tags
    return True


def matches_query(note: NoteRead, query: str) -> bool:
    if not query:
        return True
    needle = query.lower()
    return needle in note.title.lower() or needle in note.content.lower()


def matches_tag(note: NoteRead, tag: str | None) -> bool:
    return not tag or tag in note.tags


def store_order(notes: Iterable[NoteRead]) -> list[NoteRead]:
    """Pinned first, then most recently updated. Stable for equal keys."""
    return sorted(notes, key=lambda n: (not n.pinned, -n.updated_at.timestamp()))


def visible_notes(notes: Iterable[NoteRead], note_filter: NoteFilter) -> list[NoteRead]:
    selected = [
        n for n in notes
        if matches_scope(n, note_filter.scope)
        and matches_query(n, note_filter.query)
        and matches_tag(n, note_filter.tag)
    ]
    return store_order(selected)
