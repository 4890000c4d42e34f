"""Client-side working set of a signed-in user's notes.

The workspace mirrors what the notes API returns, derives the tag catalogue,
applies the sidebar/search/tag filters and keeps a single active selection
inside the visible list. Every mutation goes to the API first; local state only
changes once the API has confirmed it.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from cloudbook.core.models.note import DEFAULT_FOLDER
from cloudbook.utils.logging import get_logger

from .client import NotesApiError
from .filters import NoteFilter, ScopeKind, SidebarScope, store_order, visible_notes
from .tags import Tag, TagCatalogue, tag_id_for

if TYPE_CHECKING:
    import random

    from cloudbook.api.v1.schemas.note import NoteRead

    from .client import NotesApiClient

logger = get_logger(__name__)

NEW_NOTE_TITLE = "New Note"


@dataclass
class Notification:
    """Transient message for the user, e.g. a toast."""

    title: str
    description: str
    level: str = "info"


@dataclass
class BulkEditResult:
    """Aggregate outcome of a per-note fan-out."""

    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class NoteWorkspace:
    def __init__(self, client: NotesApiClient, *, rng: random.Random | None = None):
        self._client = client
        self._notes: list[NoteRead] = []
        self._filter = NoteFilter(scope=SidebarScope.folder(DEFAULT_FOLDER.value))
        self.catalogue = TagCatalogue(rng)
        self.active_note_id: str | None = None
        self.notifications: list[Notification] = []

    # ---- derived state ----

    @property
    def notes(self) -> list[NoteRead]:
        return list(self._notes)

    @property
    def note_filter(self) -> NoteFilter:
        return self._filter

    @property
    def tags(self) -> list[Tag]:
        return self.catalogue.tags

    @property
    def visible(self) -> list[NoteRead]:
        return visible_notes(self._notes, self._filter)

    @property
    def active_note(self) -> NoteRead | None:
        return self._find(self.active_note_id) if self.active_note_id else None

    def _find(self, note_id: str) -> NoteRead | None:
        return next((n for n in self._notes if n.id == note_id), None)

    def _notify(self, title: str, description: str, level: str = "info") -> None:
        self.notifications.append(Notification(title, description, level))
        log = logger.warning if level == "error" else logger.info
        log(f"{title}: {description}")

    def drain_notifications(self) -> list[Notification]:
        pending, self.notifications = self.notifications, []
        return pending

    def _maintain_selection(self) -> None:
        visible = self.visible
        if self.active_note_id and not any(n.id == self.active_note_id for n in visible):
            self.active_note_id = None
        if self.active_note_id is None and visible:
            self.active_note_id = visible[0].id

    def _replace_notes(self, notes: list[NoteRead]) -> None:
        self._notes = store_order(notes)
        self.catalogue.derive(self._notes)
        self._maintain_selection()

    def _apply_saved(self, saved: NoteRead) -> None:
        self._replace_notes([saved if n.id == saved.id else n for n in self._notes])

    # ---- filters and selection ----

    def set_scope(self, scope: SidebarScope) -> None:
        self._filter = NoteFilter(scope=scope, query=self._filter.query, tag=self._filter.tag)
        self._maintain_selection()

    def set_query(self, query: str) -> None:
        self._filter = NoteFilter(scope=self._filter.scope, query=query, tag=self._filter.tag)
        self._maintain_selection()

    def set_tag_filter(self, tag: str | None) -> None:
        tag = None if tag in (None, "", "all") else tag
        self._filter = NoteFilter(scope=self._filter.scope, query=self._filter.query, tag=tag)
        self._maintain_selection()

    def select(self, note_id: str | None) -> None:
        self.active_note_id = note_id
        self._maintain_selection()

    # ---- note actions ----

    async def load(self) -> bool:
        try:
            loaded = await self._client.list_notes()
        except NotesApiError as e:
            self._notify("Error", f"Unable to load notes: {e.message}", "error")
            return False
        self._replace_notes(loaded)
        return True

    async def create_note(self) -> NoteRead | None:
        """Create an empty note filed under the current folder or tag scope, and select it."""
        scope = self._filter.scope
        folder_id = scope.id if scope.kind is ScopeKind.FOLDER and scope.id else DEFAULT_FOLDER.value
        tags = [scope.id] if scope.kind is ScopeKind.TAG and scope.id else []
        try:
            created = await self._client.create_note(title=NEW_NOTE_TITLE, content="", folder_id=folder_id, tags=tags)
        except NotesApiError as e:
            self._notify("Error", f"Unable to create note: {e.message}", "error")
            return None
        self.active_note_id = created.id
        self._replace_notes([created, *self._notes])
        self._notify("Note created", "A new note has been added.")
        return created

    async def update_note(self, note_id: str, **fields: Any) -> NoteRead | None:
        try:
            saved = await self._client.update_note(note_id, **fields)
        except NotesApiError as e:
            self._notify("Error", f"Unable to save changes: {e.message}", "error")
            return None
        self._apply_saved(saved)
        return saved

    async def toggle_pin(self, note_id: str) -> NoteRead | None:
        note = self._find(note_id)
        if note is None:
            return None
        return await self.update_note(note_id, pinned=not note.pinned)

    async def delete_note(self, note_id: str) -> bool:
        visible_before = self.visible
        note = self._find(note_id)
        try:
            await self._client.delete_note(note_id)
        except NotesApiError as e:
            self._notify("Error", f"Unable to delete note: {e.message}", "error")
            return False

        if self.active_note_id == note_id:
            remaining = [n for n in visible_before if n.id != note_id]
            if remaining:
                index = next((i for i, n in enumerate(visible_before) if n.id == note_id), 0)
                self.active_note_id = remaining[min(index, len(remaining) - 1)].id
            else:
                self.active_note_id = None
        self._replace_notes([n for n in self._notes if n.id != note_id])
        title = note.title if note and note.title else "Untitled"
        self._notify("Note deleted", f'The note "{title}" has been removed.')
        return True

    # ---- tag actions ----

    def create_tag(self, name: str) -> Tag | None:
        """Register a tag by name, returning the existing one if the name is taken.

        The tag lives in the catalogue until the next recomputation unless a
        note starts referencing it.
        """
        existing = self.catalogue.find_by_name(name)
        tag = self.catalogue.create(name)
        if tag is not None and existing is None:
            self._notify("Tag created", f'The tag "{tag.name}" has been created.')
        return tag

    async def rename_tag(self, tag_id: str, new_name: str) -> BulkEditResult | None:
        name = new_name.strip()
        if not name:
            return None
        new_id = tag_id_for(name)
        clash = self.catalogue.find_by_name(name)
        if (clash and clash.id != tag_id) or (new_id != tag_id and new_id in self.catalogue.ids()):
            self._notify("Tag name in use", "Choose a different name.", "error")
            return None

        if new_id == tag_id:
            self.catalogue.rename(tag_id, name)
            self._notify("Tag updated", f'Tag renamed to "{name}".')
            return BulkEditResult()

        self.catalogue.rename(tag_id, name, new_id=new_id)
        rewrites = {
            n.id: list(dict.fromkeys(new_id if t == tag_id else t for t in n.tags))
            for n in self._notes
            if tag_id in n.tags
        }
        result = await self._bulk_update_tags(rewrites)
        if result.ok:
            self._notify("Tag updated", f'Tag renamed to "{name}".')
        else:
            self._notify("Error", "Unable to rename the tag on some notes.", "error")
        return result

    async def delete_tag(self, tag_id: str) -> BulkEditResult:
        """Remove a tag from every note that carries it."""
        self.catalogue.remove(tag_id)
        rewrites = {n.id: [t for t in n.tags if t != tag_id] for n in self._notes if tag_id in n.tags}
        result = await self._bulk_update_tags(rewrites)
        if result.ok:
            self._notify("Tag deleted", "Removed from tag list and affected notes.")
        else:
            self._notify("Error", "Unable to persist tag deletion for some notes.", "error")
        return result

    async def _bulk_update_tags(self, rewrites: dict[str, list[str]]) -> BulkEditResult:
        note_ids = list(rewrites)
        outcomes = await asyncio.gather(
            *(self._client.update_note(note_id, tags=rewrites[note_id]) for note_id in note_ids),
            return_exceptions=True,
        )

        result = BulkEditResult()
        saved: dict[str, NoteRead] = {}
        interrupted: BaseException | None = None
        for note_id, outcome in zip(note_ids, outcomes):
            if isinstance(outcome, Exception):
                message = outcome.message if isinstance(outcome, NotesApiError) else repr(outcome)
                logger.warning("Bulk tag edit failed", extra={"note_id": note_id, "error": message})
                result.failed.append(note_id)
            elif isinstance(outcome, BaseException):
                # cancellation and interpreter exit are not per-note failures
                interrupted = interrupted or outcome
                result.failed.append(note_id)
            else:
                saved[note_id] = outcome
                result.succeeded.append(note_id)

        self._replace_notes([saved.get(n.id, n) for n in self._notes])
        if interrupted is not None:
            raise interrupted
        return result
