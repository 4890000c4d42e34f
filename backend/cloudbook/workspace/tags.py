from __future__ import annotations

import random
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cloudbook.api.v1.schemas.note import NoteRead

TAG_COLORS = (
    "blue",
    "green",
    "yellow",
    "red",
    "purple",
    "pink",
    "indigo",
    "gray",
)


@dataclass
class Tag:
    id: str
    name: str
    color: str


def tag_id_for(name: str) -> str:
    """Identifier a freshly created tag gets: lower-cased, whitespace to dashes."""
    return re.sub(r"\s", "-", name.strip().lower())


class TagCatalogue:
    """Tags derived from a note set, decorated with a display name and colour.

    Metadata for every id ever seen is remembered, so a tag keeps its name and
    colour across recomputations within a session.
    """

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.Random()
        self._known: dict[str, Tag] = {}
        self._tags: list[Tag] = []

    @property
    def tags(self) -> list[Tag]:
        return list(self._tags)

    def ids(self) -> list[str]:
        return [t.id for t in self._tags]

    def get(self, tag_id: str) -> Tag | None:
        for tag in self._tags:
            if tag.id == tag_id:
                return tag
        return None

    def find_by_name(self, name: str) -> Tag | None:
        wanted = name.strip().lower()
        for tag in self._tags:
            if tag.name.lower() == wanted:
                return tag
        return None

    def _describe(self, tag_id: str) -> Tag:
        tag = self._known.get(tag_id)
        if tag is None:
            tag = Tag(id=tag_id, name=tag_id, color=self._rng.choice(TAG_COLORS))
            self._known[tag_id] = tag
        return tag

    def derive(self, notes: Iterable[NoteRead]) -> list[Tag]:
        """Recompute the catalogue as the tags referenced by ``notes``, in first-seen order."""
        seen: dict[str, Tag] = {}
        for note in notes:
            for tag_id in note.tags:
                if tag_id not in seen:
                    seen[tag_id] = self._describe(tag_id)
        self._tags = list(seen.values())
        return self.tags

    def create(self, name: str) -> Tag | None:
        """Add a tag by display name, or return the existing one with that name."""
        if not name or not name.strip():
            return None
        existing = self.find_by_name(name)
        if existing:
            return existing
        tag = self._describe(tag_id_for(name))
        tag.name = name.strip()
        if tag not in self._tags:
            self._tags.append(tag)
        return tag

    def rename(self, tag_id: str, new_name: str, *, new_id: str | None = None) -> Tag:
        """Change a tag's display name, optionally moving its metadata to ``new_id``."""
        tag = self._describe(tag_id)
        target_id = new_id or tag_id
        renamed = Tag(id=target_id, name=new_name.strip(), color=tag.color)
        self._known[target_id] = renamed
        self._tags = [renamed if t.id == tag_id else t for t in self._tags]
        return renamed

    def remove(self, tag_id: str) -> None:
        self._tags = [t for t in self._tags if t.id != tag_id]
