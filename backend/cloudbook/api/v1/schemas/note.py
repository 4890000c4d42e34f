from __future__ import annotations

from datetime import datetime  # noqa: TCH003
from typing import TYPE_CHECKING

from pydantic import ConfigDict, Field, StrictBool, field_validator
from pydantic.alias_generators import to_camel

from cloudbook.core.models.base import AppBaseModel
from cloudbook.core.models.note import Folder  # noqa: TCH001
from cloudbook.utils.validation import normalize_tags

if TYPE_CHECKING:
    from cloudbook.core.models.note import Note


class ApiModel(AppBaseModel):
    """Wire model: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NoteFields(ApiModel):
    model_config = ConfigDict(extra="ignore")

    title: str | None = Field(default=None, max_length=255, description="Note title")
    content: str | None = Field(default=None, max_length=100_000, description="Note content")
    folder_id: Folder | None = Field(default=None, description="Folder identifier")
    tags: list[str] | None = Field(default=None, description="Tag identifiers")
    pinned: StrictBool | None = Field(default=None, description="Pin state; omitted or null keeps the current value")

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return normalize_tags(v)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else v

    def changes(self) -> dict:
        """Fields the client actually supplied; explicit nulls count as unspecified."""
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}


class NoteCreate(NoteFields):
    pass


class NoteUpdate(NoteFields):
    pass


class NoteRead(ApiModel):
    id: str
    title: str
    content: str
    folder_id: Folder
    tags: list[str]
    pinned: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_note(cls, note: Note) -> NoteRead:
        return cls(
            id=note.id,
            title=note.title,
            content=note.content,
            folder_id=note.folder_id,
            tags=list(note.tags),
            pinned=note.pinned,
            created_at=note.created_at,
            updated_at=note.updated_at,
        )


class NoteEnvelope(ApiModel):
    note: NoteRead


class NoteListEnvelope(ApiModel):
    notes: list[NoteRead]


class DeletedResponse(ApiModel):
    ok: bool = True


class FolderRead(ApiModel):
    id: Folder
    name: str


class FolderListEnvelope(ApiModel):
    folders: list[FolderRead]
