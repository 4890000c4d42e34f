from __future__ import annotations

from enum import Enum
from uuid import uuid4

from pydantic import Field, field_validator

from cloudbook.utils.validation import normalize_tags

from .base import TimestampedModel


class Folder(str, Enum):
    """Fixed set of folders a note can live in."""

    NOTES = "notes"
    PROJECTS = "projects"
    TRASH = "trash"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


DEFAULT_FOLDER = Folder.NOTES


class Note(TimestampedModel):
    """Note domain model."""

    id: str = Field(default_factory=lambda: str(uuid4()), description="Unique note identifier")
    user_id: int = Field(..., description="Owner of the note")

    title: str = Field(default="", description="Note title")
    content: str = Field(default="", description="Note content")

    folder_id: Folder = Field(default=DEFAULT_FOLDER, description="Folder the note is filed under")
    tags: list[str] = Field(default_factory=list, description="Tag identifiers, no duplicates")
    pinned: bool = Field(default=False, description="Whether the note is pinned to the top")

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, v: list[str] | None) -> list[str]:
        return normalize_tags(v)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": str(uuid4()),
                    "user_id": 1,
                    "title": "Meeting Notes",
                    "content": "Finalize budget for marketing campaign.",
                    "folder_id": "notes",
                    "tags": ["work", "urgent"],
                    "pinned": False,
                }
            ]
        }
    }
