from __future__ import annotations

from fastapi import APIRouter

from cloudbook.api.v1.schemas.note import FolderListEnvelope, FolderRead
from cloudbook.core.models.note import Folder

router = APIRouter()


@router.get("", response_model=FolderListEnvelope)
async def list_folders():
    """The fixed set of folders notes can be filed under."""
    return FolderListEnvelope(folders=[FolderRead(id=f, name=f.display_name) for f in Folder])
