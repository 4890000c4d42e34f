from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, status

from cloudbook.api.v1.schemas.note import (
    DeletedResponse,
    NoteCreate,
    NoteEnvelope,
    NoteListEnvelope,
    NoteRead,
    NoteUpdate,
)
from cloudbook.core.errors import AppError, UnexpectedError
from cloudbook.dependencies import get_current_user_id, get_note_service
from cloudbook.utils.logging import get_logger

if TYPE_CHECKING:
    from cloudbook.core.services.note_service import NoteService

logger = get_logger(__name__)

router = APIRouter(
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Note not found"},
    }
)


def _unexpected(operation: str, err: Exception) -> UnexpectedError:
    logger.error(f"Unexpected error during {operation}", extra={"error": str(err)})
    return UnexpectedError(f"Failed to {operation}", detail=str(err))


@router.get("", response_model=NoteListEnvelope)
async def list_notes(
    user_id: int = Depends(get_current_user_id),
    service: NoteService = Depends(get_note_service),
):
    try:
        notes = await service.list_notes(user_id)
    except AppError:
        raise
    except Exception as err:
        raise _unexpected("fetch notes", err) from err
    return NoteListEnvelope(notes=[NoteRead.from_note(n) for n in notes])


@router.post("", response_model=NoteEnvelope, status_code=status.HTTP_201_CREATED)
async def create_note(
    payload: NoteCreate,
    user_id: int = Depends(get_current_user_id),
    service: NoteService = Depends(get_note_service),
):
    try:
        note = await service.create_note(payload, user_id=user_id)
    except AppError:
        raise
    except Exception as err:
        raise _unexpected("create note", err) from err
    return NoteEnvelope(note=NoteRead.from_note(note))


@router.get("/{note_id}", response_model=NoteEnvelope)
async def get_note(
    note_id: str,
    user_id: int = Depends(get_current_user_id),
    service: NoteService = Depends(get_note_service),
):
    try:
        note = await service.get_note(note_id, user_id=user_id)
    except AppError:
        raise
    except Exception as err:
        raise _unexpected("fetch note", err) from err
    return NoteEnvelope(note=NoteRead.from_note(note))


@router.put("/{note_id}", response_model=NoteEnvelope)
async def update_note(
    note_id: str,
    payload: NoteUpdate,
    user_id: int = Depends(get_current_user_id),
    service: NoteService = Depends(get_note_service),
):
    try:
        note = await service.update_note(note_id, payload, user_id=user_id)
    except AppError:
        raise
    except Exception as err:
        raise _unexpected("update note", err) from err
    return NoteEnvelope(note=NoteRead.from_note(note))


@router.delete("/{note_id}", response_model=DeletedResponse)
async def delete_note(
    note_id: str,
    user_id: int = Depends(get_current_user_id),
    service: NoteService = Depends(get_note_service),
):
    try:
        await service.delete_note(note_id, user_id=user_id)
    except AppError:
        raise
    except Exception as err:
        raise _unexpected("delete note", err) from err
    return DeletedResponse()
