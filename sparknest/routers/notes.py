from typing import List
from fastapi import APIRouter, Depends

from ..core.errors import NoteNotFound
from ..dependencies import get_current_user, get_storage
from ..schemas.auth import MessageResponse, UserPublic
from ..schemas.notes import NoteCreate, NoteResponse, NoteUpdate
from ..storage import DatabaseStorage

router = APIRouter(prefix="/api/notes", tags=["notes"])


@router.get("", response_model=List[NoteResponse])
def list_notes(current: UserPublic = Depends(get_current_user), storage: DatabaseStorage = Depends(get_storage)):
    return [NoteResponse.model_validate(n) for n in storage.get_user_notes(current.id)]


@router.post("", response_model=NoteResponse, status_code=201)
def create_note(payload: NoteCreate, current: UserPublic = Depends(get_current_user), storage: DatabaseStorage = Depends(get_storage)):
    note = storage.create_note(current.id, payload.title, payload.content)
    return NoteResponse.model_validate(note)


@router.get("/{note_id}", response_model=NoteResponse)
def get_note(note_id: str, current: UserPublic = Depends(get_current_user), storage: DatabaseStorage = Depends(get_storage)):
    note = storage.get_note(note_id, current.id)
    if not note:
        raise NoteNotFound()
    return NoteResponse.model_validate(note)


@router.put("/{note_id}", response_model=NoteResponse)
def update_note(note_id: str, payload: NoteUpdate, current: UserPublic = Depends(get_current_user), storage: DatabaseStorage = Depends(get_storage)):
    updates = payload.model_dump(exclude_unset=True, exclude_none=True)
    note = storage.update_note(note_id, current.id, **updates)
    if not note:
        raise NoteNotFound()
    return NoteResponse.model_validate(note)


@router.delete("/{note_id}", response_model=MessageResponse)
def delete_note(note_id: str, current: UserPublic = Depends(get_current_user), storage: DatabaseStorage = Depends(get_storage)):
    if not storage.delete_note(note_id, current.id):
        raise NoteNotFound()
    return MessageResponse(message="Note deleted successfully")
