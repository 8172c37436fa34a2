"""Note endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from nexacrm.api.leads import LIKE_ESCAPE, contains_pattern, get_owned_lead
from nexacrm.core.errors import NotFoundError
from nexacrm.core.time import utc_now
from nexacrm.db.session import get_db
from nexacrm.dependencies.auth import get_current_user
from nexacrm.models.lead import Lead
from nexacrm.models.note import Note
from nexacrm.models.user import User
from nexacrm.schemas.note import NoteCreate, NoteRead, NoteUpdate

router = APIRouter(prefix="/notes", tags=["notes"])


def _get_owned_note(db: Session, note_id: int, user_id: int) -> Note:
    note = db.query(Note).filter(Note.id == note_id, Note.user_id == user_id).first()
    if not note:
        raise NotFoundError("Note not found")
    return note


def _sync_notes_count(db: Session, *lead_ids: int | None) -> None:
    for lead_id in {lead_id for lead_id in lead_ids if lead_id is not None}:
        lead = db.get(Lead, lead_id)
        if lead is not None:
            lead.notes_count = db.query(func.count(Note.id)).filter(Note.lead_id == lead_id).scalar() or 0


@router.get("", response_model=list[NoteRead])
async def list_notes(
    lead_id: int | None = None,
    search: str | None = None,
    pinned: bool | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Note).filter(Note.user_id == current_user.id)
    if lead_id is not None:
        query = query.filter(Note.lead_id == lead_id)
    if pinned:
        query = query.filter(Note.pinned.is_(True))
    if search:
        pattern = contains_pattern(search)
        query = query.filter(
            or_(Note.title.ilike(pattern, escape=LIKE_ESCAPE), Note.content.ilike(pattern, escape=LIKE_ESCAPE))
        )
    return query.order_by(Note.pinned.desc(), Note.updated_at.desc(), Note.id.desc()).all()


@router.post("", response_model=NoteRead, status_code=status.HTTP_201_CREATED)
async def create_note(note_in: NoteCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    if note_in.lead_id is not None:
        get_owned_lead(db, note_in.lead_id, current_user.id)
    note = Note(user_id=current_user.id, **note_in.model_dump())
    db.add(note)
    db.flush()
    _sync_notes_count(db, note.lead_id)
    db.commit()
    db.refresh(note)
    return note


@router.put("/{note_id}", response_model=NoteRead)
async def update_note(
    note_id: int,
    note_in: NoteUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    note = _get_owned_note(db, note_id, current_user.id)
    previous_lead_id = note.lead_id
    updates = note_in.model_dump(exclude_unset=True)
    if updates.get("lead_id") is not None:
        get_owned_lead(db, updates["lead_id"], current_user.id)
    for field, value in updates.items():
        if value is None and field != "lead_id":
            continue
        setattr(note, field, value)
    note.updated_at = utc_now()
    db.flush()
    _sync_notes_count(db, previous_lead_id, note.lead_id)
    db.commit()
    db.refresh(note)
    return note


@router.delete("/{note_id}")
async def delete_note(note_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    note = _get_owned_note(db, note_id, current_user.id)
    lead_id = note.lead_id
    db.delete(note)
    db.flush()
    _sync_notes_count(db, lead_id)
    db.commit()
    return {"success": True, "id": note_id}
