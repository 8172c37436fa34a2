"""Lead management endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from nexacrm.core.errors import NotFoundError
from nexacrm.core.time import utc_now
from nexacrm.db.session import get_db
from nexacrm.dependencies.auth import get_current_user
from nexacrm.dependencies.providers import get_places_client, get_search_provider
from nexacrm.models.activity_log import ActivityLog
from nexacrm.models.file import File
from nexacrm.models.lead import Lead
from nexacrm.models.note import Note
from nexacrm.models.task import Task
from nexacrm.models.user import User
from nexacrm.schemas.activity import ActivityRead
from nexacrm.schemas.file import FileRead
from nexacrm.schemas.lead import (
    LeadCreate,
    LeadRead,
    LeadScoreResult,
    LeadStats,
    LeadUpdate,
    PlaceResult,
    PlaceSearchRequest,
)
from nexacrm.schemas.note import NoteRead
from nexacrm.schemas.task import TaskRead
from nexacrm.services.activity import log_activity
from nexacrm.services.google_places import GooglePlacesClient
from nexacrm.services.lead_scoring import score_lead
from nexacrm.services.search_provider import SearchProvider
from nexacrm.services.tasks import sort_by_priority

router = APIRouter(prefix="/leads", tags=["leads"])

RECENT_LEADS = 5
LEAD_ACTIVITY_LIMIT = 50
# Fields that keep their value when a null is sent
REQUIRED_FIELDS = {"name", "status", "source", "score", "social_profiles", "tags"}
LIKE_ESCAPE = "\\"


def contains_pattern(text: str) -> str:
    """Substring pattern for `ilike(..., escape=LIKE_ESCAPE)`; user wildcards match literally."""
    escaped = text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2).replace("%", r"\%").replace("_", r"\_")
    return f"%{escaped}%"


def get_owned_lead(db: Session, lead_id: int, user_id: int) -> Lead:
    lead = db.query(Lead).filter(Lead.id == lead_id, Lead.user_id == user_id).first()
    if not lead:
        raise NotFoundError("Lead not found")
    return lead


@router.get("", response_model=list[LeadRead])
async def list_leads(
    status: str | None = None,
    source: str | None = None,
    search: str | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Lead).filter(Lead.user_id == current_user.id)
    if status and status != "all":
        query = query.filter(Lead.status == status)
    if source:
        query = query.filter(Lead.source == source)
    if search:
        pattern = contains_pattern(search)
        query = query.filter(
            or_(
                Lead.name.ilike(pattern, escape=LIKE_ESCAPE),
                Lead.email.ilike(pattern, escape=LIKE_ESCAPE),
                Lead.company.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    return query.order_by(Lead.updated_at.desc(), Lead.id.desc()).all()


@router.get("/stats", response_model=LeadStats)
async def lead_stats(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    scoped = db.query(Lead).filter(Lead.user_id == current_user.id)
    by_status = (
        db.query(Lead.status, func.count(Lead.id))
        .filter(Lead.user_id == current_user.id)
        .group_by(Lead.status)
        .all()
    )
    by_source = (
        db.query(Lead.source, func.count(Lead.id))
        .filter(Lead.user_id == current_user.id)
        .group_by(Lead.source)
        .all()
    )
    recent = scoped.order_by(Lead.created_at.desc(), Lead.id.desc()).limit(RECENT_LEADS).all()
    return {
        "total": scoped.count(),
        "by_status": [{"status": s, "count": c} for s, c in by_status],
        "by_source": [{"source": s, "count": c} for s, c in by_source],
        "recent": recent,
    }


@router.post("/search/google-maps", response_model=list[PlaceResult])
async def search_google_maps(
    search_in: PlaceSearchRequest,
    places: GooglePlacesClient = Depends(get_places_client),
    current_user: User = Depends(get_current_user),
):
    return await places.search(
        search_in.query,
        location=search_in.location,
        radius=search_in.radius,
        place_type=search_in.type,
    )


@router.post("", response_model=LeadRead, status_code=status.HTTP_201_CREATED)
async def create_lead(lead_in: LeadCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    data = lead_in.model_dump()
    for field in ("email", "phone", "company", "position", "address", "website", "place_id"):
        data[field] = data[field] or None
    lead = Lead(user_id=current_user.id, **data)
    db.add(lead)
    db.commit()
    db.refresh(lead)
    log_activity(db, current_user.id, "created_lead", lead.id, f"Created lead: {lead.name}")
    return lead


@router.get("/{lead_id}", response_model=LeadRead)
async def get_lead(lead_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return get_owned_lead(db, lead_id, current_user.id)


@router.put("/{lead_id}", response_model=LeadRead)
async def update_lead(lead_id: int, lead_in: LeadUpdate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    lead = get_owned_lead(db, lead_id, current_user.id)
    for field, value in lead_in.model_dump(exclude_unset=True).items():
        if field in REQUIRED_FIELDS:
            if value is not None:  # Only update provided fields
                setattr(lead, field, value)
        else:
            setattr(lead, field, value or None)
    lead.updated_at = utc_now()
    db.commit()
    db.refresh(lead)
    log_activity(db, current_user.id, "updated_lead", lead.id, f"Updated lead: {lead.name}")
    return lead


@router.delete("/{lead_id}")
async def delete_lead(lead_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    lead = get_owned_lead(db, lead_id, current_user.id)
    name = lead.name
    db.delete(lead)
    db.commit()
    log_activity(db, current_user.id, "deleted_lead", lead_id, f"Deleted lead: {name}")
    return {"success": True, "id": lead_id}


@router.get("/{lead_id}/notes", response_model=list[NoteRead])
async def list_lead_notes(lead_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    get_owned_lead(db, lead_id, current_user.id)
    return (
        db.query(Note)
        .filter(Note.lead_id == lead_id, Note.user_id == current_user.id)
        .order_by(Note.pinned.desc(), Note.updated_at.desc(), Note.id.desc())
        .all()
    )


@router.get("/{lead_id}/tasks", response_model=list[TaskRead])
async def list_lead_tasks(lead_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    get_owned_lead(db, lead_id, current_user.id)
    tasks = (
        db.query(Task)
        .filter(Task.lead_id == lead_id, Task.user_id == current_user.id)
        .order_by(Task.created_at.desc(), Task.id.desc())
        .all()
    )
    return sort_by_priority(tasks)


@router.get("/{lead_id}/files", response_model=list[FileRead])
async def list_lead_files(lead_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    get_owned_lead(db, lead_id, current_user.id)
    return (
        db.query(File)
        .filter(File.lead_id == lead_id, File.user_id == current_user.id)
        .order_by(File.created_at.desc(), File.id.desc())
        .all()
    )


@router.get("/{lead_id}/activity", response_model=list[ActivityRead])
async def list_lead_activity(lead_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    get_owned_lead(db, lead_id, current_user.id)
    return (
        db.query(ActivityLog)
        .options(joinedload(ActivityLog.user))
        .filter(ActivityLog.entity_type == "lead", ActivityLog.entity_id == lead_id)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(LEAD_ACTIVITY_LIMIT)
        .all()
    )


@router.post("/{lead_id}/ai-score", response_model=LeadScoreResult)
async def ai_score_lead(
    lead_id: int,
    db: Session = Depends(get_db),
    provider: SearchProvider = Depends(get_search_provider),
    current_user: User = Depends(get_current_user),
):
    lead = get_owned_lead(db, lead_id, current_user.id)
    result = await score_lead(lead, provider)
    if result["source"] == "basic":
        return result

    lead.score = result["score"]
    lead.updated_at = utc_now()
    db.commit()
    log_activity(db, current_user.id, "ai_scored", lead.id, f"AI score calculated: {result['score']}/100")
    return result
