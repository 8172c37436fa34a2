"""Admin console: instance statistics, user management and the activity feed."""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from nexacrm.core.errors import ConflictError, ForbiddenError, NotFoundError
from nexacrm.core.security import get_password_hash
from nexacrm.db.session import get_db
from nexacrm.dependencies.auth import get_current_admin
from nexacrm.models.file import File
from nexacrm.models.lead import Lead
from nexacrm.models.task import Task
from nexacrm.models.user import User
from nexacrm.schemas.activity import ActivityRead
from nexacrm.schemas.admin_reporting import AdminStats
from nexacrm.schemas.user import AdminUserCreate, AdminUserRead, AdminUserUpdate
from nexacrm.services.accounts import create_user, get_user_by_email, is_owner_protected
from nexacrm.services.admin_reporting import count_by_user, get_admin_stats, recent_activity
from nexacrm.services.file_storage import remove_blob

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return user


def _with_counts(user: User, lead_counts: dict[int, int], task_counts: dict[int, int]) -> AdminUserRead:
    read = AdminUserRead.model_validate(user)
    read.lead_count = lead_counts.get(user.id, 0)
    read.task_count = task_counts.get(user.id, 0)
    return read


@router.get("/stats", response_model=AdminStats)
async def admin_stats(db: Session = Depends(get_db), current_admin: User = Depends(get_current_admin)):
    return get_admin_stats(db)


@router.get("/users", response_model=list[AdminUserRead])
async def list_users(db: Session = Depends(get_db), current_admin: User = Depends(get_current_admin)):
    lead_counts = count_by_user(db, Lead)
    task_counts = count_by_user(db, Task)
    users = db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()
    return [_with_counts(user, lead_counts, task_counts) for user in users]


@router.post("/users", response_model=AdminUserRead, status_code=status.HTTP_201_CREATED)
async def create_user_account(
    user_in: AdminUserCreate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    user = create_user(
        db,
        name=user_in.name,
        email=user_in.email,
        password=user_in.password,
        role=user_in.role,
        company=user_in.company,
        phone=user_in.phone,
    )
    logger.info("Admin %s created user %s", current_admin.id, user.id)
    return _with_counts(user, {}, {})


@router.put("/users/{user_id}", response_model=AdminUserRead)
async def update_user(
    user_id: int,
    update: AdminUserUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    user = _get_user(db, user_id)
    is_self = user.id == current_admin.id
    protected = is_owner_protected(user)
    if protected and not is_self:
        raise ForbiddenError("The owner account can only be changed by its owner")

    changes = update.model_dump(exclude_unset=True)
    role = changes.pop("role", None)
    if role is not None and role != user.role and not protected:
        if is_self:
            raise ForbiddenError("Cannot change your own role")
        user.role = role

    email = changes.pop("email", None)
    if email and email != user.email:
        existing = get_user_by_email(db, email)
        if existing and existing.id != user.id:
            raise ConflictError("Email already registered")
        user.email = email

    password = changes.pop("password", None)
    if password:
        user.hashed_password = get_password_hash(password)

    if changes.get("name"):
        user.name = changes["name"]
    for field in ("company", "phone"):
        if field in changes:
            setattr(user, field, changes[field] or None)

    db.commit()
    db.refresh(user)
    logger.info("Admin %s updated user %s", current_admin.id, user.id)
    return _with_counts(user, count_by_user(db, Lead), count_by_user(db, Task))


@router.delete("/users/{user_id}")
async def delete_user(user_id: int, db: Session = Depends(get_db), current_admin: User = Depends(get_current_admin)):
    user = _get_user(db, user_id)
    if user.id == current_admin.id:
        raise ForbiddenError("Cannot delete your own account")
    if is_owner_protected(user):
        raise ForbiddenError("The owner account cannot be deleted")

    stored_names = [name for (name,) in db.query(File.stored_name).filter(File.user_id == user.id).all()]
    db.delete(user)
    db.commit()
    for stored_name in stored_names:
        remove_blob(stored_name)
    logger.info("Admin %s deleted user %s", current_admin.id, user_id)
    return {"success": True, "id": user_id}


@router.get("/activity", response_model=list[ActivityRead])
async def list_activity(
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    user_id: int | None = None,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return recent_activity(db, limit, offset=offset, user_id=user_id)
