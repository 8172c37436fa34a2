"""Task endpoints."""

from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from nexacrm.api.leads import get_owned_lead
from nexacrm.core.errors import NotFoundError
from nexacrm.core.time import utc_now
from nexacrm.db.session import get_db
from nexacrm.dependencies.auth import get_current_user
from nexacrm.models.task import Task
from nexacrm.models.user import User
from nexacrm.schemas.task import TaskCreate, TaskRead, TaskStats, TaskUpdate
from nexacrm.services.tasks import apply_status, sort_by_priority, task_stats

router = APIRouter(prefix="/tasks", tags=["tasks"])

DUE_SOON_DAYS = 3


def _get_owned_task(db: Session, task_id: int, user_id: int) -> Task:
    task = db.query(Task).filter(Task.id == task_id, Task.user_id == user_id).first()
    if not task:
        raise NotFoundError("Task not found")
    return task


@router.get("", response_model=list[TaskRead])
async def list_tasks(
    status: str | None = None,
    priority: str | None = None,
    lead_id: int | None = None,
    due_soon: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Task).filter(Task.user_id == current_user.id)
    if status:
        query = query.filter(Task.status == status)
    if priority:
        query = query.filter(Task.priority == priority)
    if lead_id is not None:
        query = query.filter(Task.lead_id == lead_id)
    if due_soon:
        horizon = datetime.now(timezone.utc).date() + timedelta(days=DUE_SOON_DAYS)
        query = query.filter(Task.due_date.isnot(None), Task.due_date <= horizon, Task.status != "done")
    return sort_by_priority(query.order_by(Task.created_at.desc(), Task.id.desc()).all())


@router.get("/stats", response_model=TaskStats)
async def get_task_stats(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    tasks = db.query(Task).filter(Task.user_id == current_user.id).all()
    return task_stats(tasks, today=datetime.now(timezone.utc).date())


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(task_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _get_owned_task(db, task_id, current_user.id)


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_task(task_in: TaskCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    if task_in.lead_id is not None:
        get_owned_lead(db, task_in.lead_id, current_user.id)
    task = Task(
        user_id=current_user.id,
        lead_id=task_in.lead_id,
        title=task_in.title,
        description=task_in.description or None,
        priority=task_in.priority,
        due_date=task_in.due_date,
    )
    apply_status(task, task_in.status)
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


@router.put("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: int,
    task_in: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task = _get_owned_task(db, task_id, current_user.id)
    updates = task_in.model_dump(exclude_unset=True)
    if updates.get("lead_id") is not None:
        get_owned_lead(db, updates["lead_id"], current_user.id)

    new_status = updates.pop("status", None)
    if new_status is not None:
        apply_status(task, new_status)
    for field, value in updates.items():
        if field in ("title", "priority"):
            if value is not None:
                setattr(task, field, value)
        elif field == "description":
            task.description = value or None
        else:
            setattr(task, field, value)
    task.updated_at = utc_now()
    db.commit()
    db.refresh(task)
    return task


@router.delete("/{task_id}")
async def delete_task(task_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    task = _get_owned_task(db, task_id, current_user.id)
    db.delete(task)
    db.commit()
    return {"success": True, "id": task_id}
