"""Aggregate counts for the admin console."""

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from nexacrm.models.activity_log import ActivityLog
from nexacrm.models.file import File
from nexacrm.models.lead import Lead
from nexacrm.models.note import Note
from nexacrm.models.social import SocialMonitor
from nexacrm.models.task import Task
from nexacrm.models.ticket import Ticket
from nexacrm.models.user import User

TOP_USERS_BY_TASKS = 10
RECENT_ACTIVITY = 20


def count_by_user(db: Session, model) -> dict[int, int]:
    rows = db.query(model.user_id, func.count(model.id)).group_by(model.user_id).all()
    return {user_id: count for user_id, count in rows}


def recent_activity(db: Session, limit: int, offset: int = 0, user_id: int | None = None) -> list[ActivityLog]:
    query = db.query(ActivityLog).options(joinedload(ActivityLog.user))
    if user_id is not None:
        query = query.filter(ActivityLog.user_id == user_id)
    return query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc()).offset(offset).limit(limit).all()


def get_admin_stats(db: Session) -> dict:
    def total(model) -> int:
        return db.query(func.count(model.id)).scalar() or 0

    status_rows = db.query(Lead.status, func.count(Lead.id)).group_by(Lead.status).all()

    task_counts = count_by_user(db, Task)
    users = db.query(User.id, User.name).all()
    tasks_per_user = sorted(
        ({"user_id": uid, "name": name, "count": task_counts.get(uid, 0)} for uid, name in users),
        key=lambda row: row["count"],
        reverse=True,
    )[:TOP_USERS_BY_TASKS]

    return {
        "users": total(User),
        "leads": total(Lead),
        "tasks": total(Task),
        "notes": total(Note),
        "files": total(File),
        "tickets": total(Ticket),
        "open_tickets": db.query(func.count(Ticket.id)).filter(Ticket.status == "open").scalar() or 0,
        "monitors": total(SocialMonitor),
        "leads_per_status": [{"status": status, "count": count} for status, count in status_rows],
        "tasks_per_user": tasks_per_user,
        "recent_activity": recent_activity(db, RECENT_ACTIVITY),
    }
