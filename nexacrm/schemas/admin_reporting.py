"""Schemas for the admin console statistics."""

from pydantic import BaseModel

from nexacrm.schemas.activity import ActivityRead
from nexacrm.schemas.lead import StatusCount


class UserTaskCount(BaseModel):
    user_id: int
    name: str
    count: int


class AdminStats(BaseModel):
    users: int
    leads: int
    tasks: int
    notes: int
    files: int
    tickets: int
    open_tickets: int
    monitors: int
    leads_per_status: list[StatusCount]
    tasks_per_user: list[UserTaskCount]
    recent_activity: list[ActivityRead]
