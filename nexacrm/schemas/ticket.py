"""Support ticket schemas."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

TicketStatus = Literal["open", "in_progress", "resolved", "closed"]
TicketPriority = Literal["low", "medium", "high", "urgent"]


class TicketCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    priority: TicketPriority = "medium"
    category: str = "general"


class TicketUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    category: Optional[str] = None
    assigned_to: Optional[int] = None


class TicketRead(BaseModel):
    id: int
    user_id: int
    user_name: Optional[str] = None
    assigned_to: Optional[int] = None
    assigned_name: Optional[str] = None
    title: str
    description: Optional[str] = None
    status: TicketStatus
    priority: TicketPriority
    category: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TicketMessageCreate(BaseModel):
    message: str = Field(min_length=1)
    is_internal: bool = False


class TicketMessageRead(BaseModel):
    id: int
    ticket_id: int
    user_id: int
    user_name: Optional[str] = None
    user_role: Optional[str] = None
    message: str
    is_internal: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TicketDetail(TicketRead):
    messages: list[TicketMessageRead] = Field(default_factory=list)


class TicketStats(BaseModel):
    total: int
    open: int
    in_progress: int
    resolved: int
    closed: int
