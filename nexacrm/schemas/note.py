"""Note schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class NoteCreate(BaseModel):
    """Schema for creating a note."""

    title: str = Field(min_length=1)
    content: str = ""
    color: str = "#ffffff"
    pinned: bool = False
    lead_id: Optional[int] = None


class NoteUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = None
    color: Optional[str] = None
    pinned: Optional[bool] = None
    lead_id: Optional[int] = None


class NoteRead(BaseModel):
    """Schema for reading a note."""

    id: int
    user_id: int
    lead_id: Optional[int] = None
    lead_name: Optional[str] = None
    title: str
    content: str
    color: str
    pinned: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
