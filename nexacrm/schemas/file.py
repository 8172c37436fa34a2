from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class FileRead(BaseModel):
    id: int
    user_id: int
    lead_id: Optional[int] = None
    lead_name: Optional[str] = None
    original_name: str
    stored_name: str
    mime_type: Optional[str] = None
    size: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FileUpdate(BaseModel):
    lead_id: Optional[int] = None
