"""Lead schemas for create, update, read and the lead-level reports."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

AllowedLeadStatus = Literal["new", "contacted", "qualified", "proposal", "won", "lost"]


class LeadBase(BaseModel):
    name: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    status: AllowedLeadStatus = "new"
    source: str = "manual"
    score: int = 0
    social_profiles: dict[str, str] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    address: Optional[str] = None
    website: Optional[str] = None


class LeadCreate(LeadBase):
    """Schema for lead creation requests."""

    place_id: Optional[str] = None


class LeadUpdate(BaseModel):
    """Schema for lead updates with partial fields."""

    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    status: Optional[AllowedLeadStatus] = None
    source: Optional[str] = None
    score: Optional[int] = None
    social_profiles: Optional[dict[str, str]] = None
    tags: Optional[list[str]] = None
    address: Optional[str] = None
    website: Optional[str] = None


class LeadRead(LeadBase):
    """Schema for lead responses."""

    id: int
    user_id: int
    place_id: Optional[str] = None
    notes_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StatusCount(BaseModel):
    status: str
    count: int


class SourceCount(BaseModel):
    source: str
    count: int


class LeadStats(BaseModel):
    total: int
    by_status: list[StatusCount]
    by_source: list[SourceCount]
    recent: list[LeadRead]


class ScoreBreakdown(BaseModel):
    web_presence: int = 0
    contact_info: int = 0
    social_profiles: int = 0
    online_mentions: int = 0
    website_content: int = 0


class Mention(BaseModel):
    url: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None


class LeadScoreResult(BaseModel):
    score: int
    breakdown: ScoreBreakdown
    mentions: list[Mention] = Field(default_factory=list)
    source: Literal["basic", "firecrawl"]
    summary: Optional[str] = None
    website_summary: Optional[dict] = None


class PlaceSearchRequest(BaseModel):
    query: Optional[str] = None
    location: Optional[str] = None
    radius: int = Field(default=5000, gt=0, le=50000)
    type: Optional[str] = None


class PlaceResult(BaseModel):
    id: str
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    rating: Optional[float] = None
    user_ratings_total: int = 0
    types: list[str] = Field(default_factory=list)
    place_id: str
    location: Optional[dict] = None
    business_status: Optional[str] = None
