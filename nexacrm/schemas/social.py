"""Schemas for social monitors, the prospect finder and profile scraping."""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Sentiment = Literal["positive", "neutral", "negative"]

DEFAULT_MONITOR_PLATFORMS = ["twitter", "linkedin", "instagram"]
DEFAULT_PROSPECT_PLATFORMS = ["twitter", "linkedin", "instagram", "facebook"]


class MonitorCreate(BaseModel):
    keyword: str = Field(min_length=1)
    platforms: list[str] = Field(default_factory=lambda: list(DEFAULT_MONITOR_PLATFORMS), min_length=1)


class MonitorRead(BaseModel):
    id: int
    user_id: int
    keyword: str
    platforms: list[str]
    active: bool
    result_count: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SocialResultRead(BaseModel):
    id: int
    monitor_id: int
    platform: str
    author: dict[str, Any]
    content: str
    url: Optional[str] = None
    engagement: dict[str, int]
    sentiment: Sentiment
    found_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RefreshResult(BaseModel):
    new_results: int
    source: str


class ProspectSearchRequest(BaseModel):
    keyword: str = Field(min_length=1)
    industry: Optional[str] = None
    platforms: list[str] = Field(default_factory=lambda: list(DEFAULT_PROSPECT_PLATFORMS), min_length=1)
    limit: int = Field(default=12, ge=1, le=50)


class ProspectSearchResult(BaseModel):
    results: list[dict[str, Any]]
    source: str


class ScrapeProfileRequest(BaseModel):
    url: str = Field(min_length=1)


class ScrapedProfile(BaseModel):
    name: Optional[str] = None
    position: Optional[str] = None
    company: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    followers: Optional[Any] = None
    email: Optional[str] = None
    platform: str
    profile_url: str
    raw: dict[str, Any]
