"""Prospect finder, profile scraping and social monitor endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from nexacrm.core.errors import ExtractionError, NotFoundError
from nexacrm.db.session import get_db
from nexacrm.dependencies.auth import get_current_user
from nexacrm.dependencies.providers import get_search_provider
from nexacrm.models.social import SocialMonitor, SocialResult
from nexacrm.models.user import User
from nexacrm.schemas.social import (
    MonitorCreate,
    MonitorRead,
    ProspectSearchRequest,
    ProspectSearchResult,
    RefreshResult,
    ScrapedProfile,
    ScrapeProfileRequest,
    SocialResultRead,
)
from nexacrm.services.search_provider import SearchProvider, detect_platform
from nexacrm.services.social_monitoring import INITIAL_POSTS_PER_PLATFORM, collect_results

router = APIRouter(prefix="/social", tags=["social"])

MAX_RESULTS_PER_PAGE = 100


def _get_owned_monitor(db: Session, monitor_id: int, user_id: int) -> SocialMonitor:
    monitor = db.query(SocialMonitor).filter(SocialMonitor.id == monitor_id, SocialMonitor.user_id == user_id).first()
    if not monitor:
        raise NotFoundError("Monitor not found")
    return monitor


@router.post("/prospect-finder", response_model=ProspectSearchResult)
async def prospect_finder(
    search_in: ProspectSearchRequest,
    provider: SearchProvider = Depends(get_search_provider),
    current_user: User = Depends(get_current_user),
):
    results, source = await provider.find_profiles(
        search_in.keyword, search_in.industry, search_in.platforms, search_in.limit
    )
    return {"results": results, "source": source}


@router.post("/scrape-profile", response_model=ScrapedProfile)
async def scrape_profile(
    scrape_in: ScrapeProfileRequest,
    provider: SearchProvider = Depends(get_search_provider),
    current_user: User = Depends(get_current_user),
):
    extracted = await provider.scrape(scrape_in.url)
    if not extracted:
        raise ExtractionError("Could not extract any content from the page")
    return {
        "name": extracted.get("full_name") or extracted.get("name"),
        "position": extracted.get("job_title") or extracted.get("title"),
        "company": extracted.get("company"),
        "bio": extracted.get("bio") or extracted.get("about"),
        "location": extracted.get("location"),
        "followers": extracted.get("follower_count") or extracted.get("followers"),
        "email": extracted.get("email"),
        "platform": detect_platform(scrape_in.url),
        "profile_url": scrape_in.url,
        "raw": extracted,
    }


@router.get("/monitors", response_model=list[MonitorRead])
async def list_monitors(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return (
        db.query(SocialMonitor)
        .filter(SocialMonitor.user_id == current_user.id)
        .order_by(SocialMonitor.created_at.desc(), SocialMonitor.id.desc())
        .all()
    )


@router.post("/monitors", response_model=MonitorRead, status_code=status.HTTP_201_CREATED)
async def create_monitor(
    monitor_in: MonitorCreate,
    db: Session = Depends(get_db),
    provider: SearchProvider = Depends(get_search_provider),
    current_user: User = Depends(get_current_user),
):
    monitor = SocialMonitor(
        user_id=current_user.id,
        keyword=monitor_in.keyword,
        platforms=monitor_in.platforms,
        active=True,
    )
    db.add(monitor)
    db.commit()
    db.refresh(monitor)
    await collect_results(db, monitor, provider, per_platform=INITIAL_POSTS_PER_PLATFORM)
    return monitor


@router.get("/monitors/{monitor_id}/results", response_model=list[SocialResultRead])
async def list_monitor_results(
    monitor_id: int,
    platform: str | None = None,
    sentiment: str | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _get_owned_monitor(db, monitor_id, current_user.id)
    query = db.query(SocialResult).filter(SocialResult.monitor_id == monitor_id)
    if platform:
        query = query.filter(SocialResult.platform == platform)
    if sentiment:
        query = query.filter(SocialResult.sentiment == sentiment)
    return query.order_by(SocialResult.found_at.desc(), SocialResult.id.desc()).limit(MAX_RESULTS_PER_PAGE).all()


@router.post("/monitors/{monitor_id}/refresh", response_model=RefreshResult)
async def refresh_monitor(
    monitor_id: int,
    db: Session = Depends(get_db),
    provider: SearchProvider = Depends(get_search_provider),
    current_user: User = Depends(get_current_user),
):
    monitor = _get_owned_monitor(db, monitor_id, current_user.id)
    new_results, source = await collect_results(db, monitor, provider)
    return {"new_results": new_results, "source": source}


@router.delete("/monitors/{monitor_id}")
async def delete_monitor(monitor_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    monitor = _get_owned_monitor(db, monitor_id, current_user.id)
    db.delete(monitor)
    db.commit()
    return {"success": True, "id": monitor_id}
