"""Persist provider posts as monitor results."""

from sqlalchemy import func
from sqlalchemy.orm import Session

from nexacrm.models.social import SocialMonitor, SocialResult
from nexacrm.services.search_provider import SearchProvider

INITIAL_POSTS_PER_PLATFORM = 6


async def collect_results(db: Session, monitor: SocialMonitor, provider: SearchProvider, per_platform: int | None = None) -> tuple[int, str]:
    posts, source = await provider.find_posts(monitor.keyword, list(monitor.platforms or []), per_platform)
    for post in posts:
        db.add(SocialResult(monitor_id=monitor.id, **post))
    db.flush()
    monitor.result_count = db.query(func.count(SocialResult.id)).filter(SocialResult.monitor_id == monitor.id).scalar()
    db.commit()
    db.refresh(monitor)
    return len(posts), source
