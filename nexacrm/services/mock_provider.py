"""Generated prospects and posts used when no search provider is configured."""

import math
import uuid
from datetime import timedelta
from random import Random
from typing import Any, Optional

from nexacrm.core.errors import ConfigError
from nexacrm.core.time import utc_now
from nexacrm.services.search_provider import SearchProvider

FIRST_NAMES = [
    "Alex", "Sarah", "Michael", "Emma", "David", "Jessica", "Chris",
    "Amanda", "Daniel", "Lisa", "James", "Maria", "Robert", "Jennifer",
]
LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia",
    "Miller", "Davis", "Wilson", "Anderson", "Taylor", "Thomas",
]
COMPANIES = ["TechCorp", "InnovateCo", "StartupHub", "GrowthLabs", "DigitalEdge", "FutureTech", "CloudBase", "DataDrive"]
POSITIONS = ["CEO", "Founder", "CTO", "VP of Sales", "Marketing Director", "Business Dev Manager", "Product Manager"]
LOCATIONS = ["Budapest", "London", "New York", "Berlin", "Sydney", "Singapore"]
# Weighted towards positive mentions
SENTIMENTS = ["positive", "positive", "positive", "neutral", "negative"]
POST_TEMPLATES = [
    "Just saw incredible results with {keyword}! Conversion rates up 40%.",
    "{keyword} is completely changing how we approach sales. Who else?",
    "Looking for experts in {keyword}. DM if interested!",
    "Hot take: {keyword} is the most underutilized strategy in B2B right now.",
    "Our team is all-in on {keyword}. AMA!",
]

REFRESH_POSTS_RANGE = (2, 5)


class MockSearchProvider(SearchProvider):
    source = "mock"
    enriches = False

    def __init__(self, rng: Optional[Random] = None):
        self.rng = rng or Random()

    async def search(self, query: str, limit: int = 5) -> Optional[list[dict[str, Any]]]:
        return None

    async def scrape(self, url: str) -> Optional[dict[str, Any]]:
        raise ConfigError("FIRECRAWL_API_KEY is not configured")

    def profile(self, keyword: str, platform: str) -> dict[str, Any]:
        rng = self.rng
        first, last = rng.choice(FIRST_NAMES), rng.choice(LAST_NAMES)
        company, position = rng.choice(COMPANIES), rng.choice(POSITIONS)
        username = f"{first.lower()}{last.lower()}{rng.randint(1, 999)}"
        return {
            "id": str(uuid.uuid4()),
            "platform": platform,
            "name": f"{first} {last}",
            "username": f"@{username}",
            "position": position,
            "company": company,
            "bio": f"{position} @ {company}. Passionate about {keyword}.",
            "followers": rng.randint(200, 80000),
            "following": rng.randint(50, 5000),
            "posts": rng.randint(20, 3000),
            "avatar": f"https://api.dicebear.com/7.x/avataaars/svg?seed={username}",
            "profile_url": f"https://{platform}.com/{username}",
            "email": f"{first.lower()}.{last.lower()}@{company.lower()}.com",
            "location": rng.choice(LOCATIONS),
            "verified": rng.random() > 0.8,
            "relevance_score": rng.randint(55, 99),
            "source": self.source,
        }

    def post(self, keyword: str, platform: str) -> dict[str, Any]:
        rng = self.rng
        first = rng.choice(FIRST_NAMES)
        seed = f"{first}{rng.randint(1, 9999)}"
        return {
            "platform": platform,
            "author": {
                "name": f"{first} {rng.choice(LAST_NAMES)}",
                "username": f"@{first.lower()}{rng.randint(10, 999)}",
                "avatar": f"https://api.dicebear.com/7.x/avataaars/svg?seed={seed}",
            },
            "content": rng.choice(POST_TEMPLATES).format(keyword=keyword),
            "url": f"https://{platform}.com/post/{uuid.uuid4().hex[:10]}",
            "engagement": {
                "likes": rng.randint(0, 8000),
                "comments": rng.randint(0, 800),
                "shares": rng.randint(0, 2000),
            },
            "sentiment": rng.choice(SENTIMENTS),
            "found_at": utc_now() - timedelta(seconds=rng.randint(0, 7 * 86400)),
        }

    async def find_profiles(self, keyword, industry, platforms, limit):
        per_platform = math.ceil(limit / len(platforms))
        profiles = [self.profile(keyword, platform) for platform in platforms for _ in range(per_platform)]
        profiles.sort(key=lambda p: p["relevance_score"], reverse=True)
        return profiles[:limit], self.source

    async def find_posts(self, keyword, platforms, per_platform=None):
        posts = []
        for platform in platforms:
            count = per_platform if per_platform is not None else self.rng.randint(*REFRESH_POSTS_RANGE)
            posts.extend(self.post(keyword, platform) for _ in range(count))
        return posts, self.source
