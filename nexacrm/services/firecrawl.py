"""Firecrawl search/scrape client.

Every call is attempted once with a fixed timeout. Transport and HTTP
failures are logged and degrade to ``None`` so callers can fall back to
generated data or a basic score.
"""

import logging
import math
import re
import uuid
from random import Random
from typing import Any, Optional
from urllib.parse import quote

import httpx

from nexacrm.core.time import utc_now
from nexacrm.services.mock_provider import MockSearchProvider
from nexacrm.services.search_provider import (
    MAX_SEARCH_PLATFORMS,
    SearchProvider,
    post_site_for,
    site_for,
)

logger = logging.getLogger(__name__)

SEARCH_TIMEOUT = 15.0
SCRAPE_TIMEOUT = 20.0
REFRESH_SEARCH_LIMIT = 4
EXTRACT_PROMPT = (
    "Extract: full name, job title, company, bio/about, location, follower count, "
    "following count, post count, email if visible. Return as JSON."
)

_TITLE_SUFFIX = re.compile(r"\s*[-|].*$")


def _display_name(title: Optional[str]) -> str:
    if not title:
        return "Unknown"
    return _TITLE_SUFFIX.sub("", title).strip() or "Unknown"


def _initials_avatar(title: Optional[str]) -> str:
    return f"https://api.dicebear.com/7.x/initials/svg?seed={quote(title or 'U')}"


class FirecrawlProvider(SearchProvider):
    source = "firecrawl"
    enriches = True

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.firecrawl.dev/v1",
        fallback: Optional[MockSearchProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        rng: Optional[Random] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.fallback = fallback or MockSearchProvider(rng=rng)
        self.transport = transport
        self.rng = rng or self.fallback.rng

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}

    async def _post(self, path: str, payload: dict, timeout: float) -> Optional[dict]:
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
                resp = await client.post(f"{self.base_url}{path}", json=payload, headers=self._headers())
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPStatusError as exc:
            logger.warning("Firecrawl %s failed with %s: %s", path, exc.response.status_code, exc.response.text[:200])
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Firecrawl %s error: %s", path, exc)
        return None

    async def search(self, query: str, limit: int = 5) -> Optional[list[dict[str, Any]]]:
        data = await self._post(
            "/search",
            {"query": query, "limit": limit, "scrapeOptions": {"formats": ["markdown"]}},
            SEARCH_TIMEOUT,
        )
        if data is None:
            return None
        return data.get("data") or data.get("results") or []

    async def scrape(self, url: str) -> Optional[dict[str, Any]]:
        data = await self._post(
            "/scrape",
            {"url": url, "formats": ["extract"], "extract": {"prompt": EXTRACT_PROMPT}},
            SCRAPE_TIMEOUT,
        )
        if not isinstance(data, dict):
            return None
        nested = data.get("data") if isinstance(data.get("data"), dict) else {}
        extract = data.get("extract") or nested.get("extract")
        # Only structured extractions are usable downstream
        return extract if isinstance(extract, dict) and extract else None

    def _profile_from_result(self, result: dict, platform: str) -> dict[str, Any]:
        url = result.get("url") or ""
        markdown = result.get("markdown") or ""
        handle = url.rstrip("/").split("/")[-1].split("?")[0] if url else ""
        return {
            "id": str(uuid.uuid4()),
            "platform": platform,
            "name": _display_name(result.get("title")),
            "username": f"@{handle}" if handle else "",
            "bio": result.get("description") or markdown[:200],
            "profile_url": url,
            "source_url": url,
            "markdown_preview": markdown[:500] or None,
            "relevance_score": self.rng.randint(60, 95),
            "avatar": _initials_avatar(result.get("title")),
            "verified": False,
            "followers": None,
            "source": self.source,
        }

    def _post_from_result(self, result: dict, platform: str) -> dict[str, Any]:
        markdown = result.get("markdown") or ""
        return {
            "platform": platform,
            "author": {
                "name": _display_name(result.get("title")),
                "username": "",
                "avatar": _initials_avatar(result.get("title")),
            },
            "content": result.get("description") or markdown[:300],
            "url": result.get("url") or "",
            "engagement": {"likes": 0, "comments": 0, "shares": 0},
            "sentiment": "neutral",
            "found_at": utc_now(),
        }

    async def find_profiles(self, keyword, industry, platforms, limit):
        per_platform = math.ceil(limit / len(platforms))
        profiles: list[dict[str, Any]] = []
        for platform in platforms[:MAX_SEARCH_PLATFORMS]:
            terms = f"{keyword} {industry}" if industry else keyword
            results = await self.search(f"{terms} site:{site_for(platform)}", per_platform)
            for result in results or []:
                profiles.append(self._profile_from_result(result, platform))

        while len(profiles) < limit:
            profiles.append(self.fallback.profile(keyword, self.rng.choice(platforms)))

        profiles.sort(key=lambda p: p["relevance_score"], reverse=True)
        return profiles[:limit], self.source

    async def find_posts(self, keyword, platforms, per_platform=None):
        posts: list[dict[str, Any]] = []
        for platform in platforms[:MAX_SEARCH_PLATFORMS]:
            results = await self.search(f"{keyword} site:{post_site_for(platform)}", per_platform or REFRESH_SEARCH_LIMIT)
            for result in results or []:
                posts.append(self._post_from_result(result, platform))

        if not posts:
            logger.info("Firecrawl returned no posts for %r, using generated posts", keyword)
            return await self.fallback.find_posts(keyword, platforms, per_platform)
        return posts, self.source
