"""Capability interface shared by the real search/scrape provider and its fallback.

Routes depend on a ``SearchProvider`` and never branch on which implementation
they received. ``enriches`` tells the lead scorer whether search and scrape
results are real and worth spending calls on.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

# Platforms searched per request when a real provider is in use
MAX_SEARCH_PLATFORMS = 3

PLATFORM_SITES = {
    "linkedin": "linkedin.com/in",
    "twitter": "twitter.com",
    "instagram": "instagram.com",
    "facebook": "facebook.com",
    "tiktok": "tiktok.com",
}

# Posts live on the bare domains, profiles under the paths above
POST_SITES = {**PLATFORM_SITES, "linkedin": "linkedin.com"}

_PLATFORM_MARKERS = [
    ("linkedin", ("linkedin",)),
    ("twitter", ("twitter", "x.com")),
    ("instagram", ("instagram",)),
    ("facebook", ("facebook",)),
    ("tiktok", ("tiktok",)),
]


def site_for(platform: str) -> str:
    return PLATFORM_SITES.get(platform, platform)


def post_site_for(platform: str) -> str:
    return POST_SITES.get(platform, platform)


def detect_platform(url: str) -> str:
    lowered = url.lower()
    for platform, markers in _PLATFORM_MARKERS:
        if any(marker in lowered for marker in markers):
            return platform
    return "web"


class SearchProvider(ABC):
    source: str = ""
    enriches: bool = False

    @abstractmethod
    async def search(self, query: str, limit: int = 5) -> Optional[list[dict[str, Any]]]:
        """Web search; ``None`` when the provider has nothing to offer."""

    @abstractmethod
    async def scrape(self, url: str) -> Optional[dict[str, Any]]:
        """Structured extraction of a single page."""

    @abstractmethod
    async def find_profiles(
        self, keyword: str, industry: Optional[str], platforms: list[str], limit: int
    ) -> tuple[list[dict[str, Any]], str]:
        """Return ``(profiles, source)`` sorted by relevance, at most ``limit`` long."""

    @abstractmethod
    async def find_posts(
        self, keyword: str, platforms: list[str], per_platform: Optional[int] = None
    ) -> tuple[list[dict[str, Any]], str]:
        """Return ``(posts, source)`` mentioning ``keyword`` on the given platforms."""
