"""Select the external provider implementations from configuration."""

from fastapi import Depends

from nexacrm.core.settings import Settings, get_settings
from nexacrm.services.firecrawl import FirecrawlProvider
from nexacrm.services.google_places import GooglePlacesClient
from nexacrm.services.mock_provider import MockSearchProvider
from nexacrm.services.search_provider import SearchProvider


def get_search_provider(settings: Settings = Depends(get_settings)) -> SearchProvider:
    fallback = MockSearchProvider()
    if settings.firecrawl_api_key:
        return FirecrawlProvider(
            api_key=settings.firecrawl_api_key,
            base_url=settings.firecrawl_base_url,
            fallback=fallback,
        )
    return fallback


def get_places_client(settings: Settings = Depends(get_settings)) -> GooglePlacesClient:
    return GooglePlacesClient(api_key=settings.google_maps_api_key, base_url=settings.google_maps_base_url)
