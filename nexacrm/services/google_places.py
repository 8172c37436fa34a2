"""Google Places text search used to discover business leads."""

import asyncio
import logging
from typing import Any, Optional

import httpx

from nexacrm.core.errors import ConfigError, UpstreamError, ValidationError

logger = logging.getLogger(__name__)

PLACES_TIMEOUT = 15.0
MAX_PLACES = 10
MAX_TYPES = 3
GENERIC_TYPES = {"point_of_interest", "establishment"}
DETAIL_FIELDS = "formatted_phone_number,website,opening_hours"


class GooglePlacesClient:
    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://maps.googleapis.com/maps/api/place",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.transport = transport

    async def _details(self, client: httpx.AsyncClient, place_id: str) -> dict[str, Any]:
        try:
            resp = await client.get(
                f"{self.base_url}/details/json",
                params={"place_id": place_id, "fields": DETAIL_FIELDS, "key": self.api_key},
            )
            resp.raise_for_status()
            return resp.json().get("result") or {}
        except (httpx.HTTPError, ValueError) as exc:
            logger.debug("Place details lookup failed for %s: %s", place_id, exc)
            return {}

    @staticmethod
    def _normalize(place: dict, details: dict) -> dict[str, Any]:
        types = [t for t in place.get("types") or [] if t not in GENERIC_TYPES]
        return {
            "id": place["place_id"],
            "name": place.get("name"),
            "address": place.get("formatted_address"),
            "phone": details.get("formatted_phone_number"),
            "website": details.get("website"),
            "rating": place.get("rating"),
            "user_ratings_total": place.get("user_ratings_total") or 0,
            "types": types[:MAX_TYPES],
            "place_id": place["place_id"],
            "location": (place.get("geometry") or {}).get("location"),
            "business_status": place.get("business_status"),
        }

    async def search(
        self,
        query: Optional[str],
        location: Optional[str] = None,
        radius: int = 5000,
        place_type: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        if not self.api_key:
            raise ConfigError("GOOGLE_MAPS_API_KEY is not configured")
        if not query:
            raise ValidationError("Search query is required")

        params: dict[str, Any] = {
            "query": f"{query} in {location}" if location else query,
            "radius": radius,
            "key": self.api_key,
        }
        if place_type:
            params["type"] = place_type

        async with httpx.AsyncClient(timeout=PLACES_TIMEOUT, transport=self.transport) as client:
            try:
                resp = await client.get(f"{self.base_url}/textsearch/json", params=params)
                resp.raise_for_status()
                data = resp.json()
            except (httpx.HTTPError, ValueError) as exc:
                logger.warning("Places text search failed: %s", exc)
                raise UpstreamError(f"Google Maps search failed: {exc}") from exc

            status = data.get("status")
            if status == "REQUEST_DENIED":
                raise ConfigError("Google Maps API key is invalid or the Places API is not enabled")
            if status == "ZERO_RESULTS":
                return []
            if status != "OK":
                raise UpstreamError(f"Google Maps search failed: {status}")

            places = [p for p in data.get("results") or [] if p.get("place_id")][:MAX_PLACES]
            details = await asyncio.gather(*(self._details(client, p["place_id"]) for p in places))

        return [self._normalize(place, detail) for place, detail in zip(places, details)]
