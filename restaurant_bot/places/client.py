from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from .address import clean_address
from .cache import geocode_cache_get, geocode_cache_set
from .config import DEFAULT_PLACES_CONFIG, PlacesConfig
from .links import directions_url, listing_url
from .models import Coordinates, Restaurant, RestaurantDetails
from .ranking import rank_restaurants

logger = logging.getLogger(__name__)

_DETAIL_FIELDS = "name,formatted_address,rating,user_ratings_total,opening_hours,geometry"
_REDIRECT_CODES = (301, 302, 303, 307, 308)


class PlacesError(Exception):
    """The places provider could not serve a nearby-search or details call."""


def _parse_location(place: dict[str, Any]) -> Coordinates | None:
    loc = (place.get("geometry") or {}).get("location") or {}
    if "lat" not in loc or "lng" not in loc:
        return None
    return Coordinates(lat=loc["lat"], lng=loc["lng"])


class PlacesGateway:
    """Async wrapper over the Google Geocoding and Places web services."""

    def __init__(
        self,
        config: PlacesConfig = DEFAULT_PLACES_CONFIG,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._http = http_client or httpx.AsyncClient(timeout=config.timeout)

    async def aclose(self) -> None:
        await self._http.aclose()

    def _url(self, path: str) -> str:
        return f"{self._config.base_url.rstrip('/')}/{path}"

    async def _get_json(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        query = {**params, "key": self._config.api_key, "language": self._config.language}
        resp = await self._http.get(self._url(path), params=query)
        resp.raise_for_status()
        return resp.json()

    # ── Geocoding ────────────────────────────────────────────────────────

    async def geocode(self, address: str) -> Coordinates | None:
        """Return the best match for *address*, or ``None`` when nothing usable came back."""
        address = address.strip()
        if not address:
            return None

        cached = geocode_cache_get(address, ttl=self._config.geocode_cache_ttl)
        if cached is not None:
            return cached

        try:
            data = await self._get_json("geocode/json", {"address": address})
        except (httpx.HTTPError, ValueError):
            logger.warning("Geocoding request failed for %r", address, exc_info=True)
            return None

        status = data.get("status")
        results = data.get("results") or []
        if status != "OK" or not results:
            logger.info("No geocoding result for %r (status=%s)", address, status)
            return None

        coords = _parse_location(results[0])
        if coords is None:
            logger.warning("Geocoding result for %r has no location", address)
            return None

        geocode_cache_set(address, coords)
        return coords

    # ── Nearby search ────────────────────────────────────────────────────

    async def search_nearby(self, coordinates: Coordinates, radius: int) -> list[Restaurant]:
        """Restaurants within *radius* meters, ranked by popularity."""
        params = {
            "location": f"{coordinates.lat},{coordinates.lng}",
            "radius": radius,
            "type": self._config.place_type,
        }
        try:
            data = await self._get_json("place/nearbysearch/json", params)
        except (httpx.HTTPError, ValueError) as exc:
            raise PlacesError(f"Nearby search failed: {exc}") from exc

        status = data.get("status")
        if status == "ZERO_RESULTS":
            return []
        if status != "OK":
            raise PlacesError(
                f"Nearby search returned {status}: {data.get('error_message', '')}".strip()
            )

        places = [p for p in data.get("results") or [] if p.get("place_id")]
        restaurants = await asyncio.gather(*(self._to_restaurant(p) for p in places))
        return rank_restaurants(list(restaurants))

    async def _to_restaurant(self, place: dict[str, Any]) -> Restaurant:
        place_id = place["place_id"]
        location = _parse_location(place)
        vicinity = place.get("vicinity") or ""

        photos = place.get("photos") or []
        photo_reference = photos[0].get("photo_reference") if photos else None
        image_url = await self.resolve_photo_url(photo_reference) if photo_reference else ""

        return Restaurant(
            name=place.get("name") or "",
            address=clean_address(vicinity) or vicinity,
            place_id=place_id,
            rating=place.get("rating"),
            rating_count=place.get("user_ratings_total"),
            image_url=image_url,
            url=listing_url(place_id),
            map_url=directions_url(location, place_id) if location else listing_url(place_id),
            location=location,
        )

    async def resolve_photo_url(self, photo_reference: str) -> str:
        """Follow the photo endpoint's redirect by hand. Any failure yields ``""``."""
        params = {
            "maxwidth": self._config.photo_max_width,
            "photoreference": photo_reference,
            "key": self._config.api_key,
        }
        try:
            resp = await self._http.get(
                self._url("place/photo"), params=params, follow_redirects=False,
            )
        except httpx.HTTPError:
            logger.warning("Photo lookup failed", exc_info=True)
            return ""

        location = resp.headers.get("location")
        if resp.status_code in _REDIRECT_CODES and location:
            return location

        logger.warning("Photo lookup returned %s without a redirect", resp.status_code)
        return ""

    # ── Details ──────────────────────────────────────────────────────────

    async def get_details(self, place_id: str) -> RestaurantDetails:
        try:
            data = await self._get_json(
                "place/details/json", {"place_id": place_id, "fields": _DETAIL_FIELDS},
            )
        except (httpx.HTTPError, ValueError) as exc:
            raise PlacesError(f"Place details failed for {place_id}: {exc}") from exc

        result = data.get("result")
        if data.get("status") != "OK" or not result:
            raise PlacesError(f"Place details returned {data.get('status')} for {place_id}")

        opening_hours = result.get("opening_hours") or {}
        return RestaurantDetails(
            name=result.get("name") or "",
            formatted_address=clean_address(result.get("formatted_address") or ""),
            rating=result.get("rating"),
            rating_count=result.get("user_ratings_total"),
            weekday_text=opening_hours.get("weekday_text") or [],
            location=_parse_location(result),
        )
