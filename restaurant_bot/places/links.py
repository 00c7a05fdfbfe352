from __future__ import annotations

from urllib.parse import urlencode

from .models import Coordinates

_MAPS_BASE = "https://www.google.com/maps"


def listing_url(place_id: str) -> str:
    return f"{_MAPS_BASE}/place/?q=place_id:{place_id}"


def directions_url(location: Coordinates, place_id: str | None = None) -> str:
    params = {"api": "1", "destination": f"{location.lat},{location.lng}"}
    if place_id:
        params["destination_place_id"] = place_id
    return f"{_MAPS_BASE}/dir/?{urlencode(params)}"


def search_url(location: Coordinates, place_id: str | None = None) -> str:
    params = {"api": "1", "query": f"{location.lat},{location.lng}"}
    if place_id:
        params["query_place_id"] = place_id
    return f"{_MAPS_BASE}/search/?{urlencode(params)}"


def uber_url(location: Coordinates, nickname: str = "") -> str:
    """Uber universal link that opens the app with the drop-off preset."""
    params = {
        "action": "setPickup",
        "pickup": "my_location",
        "dropoff[latitude]": location.lat,
        "dropoff[longitude]": location.lng,
    }
    if nickname:
        params["dropoff[nickname]"] = nickname
    return f"https://m.uber.com/ul/?{urlencode(params)}"
