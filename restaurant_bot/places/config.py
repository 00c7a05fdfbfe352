from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class PlacesConfig:
    api_key: str = os.getenv("GOOGLE_MAPS_API_KEY", "")
    base_url: str = "https://maps.googleapis.com/maps/api"
    language: str = "zh-TW"
    place_type: str = "restaurant"
    timeout: float = 10.0
    photo_max_width: int = 400
    geocode_cache_ttl: int = 300  # 5 minutes


DEFAULT_PLACES_CONFIG = PlacesConfig()
