from __future__ import annotations

import time

from .config import DEFAULT_PLACES_CONFIG
from .models import Coordinates

_cache: dict[str, dict] = {}
_hits: int = 0
_misses: int = 0


def _make_key(address: str) -> str:
    return " ".join(address.split()).lower()


def geocode_cache_get(
    address: str, ttl: int = DEFAULT_PLACES_CONFIG.geocode_cache_ttl,
) -> Coordinates | None:
    global _hits, _misses
    key = _make_key(address)
    entry = _cache.get(key)
    if entry and time.time() - entry["created_at"] < ttl:
        _hits += 1
        return entry["value"]
    if entry:
        del _cache[key]
    _misses += 1
    return None


def geocode_cache_set(address: str, value: Coordinates) -> None:
    _cache[_make_key(address)] = {"value": value, "created_at": time.time()}


def get_cache_stats() -> dict:
    total = _hits + _misses
    return {
        "size": len(_cache),
        "hits": _hits,
        "misses": _misses,
        "hit_rate": round(_hits / total * 100, 1) if total > 0 else 0.0,
    }


def clear_cache() -> None:
    global _hits, _misses
    _cache.clear()
    _hits = 0
    _misses = 0
