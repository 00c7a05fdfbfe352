from __future__ import annotations

from .models import Restaurant


def popularity_key(restaurant: Restaurant) -> tuple[int, float]:
    """Sort key: more reviews first, then higher rating. Missing values count as 0."""
    return (-(restaurant.rating_count or 0), -(restaurant.rating or 0.0))


def rank_restaurants(restaurants: list[Restaurant]) -> list[Restaurant]:
    return sorted(restaurants, key=popularity_key)


def top_ranked(restaurants: list[Restaurant], top_count: int) -> list[Restaurant]:
    """Rank first, then keep the best ``top_count``."""
    return rank_restaurants(restaurants)[:top_count]
