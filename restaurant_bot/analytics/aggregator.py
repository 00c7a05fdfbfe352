from __future__ import annotations

from collections import Counter
from typing import Any

from ..places.cache import get_cache_stats


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    searches = [e for e in events if e["type"] == "search"]
    total = len(searches)

    # Average response time
    times = [s["response_time_ms"] for s in searches if "response_time_ms" in s]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Result sizes
    counts = [s.get("results_returned", 0) for s in searches]
    avg_results = round(sum(counts) / total, 1) if total else 0.0
    empty_searches = sum(1 for c in counts if c == 0)

    # Radius usage
    radius_counter: Counter[int] = Counter()
    for s in searches:
        if s.get("radius"):
            radius_counter[s["radius"]] += 1
    top_radii = [{"radius": r, "count": c} for r, c in radius_counter.most_common(5)]

    # Selections and favorites
    type_counter = Counter(e["type"] for e in events)
    random_picks = sum(1 for e in events if e["type"] == "selection" and e.get("random"))

    return {
        "total_searches": total,
        "avg_response_time_ms": avg_time,
        "avg_results_returned": avg_results,
        "empty_searches": empty_searches,
        "top_radii": top_radii,
        "selections": {
            "total": type_counter["selection"],
            "random": random_picks,
        },
        "favorites": {
            "added": type_counter["favorite_added"],
            "deleted": type_counter["favorite_deleted"],
        },
        "geocode_cache": get_cache_stats(),
    }
