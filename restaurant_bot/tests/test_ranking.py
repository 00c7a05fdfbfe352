from __future__ import annotations

from restaurant_bot.places.models import Restaurant
from restaurant_bot.places.ranking import popularity_key, rank_restaurants, top_ranked


def _r(place_id, rating=None, count=None):
    return Restaurant(name=place_id, place_id=place_id, rating=rating, rating_count=count)


def test_more_reviews_first():
    ranked = rank_restaurants([_r("a", 4.9, 10), _r("b", 3.0, 500), _r("c", 4.0, 100)])
    assert [r.place_id for r in ranked] == ["b", "c", "a"]


def test_rating_breaks_ties():
    ranked = rank_restaurants([_r("a", 4.1, 50), _r("b", 4.6, 50)])
    assert [r.place_id for r in ranked] == ["b", "a"]


def test_missing_values_count_as_zero():
    ranked = rank_restaurants([_r("none"), _r("rated", 2.0, None), _r("counted", None, 1)])
    assert [r.place_id for r in ranked] == ["counted", "rated", "none"]
    assert popularity_key(_r("none")) == (0, 0.0)


def test_ranking_is_idempotent():
    items = [_r(str(i), rating=(i % 5) / 1.0, count=i % 3) for i in range(12)]
    once = rank_restaurants(items)
    assert rank_restaurants(once) == once


def test_top_ranked_truncates_after_ranking():
    items = [_r("low", 5.0, 1), _r("high", 1.0, 99), _r("mid", 3.0, 50)]
    assert [r.place_id for r in top_ranked(items, 2)] == ["high", "mid"]
    assert len(top_ranked(items, 10)) == 3
