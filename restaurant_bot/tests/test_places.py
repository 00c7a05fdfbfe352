from __future__ import annotations

import asyncio

import httpx
import pytest

from restaurant_bot.places.address import clean_address
from restaurant_bot.places.cache import clear_cache, get_cache_stats
from restaurant_bot.places.client import PlacesError, PlacesGateway
from restaurant_bot.places.config import PlacesConfig
from restaurant_bot.places.links import directions_url, listing_url, uber_url
from restaurant_bot.places.models import Coordinates

HERE = Coordinates(lat=25.0478, lng=121.517)
PHOTO_URL = "https://lh3.googleusercontent.com/photo-1"


@pytest.fixture(autouse=True)
def _fresh_cache():
    clear_cache()
    yield
    clear_cache()


def _gateway(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return PlacesGateway(PlacesConfig(api_key="test-key"), http_client=client)


def _nearby_place(place_id, count, rating, photo=None):
    place = {
        "place_id": place_id,
        "name": f"Place {place_id}",
        "vicinity": "1 Main St",
        "rating": rating,
        "user_ratings_total": count,
        "geometry": {"location": {"lat": 25.0, "lng": 121.5}},
    }
    if photo:
        place["photos"] = [{"photo_reference": photo}]
    return place


# ── Geocoding ────────────────────────────────────────────────────────────


class TestGeocode:
    def test_ok(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={
                "status": "OK",
                "results": [{"geometry": {"location": {"lat": 25.0478, "lng": 121.517}}}],
            })

        coords = asyncio.run(_gateway(handler).geocode("台北車站"))
        assert coords == HERE
        assert seen[0].url.path.endswith("/geocode/json")
        assert seen[0].url.params["key"] == "test-key"
        assert seen[0].url.params["language"] == "zh-TW"

    @pytest.mark.parametrize("status", ["ZERO_RESULTS", "REQUEST_DENIED", "OVER_QUERY_LIMIT"])
    def test_non_ok_status_is_none(self, status):
        def handler(request):
            return httpx.Response(200, json={"status": status, "results": []})

        assert asyncio.run(_gateway(handler).geocode("nowhere")) is None

    def test_transport_error_is_none(self):
        def handler(request):
            raise httpx.ConnectError("boom", request=request)

        assert asyncio.run(_gateway(handler).geocode("anywhere")) is None

    def test_http_error_status_is_none(self):
        def handler(request):
            return httpx.Response(503, text="unavailable")

        assert asyncio.run(_gateway(handler).geocode("anywhere")) is None

    def test_second_lookup_hits_cache(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={
                "status": "OK",
                "results": [{"geometry": {"location": {"lat": 1.0, "lng": 2.0}}}],
            })

        gateway = _gateway(handler)

        async def scenario():
            first = await gateway.geocode("Taipei 101")
            second = await gateway.geocode("  taipei   101 ")
            return first, second

        first, second = asyncio.run(scenario())
        assert first == second == Coordinates(lat=1.0, lng=2.0)
        assert len(calls) == 1
        assert get_cache_stats()["hits"] == 1


# ── Nearby search ────────────────────────────────────────────────────────


class TestSearchNearby:
    def test_ranked_with_photos(self):
        def handler(request):
            if request.url.path.endswith("/place/photo"):
                if request.url.params["photoreference"] == "good":
                    return httpx.Response(302, headers={"location": PHOTO_URL})
                return httpx.Response(404)
            assert request.url.params["type"] == "restaurant"
            assert request.url.params["radius"] == "1000"
            return httpx.Response(200, json={
                "status": "OK",
                "results": [
                    _nearby_place("a", 10, 4.9, photo="bad"),
                    _nearby_place("b", 500, 4.0, photo="good"),
                    _nearby_place("c", 100, 3.5),
                ],
            })

        results = asyncio.run(_gateway(handler).search_nearby(HERE, 1000))
        assert [r.place_id for r in results] == ["b", "c", "a"]
        assert results[0].image_url == PHOTO_URL
        assert results[1].image_url == ""
        assert results[2].image_url == ""
        assert results[0].address == "1 Main St"
        assert results[0].url == listing_url("b")
        assert results[0].location == Coordinates(lat=25.0, lng=121.5)

    def test_zero_results_is_empty(self):
        def handler(request):
            return httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []})

        assert asyncio.run(_gateway(handler).search_nearby(HERE, 50)) == []

    def test_error_status_raises(self):
        def handler(request):
            return httpx.Response(200, json={"status": "REQUEST_DENIED", "error_message": "bad key"})

        with pytest.raises(PlacesError):
            asyncio.run(_gateway(handler).search_nearby(HERE, 500))

    def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(PlacesError):
            asyncio.run(_gateway(handler).search_nearby(HERE, 500))

    def test_photo_transport_error_gives_empty_url(self):
        def handler(request):
            if request.url.path.endswith("/place/photo"):
                raise httpx.ConnectError("down", request=request)
            return httpx.Response(200, json={
                "status": "OK", "results": [_nearby_place("a", 1, 1.0, photo="x")],
            })

        results = asyncio.run(_gateway(handler).search_nearby(HERE, 500))
        assert results[0].image_url == ""


# ── Details ──────────────────────────────────────────────────────────────


class TestDetails:
    def test_ok(self):
        def handler(request):
            assert request.url.params["place_id"] == "b"
            return httpx.Response(200, json={
                "status": "OK",
                "result": {
                    "name": "Place b",
                    "formatted_address": "104臺灣臺北市中山區南京東路三段1號",
                    "rating": 4.2,
                    "user_ratings_total": 321,
                    "opening_hours": {"weekday_text": ["星期一: 11:00 – 21:00"]},
                    "geometry": {"location": {"lat": 25.05, "lng": 121.53}},
                },
            })

        details = asyncio.run(_gateway(handler).get_details("b"))
        assert details.name == "Place b"
        assert details.formatted_address == "臺北市中山區南京東路三段1號"
        assert details.rating_count == 321
        assert details.weekday_text == ["星期一: 11:00 – 21:00"]
        assert details.location == Coordinates(lat=25.05, lng=121.53)

    def test_missing_hours(self):
        def handler(request):
            return httpx.Response(200, json={"status": "OK", "result": {"name": "No hours"}})

        details = asyncio.run(_gateway(handler).get_details("x"))
        assert details.weekday_text == []
        assert details.location is None

    def test_not_found_raises(self):
        def handler(request):
            return httpx.Response(200, json={"status": "NOT_FOUND"})

        with pytest.raises(PlacesError):
            asyncio.run(_gateway(handler).get_details("gone"))


# ── Address and links ────────────────────────────────────────────────────


class TestAddressAndLinks:
    def test_clean_address_strips_postal_code_and_country(self):
        assert clean_address("104臺灣臺北市中山區南京東路三段1號") == "臺北市中山區南京東路三段1號"

    def test_clean_address_keeps_house_numbers(self):
        assert clean_address("中山區南京東路三段219號") == "中山區南京東路三段219號"

    def test_clean_address_empty(self):
        assert clean_address("") == ""

    def test_directions_url(self):
        url = directions_url(HERE, "b")
        assert url.startswith("https://www.google.com/maps/dir/?api=1")
        assert "destination_place_id=b" in url

    def test_uber_url(self):
        url = uber_url(HERE, "Place b")
        assert url.startswith("https://m.uber.com/ul/?action=setPickup")
        assert "dropoff%5Blatitude%5D=25.0478" in url
