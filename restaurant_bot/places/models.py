from __future__ import annotations

from pydantic import BaseModel, Field


class Coordinates(BaseModel):
    lat: float
    lng: float


class Restaurant(BaseModel):
    name: str
    address: str = ""
    place_id: str
    rating: float | None = None
    rating_count: int | None = None
    image_url: str = ""
    map_url: str = ""
    url: str = ""
    location: Coordinates | None = None


class RestaurantDetails(BaseModel):
    name: str
    formatted_address: str = ""
    rating: float | None = None
    rating_count: int | None = None
    weekday_text: list[str] = Field(default_factory=list)
    location: Coordinates | None = None
