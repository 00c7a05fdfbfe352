from __future__ import annotations

from enum import Enum
from typing import TypeVar

from pydantic import BaseModel, Field

from ..favorites.models import Favorite
from ..places.models import Coordinates, Restaurant

PAGE_SIZE = 4
FAVORITES_PAGE_SIZE = 4

T = TypeVar("T")


class Stage(str, Enum):
    idle = "idle"
    awaiting_location = "awaiting_location"
    awaiting_top_count = "awaiting_top_count"
    awaiting_radius = "awaiting_radius"
    browsing_results = "browsing_results"
    ended = "ended"


class FlowContext(str, Enum):
    none = "none"
    search = "search"
    favorites = "favorites"


class EventKind(str, Enum):
    text = "text"
    location = "location"
    postback = "postback"
    follow = "follow"


class InboundEvent(BaseModel):
    kind: EventKind
    user_id: str
    reply_token: str | None = None
    text: str = ""
    location: Coordinates | None = None
    postback_data: str = ""


class InvalidTransition(Exception):
    """A session mutation was attempted from the wrong stage or flow."""


def paginate(items: list[T], cursor: int, page_size: int) -> tuple[list[T], int]:
    """Return the page starting at *cursor* and the advanced cursor."""
    start = min(cursor, len(items))
    end = min(start + page_size, len(items))
    return items[start:end], end


class Session(BaseModel):
    stage: Stage = Stage.idle
    flow: FlowContext = FlowContext.none
    location: Coordinates | None = None
    top_count: int | None = None
    radius: int | None = None
    candidates: list[Restaurant] = Field(default_factory=list)
    cursor: int = 0
    favorites: list[Favorite] = Field(default_factory=list)
    favorites_cursor: int = 0
    last_selected: Restaurant | None = None

    @classmethod
    def for_search(cls) -> Session:
        return cls(stage=Stage.awaiting_location, flow=FlowContext.search)

    @classmethod
    def for_favorites(cls, favorites: list[Favorite]) -> Session:
        return cls(flow=FlowContext.favorites, favorites=list(favorites))

    def _require(self, stage: Stage) -> None:
        if self.flow != FlowContext.search or self.stage != stage:
            raise InvalidTransition(
                f"expected {stage.value} in search flow, got {self.stage.value}/{self.flow.value}"
            )

    # ── Search flow ──────────────────────────────────────────────────────

    def set_location(self, location: Coordinates) -> None:
        self._require(Stage.awaiting_location)
        self.location = location
        self.stage = Stage.awaiting_top_count

    def set_top_count(self, top_count: int) -> None:
        self._require(Stage.awaiting_top_count)
        if top_count <= 0:
            raise InvalidTransition("top_count must be positive")
        self.top_count = top_count
        self.stage = Stage.awaiting_radius

    def start_browsing(self, radius: int, candidates: list[Restaurant]) -> None:
        self._require(Stage.awaiting_radius)
        if radius <= 0 or not candidates:
            raise InvalidTransition("browsing needs a positive radius and at least one candidate")
        self.radius = radius
        self.candidates = list(candidates)
        self.cursor = 0
        self.stage = Stage.browsing_results

    def next_page(self) -> list[Restaurant]:
        page, self.cursor = paginate(self.candidates, self.cursor, PAGE_SIZE)
        return page

    @property
    def has_more_results(self) -> bool:
        return self.cursor < len(self.candidates)

    def select(self, restaurant: Restaurant) -> None:
        self._require(Stage.browsing_results)
        if restaurant not in self.candidates:
            raise InvalidTransition(f"{restaurant.place_id} is not a current candidate")
        self.last_selected = restaurant

    def selected(self) -> Restaurant | None:
        """The restaurant last shown in detail, valid only while browsing results."""
        if self.flow != FlowContext.search or self.stage != Stage.browsing_results:
            return None
        return self.last_selected

    def find_candidate(self, place_id: str) -> Restaurant | None:
        return next((c for c in self.candidates if c.place_id == place_id), None)

    # ── Favorites flow ───────────────────────────────────────────────────

    def next_favorites_page(self) -> list[Favorite]:
        page, self.favorites_cursor = paginate(
            self.favorites, self.favorites_cursor, FAVORITES_PAGE_SIZE,
        )
        return page

    @property
    def has_more_favorites(self) -> bool:
        return self.favorites_cursor < len(self.favorites)

    # ── Lifecycle ────────────────────────────────────────────────────────

    def end(self) -> None:
        self.stage = Stage.ended
        self.flow = FlowContext.none
        self.last_selected = None
