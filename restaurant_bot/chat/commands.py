from __future__ import annotations

import re
from enum import Enum
from urllib.parse import parse_qsl, urlencode

START_SEARCH = "開始搜尋"
VIEW_FAVORITES = "查看收藏"
RANDOM_FAVORITE = "隨機收藏"
END = "結束"
CONTINUE = "繼續"
RANDOM_PICK = "隨機"

# Postback payload keys and actions
ACTION_KEY = "action"
RESTAURANT_KEY = "restaurantId"
ADD_TO_FAVORITES = "add_to_favorites"
DELETE_FAVORITE = "delete"

_NON_DIGITS_RE = re.compile(r"\D")


class GlobalCommand(str, Enum):
    start_search = START_SEARCH
    view_favorites = VIEW_FAVORITES
    random_favorite = RANDOM_FAVORITE
    end = END
    continue_ = CONTINUE


def match_global_command(text: str) -> GlobalCommand | None:
    try:
        return GlobalCommand(text.strip())
    except ValueError:
        return None


def parse_positive_int(text: str) -> int | None:
    """Parse the digits of *text* ("10 公尺" -> 10). Returns ``None`` unless the value is > 0."""
    digits = _NON_DIGITS_RE.sub("", text)
    if not digits:
        return None
    try:
        value = int(digits)
    except ValueError:
        # Longer than the interpreter allows for str -> int
        return None
    return value if value > 0 else None


def parse_postback(data: str) -> dict[str, str]:
    return dict(parse_qsl(data, keep_blank_values=True))


def build_postback(action: str, restaurant_id: str) -> str:
    return urlencode({ACTION_KEY: action, RESTAURANT_KEY: restaurant_id})
