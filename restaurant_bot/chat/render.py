from __future__ import annotations

from ..favorites.models import Favorite
from ..places.links import directions_url, listing_url, search_url, uber_url
from ..places.models import Coordinates, Restaurant, RestaurantDetails
from .commands import (
    ADD_TO_FAVORITES,
    CONTINUE,
    DELETE_FAVORITE,
    END,
    RANDOM_FAVORITE,
    RANDOM_PICK,
    START_SEARCH,
    VIEW_FAVORITES,
    build_postback,
)
from .messages import (
    Button,
    ButtonsMessage,
    Card,
    CarouselMessage,
    MessageButton,
    OutboundMessage,
    PostbackButton,
    QuickReply,
    TextMessage,
    UriButton,
)

_MAIN_MENU = [
    QuickReply(label=START_SEARCH, text=START_SEARCH),
    QuickReply(label=VIEW_FAVORITES, text=VIEW_FAVORITES),
    QuickReply(label=RANDOM_FAVORITE, text=RANDOM_FAVORITE),
]

# ---------------------------------------------------------------------------
# Menus and prompts
# ---------------------------------------------------------------------------


def help_message() -> TextMessage:
    return TextMessage(
        text=(
            "嗨！我可以幫你找附近的餐廳 🍜\n"
            f"輸入「{START_SEARCH}」開始，或輸入「{VIEW_FAVORITES}」看看你收藏的餐廳。"
        ),
        quick_replies=_MAIN_MENU,
    )


def closing_message() -> TextMessage:
    return TextMessage(
        text="感謝使用，祝你用餐愉快！想再找餐廳時隨時叫我。",
        quick_replies=_MAIN_MENU,
    )


def location_prompt() -> TextMessage:
    return TextMessage(
        text="請輸入地址，或直接分享你的位置 📍",
        quick_replies=[QuickReply(label="分享目前位置", kind="location")],
    )


def location_not_found() -> TextMessage:
    return TextMessage(
        text="找不到這個地址，請輸入更完整的地址，或直接分享你的位置。",
        quick_replies=[QuickReply(label="分享目前位置", kind="location")],
    )


def top_count_prompt() -> TextMessage:
    return TextMessage(text="想查看幾間餐廳呢？請輸入數字，例如：10")


def top_count_invalid() -> TextMessage:
    return TextMessage(text="請輸入大於 0 的數字，例如：10")


def radius_prompt() -> TextMessage:
    return TextMessage(text="搜尋範圍要多大呢？請輸入公尺數，例如：1000")


def radius_invalid() -> TextMessage:
    return TextMessage(text="請輸入大於 0 的公尺數，例如：1000")


def no_results() -> TextMessage:
    return TextMessage(
        text=(
            "這個範圍內找不到餐廳 😢\n"
            "請輸入更大的搜尋範圍（公尺），"
            f"或輸入「{START_SEARCH}」換個地點。"
        ),
        quick_replies=[QuickReply(label=START_SEARCH, text=START_SEARCH)],
    )


def selection_invalid(total: int) -> TextMessage:
    return TextMessage(
        text=f"請輸入 1 到 {total} 的編號查看餐廳詳情，或輸入「{RANDOM_PICK}」幫你挑一間。",
        quick_replies=[
            QuickReply(label=RANDOM_PICK, text=RANDOM_PICK),
            QuickReply(label=END, text=END),
        ],
    )


def nothing_to_continue() -> TextMessage:
    return TextMessage(text="目前沒有可以繼續查看的內容。", quick_replies=_MAIN_MENU)


def upstream_error() -> TextMessage:
    return TextMessage(text="地圖服務暫時無法使用，請稍後再試一次。")


def store_error() -> TextMessage:
    return TextMessage(text="收藏功能暫時無法使用，請稍後再試一次。")


# ---------------------------------------------------------------------------
# Search results
# ---------------------------------------------------------------------------


def _rating_line(rating: float | None, rating_count: int | None) -> str:
    rating_text = f"{rating:.1f}" if rating is not None else "無評分"
    return f"⭐ {rating_text}（{rating_count or 0} 則評論）"


def restaurant_card(index: int, restaurant: Restaurant) -> Card:
    return Card(
        title=f"{index}. {restaurant.name}",
        lines=[restaurant.address or "無地址資訊", _rating_line(restaurant.rating, restaurant.rating_count)],
        image_url=restaurant.image_url,
        buttons=[UriButton(label="查看地圖", uri=restaurant.url or listing_url(restaurant.place_id))],
    )


def results_page(
    page: list[Restaurant],
    start_index: int,
    total: int,
    has_more: bool,
) -> list[OutboundMessage]:
    """Carousel for one page plus the follow-up prompt.

    ``start_index`` is the 0-based position of ``page[0]`` in the full list.
    """
    carousel = CarouselMessage(
        alt_text=f"為你找到 {total} 間餐廳",
        cards=[restaurant_card(start_index + i + 1, r) for i, r in enumerate(page)],
    )
    if has_more:
        follow_up = TextMessage(
            text=(
                f"輸入「{CONTINUE}」查看更多餐廳，"
                f"或輸入編號（1-{total}）查看詳情，也可以輸入「{RANDOM_PICK}」。"
            ),
            quick_replies=[
                QuickReply(label=CONTINUE, text=CONTINUE),
                QuickReply(label=RANDOM_PICK, text=RANDOM_PICK),
                QuickReply(label=END, text=END),
            ],
        )
    else:
        follow_up = results_exhausted(total)
    return [carousel, follow_up]


def results_exhausted(total: int) -> TextMessage:
    return TextMessage(
        text=(
            f"以上就是全部 {total} 間餐廳！"
            f"輸入編號（1-{total}）查看詳情，或輸入「{RANDOM_PICK}」幫你挑一間。"
        ),
        quick_replies=[
            QuickReply(label=RANDOM_PICK, text=RANDOM_PICK),
            QuickReply(label=END, text=END),
        ],
    )


# ---------------------------------------------------------------------------
# Details
# ---------------------------------------------------------------------------


def detail_text(details: RestaurantDetails, fallback_address: str = "") -> TextMessage:
    hours = "\n".join(details.weekday_text) if details.weekday_text else "無營業時間資訊"
    lines = [
        f"🍽 {details.name}",
        f"地址：{details.formatted_address or fallback_address or '無地址資訊'}",
        f"評論數：{details.rating_count or 0}",
        f"評分：{details.rating if details.rating is not None else '無評分'}",
        "營業時間：",
        hours,
    ]
    return TextMessage(text="\n".join(lines))


def _navigation_buttons(name: str, place_id: str, location: Coordinates | None) -> list[Button]:
    if location is None:
        return [UriButton(label="Google 地圖", uri=listing_url(place_id))]
    return [
        UriButton(label="Google 導航", uri=directions_url(location, place_id)),
        UriButton(label="Uber 叫車", uri=uber_url(location, name)),
    ]


def detail_messages(
    details: RestaurantDetails,
    restaurant: Restaurant,
) -> list[OutboundMessage]:
    location = details.location or restaurant.location
    buttons = _navigation_buttons(details.name or restaurant.name, restaurant.place_id, location)
    buttons.append(
        PostbackButton(
            label="加入收藏",
            data=build_postback(ADD_TO_FAVORITES, restaurant.place_id),
            display_text="加入收藏",
        )
    )
    buttons.append(MessageButton(label=END, text=END))
    return [
        detail_text(details, restaurant.address),
        ButtonsMessage(alt_text=f"{details.name} 的操作選項", text="要怎麼前往呢？", buttons=buttons),
    ]


def favorite_detail_messages(details: RestaurantDetails, favorite: Favorite) -> list[OutboundMessage]:
    location = details.location or Coordinates(lat=favorite.latitude, lng=favorite.longitude)
    buttons = _navigation_buttons(details.name or favorite.name, favorite.restaurant_id, location)
    return [
        TextMessage(text=f"🎲 從你的收藏中抽到了：{favorite.name}"),
        detail_text(details, favorite.address),
        ButtonsMessage(alt_text=f"{favorite.name} 的操作選項", text="要怎麼前往呢？", buttons=buttons),
    ]


# ---------------------------------------------------------------------------
# Favorites
# ---------------------------------------------------------------------------


def favorite_card(favorite: Favorite) -> Card:
    location = Coordinates(lat=favorite.latitude, lng=favorite.longitude)
    return Card(
        title=favorite.name,
        lines=[favorite.address or "無地址資訊"],
        buttons=[
            UriButton(label="查看地圖", uri=search_url(location, favorite.restaurant_id)),
            PostbackButton(
                label="刪除",
                data=build_postback(DELETE_FAVORITE, favorite.restaurant_id),
                display_text=f"刪除 {favorite.name}",
            ),
        ],
    )


def favorites_page(page: list[Favorite], total: int, has_more: bool) -> list[OutboundMessage]:
    carousel = CarouselMessage(
        alt_text=f"你的收藏（共 {total} 間）",
        cards=[favorite_card(f) for f in page],
    )
    if has_more:
        follow_up = TextMessage(
            text=f"輸入「{CONTINUE}」查看更多收藏。",
            quick_replies=[
                QuickReply(label=CONTINUE, text=CONTINUE),
                QuickReply(label=END, text=END),
            ],
        )
    else:
        follow_up = favorites_exhausted()
    return [carousel, follow_up]


def favorites_exhausted() -> TextMessage:
    return TextMessage(text="已經沒有更多收藏了，本次服務結束。", quick_replies=_MAIN_MENU)


def favorites_empty() -> TextMessage:
    return TextMessage(text="收藏清單是空的。", quick_replies=_MAIN_MENU)


def favorite_loading() -> TextMessage:
    return TextMessage(text="正在加入收藏，請稍候…")


def favorite_no_selection() -> TextMessage:
    return TextMessage(text="請先從搜尋結果中選擇一間餐廳，再加入收藏。", quick_replies=_MAIN_MENU)


def favorite_added(name: str) -> TextMessage:
    return TextMessage(text=f"已將「{name}」加入收藏 ❤️", quick_replies=_MAIN_MENU)


def favorite_exists(name: str) -> TextMessage:
    return TextMessage(text=f"「{name}」已經在你的收藏中了。", quick_replies=_MAIN_MENU)


def favorite_deleted() -> TextMessage:
    return TextMessage(text="已從收藏中移除。", quick_replies=_MAIN_MENU)


def favorite_not_found() -> TextMessage:
    return TextMessage(text="找不到這筆收藏，可能已經刪除了。", quick_replies=_MAIN_MENU)
