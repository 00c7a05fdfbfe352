from __future__ import annotations

from linebot.v3.webhooks import Event

from restaurant_bot.chat.models import EventKind
from restaurant_bot.messaging.events import translate_event
from restaurant_bot.places.models import Coordinates


def _event(type_, source=None, **extra):
    payload = {
        "type": type_,
        "source": source or {"type": "user", "userId": "U1"},
        "timestamp": 1700000000000,
        "mode": "active",
        "webhookEventId": "01HTESTEVENT",
        "deliveryContext": {"isRedelivery": False},
        "replyToken": "rt",
        **extra,
    }
    return Event.from_dict(payload)


def test_text_message():
    event = _event("message", message={"type": "text", "id": "1", "quoteToken": "q", "text": "開始搜尋"})
    inbound = translate_event(event)
    assert inbound.kind == EventKind.text
    assert inbound.text == "開始搜尋"
    assert inbound.user_id == "U1"
    assert inbound.reply_token == "rt"


def test_location_message():
    message = {"type": "location", "id": "2", "latitude": 25.03, "longitude": 121.56, "address": "臺北101"}
    inbound = translate_event(_event("message", message=message))
    assert inbound.kind == EventKind.location
    assert inbound.location == Coordinates(lat=25.03, lng=121.56)
    assert inbound.text == "臺北101"


def test_postback():
    event = _event("postback", postback={"data": "action=delete&restaurantId=p1"})
    inbound = translate_event(event)
    assert inbound.kind == EventKind.postback
    assert inbound.postback_data == "action=delete&restaurantId=p1"


def test_follow():
    event = _event("follow", follow={"isUnblocked": False})
    assert translate_event(event).kind == EventKind.follow


def test_unsupported_message_type():
    sticker = {
        "type": "sticker", "id": "3", "packageId": "1", "stickerId": "1",
        "stickerResourceType": "STATIC", "quoteToken": "q",
    }
    assert translate_event(_event("message", message=sticker)) is None


def test_unsupported_event_type():
    assert translate_event(_event("unfollow")) is None


def test_group_message_uses_sender():
    event = _event(
        "message",
        source={"type": "group", "groupId": "G1", "userId": "U7"},
        message={"type": "text", "id": "1", "quoteToken": "q", "text": "hi"},
    )
    assert translate_event(event).user_id == "U7"


def test_group_source_without_user():
    event = _event("join", source={"type": "group", "groupId": "G1"})
    assert translate_event(event) is None
