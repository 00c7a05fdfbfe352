from __future__ import annotations

import asyncio

from linebot.v3.messaging import ApiException
from linebot.v3.webhooks import Event

from restaurant_bot.chat.models import EventKind, InboundEvent
from restaurant_bot.messaging.dispatcher import EventDispatcher, group_by_user


def _raw(user_id, text, message=None):
    return Event.from_dict({
        "type": "message",
        "source": {"type": "user", "userId": user_id},
        "timestamp": 1700000000000,
        "mode": "active",
        "webhookEventId": f"01H{user_id}{text}",
        "deliveryContext": {"isRedelivery": False},
        "replyToken": f"rt-{user_id}-{text}",
        "message": message or {"type": "text", "id": "1", "quoteToken": "q", "text": text},
    })


class FakeOrchestrator:
    def __init__(self, fail_for=None, api_error_for=None):
        self.handled = []
        self.fail_for = fail_for
        self.api_error_for = api_error_for

    async def handle(self, event, channel):
        await asyncio.sleep(0)
        if event.user_id == self.fail_for:
            raise RuntimeError("boom")
        if event.user_id == self.api_error_for:
            raise ApiException(status=400, reason="Bad Request")
        self.handled.append((event.user_id, event.text, channel))


def _dispatcher(orchestrator):
    return EventDispatcher(orchestrator, lambda event: f"channel:{event.reply_token}")


def test_group_by_user_keeps_order():
    events = [
        InboundEvent(kind=EventKind.text, user_id=u, text=t)
        for u, t in [("A", "1"), ("B", "1"), ("A", "2"), ("A", "3"), ("B", "2")]
    ]
    grouped = group_by_user(events)
    assert [e.text for e in grouped["A"]] == ["1", "2", "3"]
    assert [e.text for e in grouped["B"]] == ["1", "2"]


def test_per_user_order_preserved():
    orchestrator = FakeOrchestrator()
    batch = [_raw("A", "1"), _raw("B", "1"), _raw("A", "2"), _raw("B", "2"), _raw("A", "3")]
    handled = asyncio.run(_dispatcher(orchestrator).dispatch(batch))

    assert handled == 5
    assert [t for u, t, _ in orchestrator.handled if u == "A"] == ["1", "2", "3"]
    assert [t for u, t, _ in orchestrator.handled if u == "B"] == ["1", "2"]


def test_each_event_gets_its_own_channel():
    orchestrator = FakeOrchestrator()
    asyncio.run(_dispatcher(orchestrator).dispatch([_raw("A", "1"), _raw("A", "2")]))
    assert [c for _, _, c in orchestrator.handled] == ["channel:rt-A-1", "channel:rt-A-2"]


def test_unsupported_events_skipped():
    orchestrator = FakeOrchestrator()
    sticker = _raw("A", "sticker", message={
        "type": "sticker", "id": "2", "packageId": "1", "stickerId": "1",
        "stickerResourceType": "STATIC", "quoteToken": "q",
    })
    handled = asyncio.run(_dispatcher(orchestrator).dispatch([sticker, _raw("A", "hi")]))
    assert handled == 1
    assert [t for _, t, _ in orchestrator.handled] == ["hi"]


def test_one_user_failing_does_not_block_others():
    orchestrator = FakeOrchestrator(fail_for="A", api_error_for="C")
    batch = [_raw("A", "1"), _raw("B", "1"), _raw("C", "1"), _raw("B", "2")]
    handled = asyncio.run(_dispatcher(orchestrator).dispatch(batch))
    assert handled == 4
    assert [(u, t) for u, t, _ in orchestrator.handled] == [("B", "1"), ("B", "2")]
