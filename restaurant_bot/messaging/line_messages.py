from __future__ import annotations

import json
from typing import Any

from linebot.v3.messaging import (
    ButtonsTemplate,
    FlexContainer,
    FlexMessage,
    LocationAction,
    MessageAction,
    PostbackAction,
    QuickReply,
    QuickReplyItem,
    TemplateMessage,
    URIAction,
)
from linebot.v3.messaging import Message as LineMessage
from linebot.v3.messaging import TextMessage as LineTextMessage

from ..chat.messages import (
    Button,
    ButtonsMessage,
    Card,
    CarouselMessage,
    OutboundMessage,
    PostbackButton,
    QuickReply as ChatQuickReply,
    TextMessage,
    UriButton,
)


def _action_dict(button: Button) -> dict[str, Any]:
    if isinstance(button, UriButton):
        return {"type": "uri", "label": button.label, "uri": button.uri}
    if isinstance(button, PostbackButton):
        action = {"type": "postback", "label": button.label, "data": button.data}
        if button.display_text:
            action["displayText"] = button.display_text
        return action
    return {"type": "message", "label": button.label, "text": button.text}


def _template_action(button: Button):
    if isinstance(button, UriButton):
        return URIAction(label=button.label, uri=button.uri)
    if isinstance(button, PostbackButton):
        return PostbackAction(label=button.label, data=button.data, display_text=button.display_text)
    return MessageAction(label=button.label, text=button.text)


def _quick_reply(items: list[ChatQuickReply]) -> QuickReply | None:
    if not items:
        return None
    actions = [
        LocationAction(label=item.label) if item.kind == "location"
        else MessageAction(label=item.label, text=item.text)
        for item in items
    ]
    return QuickReply(items=[QuickReplyItem(action=action) for action in actions])


def card_bubble(card: Card) -> dict[str, Any]:
    """Flex bubble JSON for one card."""
    body = [{"type": "text", "text": card.title, "weight": "bold", "size": "md", "wrap": True}]
    body.extend(
        {"type": "text", "text": line, "size": "sm", "color": "#666666", "wrap": True}
        for line in card.lines
        if line
    )
    bubble: dict[str, Any] = {
        "type": "bubble",
        "body": {"type": "box", "layout": "vertical", "spacing": "sm", "contents": body},
    }
    if card.image_url:
        bubble["hero"] = {
            "type": "image",
            "url": card.image_url,
            "size": "full",
            "aspectRatio": "20:13",
            "aspectMode": "cover",
        }
    if card.buttons:
        bubble["footer"] = {
            "type": "box",
            "layout": "vertical",
            "spacing": "sm",
            "contents": [
                {"type": "button", "style": "link", "height": "sm", "action": _action_dict(b)}
                for b in card.buttons
            ],
        }
    return bubble


def to_line_message(message: OutboundMessage) -> LineMessage:
    if isinstance(message, TextMessage):
        return LineTextMessage(text=message.text, quick_reply=_quick_reply(message.quick_replies))
    if isinstance(message, CarouselMessage):
        carousel = {"type": "carousel", "contents": [card_bubble(c) for c in message.cards]}
        return FlexMessage(alt_text=message.alt_text, contents=FlexContainer.from_json(json.dumps(carousel)))
    if isinstance(message, ButtonsMessage):
        template = ButtonsTemplate(
            text=message.text, actions=[_template_action(b) for b in message.buttons],
        )
        return TemplateMessage(alt_text=message.alt_text, template=template)
    raise TypeError(f"Unsupported outbound message: {type(message).__name__}")


def to_line_messages(messages: list[OutboundMessage]) -> list[LineMessage]:
    return [to_line_message(m) for m in messages]
