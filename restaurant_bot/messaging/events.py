from __future__ import annotations

import logging

from linebot.v3.webhooks import (
    Event,
    FollowEvent,
    GroupSource,
    LocationMessageContent,
    MessageEvent,
    PostbackEvent,
    RoomSource,
    TextMessageContent,
    UserSource,
)

from ..chat.models import EventKind, InboundEvent
from ..places.models import Coordinates

logger = logging.getLogger(__name__)


def _user_id(event: Event) -> str | None:
    if isinstance(event.source, (UserSource, GroupSource, RoomSource)):
        return event.source.user_id
    return None


def translate_event(event: Event) -> InboundEvent | None:
    """Map a parsed LINE webhook event onto ``InboundEvent``; ``None`` for anything unsupported."""
    user_id = _user_id(event)
    if not user_id:
        logger.debug("Skipping %s event without a user source", event.type)
        return None

    if isinstance(event, FollowEvent):
        return InboundEvent(kind=EventKind.follow, user_id=user_id, reply_token=event.reply_token)

    if isinstance(event, PostbackEvent):
        return InboundEvent(
            kind=EventKind.postback,
            user_id=user_id,
            reply_token=event.reply_token,
            postback_data=event.postback.data,
        )

    if isinstance(event, MessageEvent):
        message = event.message
        if isinstance(message, TextMessageContent):
            return InboundEvent(
                kind=EventKind.text, user_id=user_id, reply_token=event.reply_token, text=message.text,
            )
        if isinstance(message, LocationMessageContent):
            return InboundEvent(
                kind=EventKind.location,
                user_id=user_id,
                reply_token=event.reply_token,
                location=Coordinates(lat=message.latitude, lng=message.longitude),
                text=message.address or "",
            )
        logger.debug("Ignoring %s message from user=%s", message.type, user_id)
        return None

    logger.debug("Ignoring %s event from user=%s", event.type, user_id)
    return None
