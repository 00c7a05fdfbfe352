from __future__ import annotations

from functools import lru_cache

from fastapi import HTTPException, Request
from linebot.v3 import WebhookParser

from .messaging.config import DEFAULT_LINE_CONFIG
from .messaging.dispatcher import EventDispatcher


@lru_cache(maxsize=1)
def get_parser() -> WebhookParser:
    return WebhookParser(DEFAULT_LINE_CONFIG.channel_secret)


def get_dispatcher(request: Request) -> EventDispatcher:
    """Return the dispatcher built at startup; 503 until the lifespan has run."""
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        raise HTTPException(status_code=503, detail="Bot is not ready")
    return dispatcher
