from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from linebot.v3.messaging import ApiException
from linebot.v3.webhooks import Event

from ..chat.channel import ReplyChannel
from ..chat.models import InboundEvent
from ..chat.orchestrator import ConversationOrchestrator
from .events import translate_event

logger = logging.getLogger(__name__)

ChannelFactory = Callable[[InboundEvent], ReplyChannel]


def group_by_user(events: list[InboundEvent]) -> dict[str, list[InboundEvent]]:
    """Group events per user, keeping delivery order inside each group."""
    grouped: dict[str, list[InboundEvent]] = {}
    for event in events:
        grouped.setdefault(event.user_id, []).append(event)
    return grouped


class EventDispatcher:
    """Runs one webhook batch: different users concurrently, one user's events in order."""

    def __init__(self, orchestrator: ConversationOrchestrator, channel_factory: ChannelFactory) -> None:
        self._orchestrator = orchestrator
        self._channel_factory = channel_factory

    async def dispatch(self, events: list[Event]) -> int:
        """Handle a parsed batch; returns how many events were routed to the orchestrator."""
        inbound = [e for e in (translate_event(raw) for raw in events) if e is not None]
        grouped = group_by_user(inbound)
        await asyncio.gather(*(self._run_for_user(user_events) for user_events in grouped.values()))
        return len(inbound)

    async def _run_for_user(self, events: list[InboundEvent]) -> None:
        for event in events:
            try:
                await self._orchestrator.handle(event, self._channel_factory(event))
            except ApiException as exc:
                request_id = (exc.headers or {}).get("x-line-request-id")
                logger.error(
                    "LINE API error status=%s request_id=%s body=%s", exc.status, request_id, exc.body,
                )
            except Exception:
                logger.exception("Failed to handle %s event for user=%s", event.kind.value, event.user_id)
