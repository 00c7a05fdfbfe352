from __future__ import annotations

from linebot.v3.messaging import AsyncMessagingApi, PushMessageRequest, ReplyMessageRequest

from ..chat.channel import ReplyChannel
from ..chat.messages import OutboundMessage
from .line_messages import to_line_messages

MAX_MESSAGES_PER_REQUEST = 5


class LineReplyChannel(ReplyChannel):
    def __init__(self, api: AsyncMessagingApi, user_id: str, reply_token: str | None = None) -> None:
        super().__init__(user_id, reply_token)
        self._api = api

    async def _reply(self, messages: list[OutboundMessage]) -> None:
        head = messages[:MAX_MESSAGES_PER_REQUEST]
        await self._api.reply_message(
            ReplyMessageRequest(reply_token=self.reply_token, messages=to_line_messages(head))
        )
        if len(messages) > MAX_MESSAGES_PER_REQUEST:
            await self._push(messages[MAX_MESSAGES_PER_REQUEST:])

    async def _push(self, messages: list[OutboundMessage]) -> None:
        for start in range(0, len(messages), MAX_MESSAGES_PER_REQUEST):
            chunk = messages[start:start + MAX_MESSAGES_PER_REQUEST]
            await self._api.push_message(
                PushMessageRequest(to=self.user_id, messages=to_line_messages(chunk))
            )
