from __future__ import annotations

from abc import ABC, abstractmethod

from .messages import OutboundMessage


class ReplyChannel(ABC):
    """Where the replies for one inbound event go.

    The reply token is single use: the first ``send`` replies, later sends push
    to the user id instead.
    """

    def __init__(self, user_id: str, reply_token: str | None = None) -> None:
        self.user_id = user_id
        self.reply_token = reply_token
        self._reply_used = False

    async def send(self, messages: list[OutboundMessage]) -> None:
        if not messages:
            return
        if self.reply_token and not self._reply_used:
            self._reply_used = True
            await self._reply(messages)
        else:
            await self._push(messages)

    @abstractmethod
    async def _reply(self, messages: list[OutboundMessage]) -> None: ...

    @abstractmethod
    async def _push(self, messages: list[OutboundMessage]) -> None: ...
