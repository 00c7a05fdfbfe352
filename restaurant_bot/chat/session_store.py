from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from .models import Session


class SessionStore:
    """In-process sessions keyed by user id, with one lock per user."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def get(self, user_id: str) -> Session:
        session = self._sessions.get(user_id)
        if session is None:
            session = Session()
            self._sessions[user_id] = session
        return session

    def put(self, user_id: str, session: Session) -> None:
        self._sessions[user_id] = session

    @asynccontextmanager
    async def locked(self, user_id: str) -> AsyncIterator[None]:
        """Hold the user's lock; events for one user never interleave."""
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        async with lock:
            yield
