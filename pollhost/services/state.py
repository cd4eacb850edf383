"""Shared conversation state and the coordination lock guarding it.

Both workers reach the record only through ``SharedState.hold()``, so a
message-handling cycle and a monitor tick never interleave.
"""

from __future__ import annotations

import asyncio
import dataclasses
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ConversationState:
    """Last activity times and the current poll-derived summary."""

    last_user_message_at: datetime = EPOCH
    last_response_at: datetime = EPOCH
    summary: str = ""

    def record_user_message(self, at: datetime) -> None:
        # Timestamps never move backwards.
        if at > self.last_user_message_at:
            self.last_user_message_at = at

    def record_response(self, at: datetime) -> None:
        if at > self.last_response_at:
            self.last_response_at = at


class SharedState:
    """Owns the single ConversationState and the lock that serializes access."""

    def __init__(self, state: ConversationState | None = None) -> None:
        self._state = state or ConversationState()
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def hold(self) -> AsyncIterator[ConversationState]:
        """Acquire the coordination lock and expose the mutable record."""
        async with self._lock:
            yield self._state

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    async def snapshot(self) -> ConversationState:
        """Return a detached copy taken under the lock."""
        async with self.hold() as conv:
            return dataclasses.replace(conv)
