"""Message repository - inbound chat messages and their change feed."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from pollhost.errors import SubscriptionTimeout
from pollhost.infra.db._keys import key_filter
from pollhost.models.message import InboundMessage

logger = logging.getLogger(__name__)

UNPROCESSED = {"processed": False}

# Inserts (and client-side replaces) of documents that still need a reply.
_WATCH_PIPELINE = [
    {
        "$match": {
            "operationType": {"$in": ["insert", "replace"]},
            "fullDocument.processed": False,
        }
    }
]


class MessageRepo:
    """Queries, updates and live subscription for inbound messages."""

    def __init__(self, db, collection: str, max_await_ms: int = 250) -> None:
        self._col = db[collection]
        self._max_await_ms = max_await_ms

    async def find_unprocessed(self) -> AsyncIterator[InboundMessage]:
        """Yield every message that has not been processed yet."""
        cursor = self._col.find(UNPROCESSED)
        async for doc in cursor:
            yield InboundMessage.from_doc(doc)

    async def count_unprocessed(self) -> int:
        return await self._col.count_documents(UNPROCESSED)

    async def mark_processed(self, message_id: str) -> None:
        """Set ``processed = true`` on one message.

        Raises LookupError when the message no longer exists.
        """
        result = await self._col.update_one(
            key_filter(message_id), {"$set": {"processed": True}}
        )
        if result.matched_count == 0:
            raise LookupError(f"message {message_id} not found")

    async def watch_unprocessed(
        self, timeout: float | None = None
    ) -> AsyncIterator[list[InboundMessage]]:
        """Yield batches of unprocessed messages as they appear.

        The first batch is the set that is unprocessed when the subscription
        opens; later batches come from the change stream. When *timeout*
        seconds have elapsed since the call, SubscriptionTimeout is raised.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout if timeout else None

        async with self._col.watch(
            _WATCH_PIPELINE, max_await_time_ms=self._max_await_ms
        ) as stream:
            initial = [InboundMessage.from_doc(doc) async for doc in self._col.find(UNPROCESSED)]
            pending_ids = {msg.id for msg in initial}
            if initial:
                yield initial

            while True:
                change = await self._next_change(stream, deadline, loop)
                batch = []
                while change is not None:
                    msg = InboundMessage.from_doc(change["fullDocument"])
                    if msg.id in pending_ids:
                        # Already delivered in the initial snapshot.
                        pending_ids.discard(msg.id)
                    else:
                        batch.append(msg)
                    change = await stream.try_next()
                if batch:
                    logger.debug("Change stream delivered %d message(s)", len(batch))
                    yield batch

    @staticmethod
    async def _next_change(stream, deadline: float | None, loop) -> dict:
        if deadline is None:
            return await stream.next()
        remaining = deadline - loop.time()
        if remaining <= 0:
            raise SubscriptionTimeout("message subscription deadline reached")
        try:
            return await asyncio.wait_for(stream.next(), timeout=remaining)
        except asyncio.TimeoutError as e:
            raise SubscriptionTimeout("message subscription deadline reached") from e
