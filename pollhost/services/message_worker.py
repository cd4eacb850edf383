"""Message worker: backlog drain, then one reply per newly inserted message."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from enum import Enum

from pollhost.errors import BacklogDrainError, SubscriptionTimeout
from pollhost.infra.db.messages import MessageRepo
from pollhost.infra.db.replies import ReplyRepo
from pollhost.models.message import InboundMessage, OutboundReply
from pollhost.services.generator import ResponseGenerator
from pollhost.services.state import SharedState, utcnow

logger = logging.getLogger(__name__)


class ListenerState(str, Enum):
    IDLE = "idle"
    HANDLING = "handling"


class MessageWorker:
    """Replies to inbound chat messages, one at a time, in delivery order."""

    name = "message"

    def __init__(
        self,
        message_repo: MessageRepo,
        reply_repo: ReplyRepo,
        generator: ResponseGenerator,
        shared: SharedState,
        listen_timeout: float | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._messages = message_repo
        self._replies = reply_repo
        self._generator = generator
        self._shared = shared
        self._listen_timeout = listen_timeout or None
        self._clock = clock
        self._state = ListenerState.IDLE

    @property
    def state(self) -> ListenerState:
        return self._state

    async def drain_backlog(self) -> int:
        """Mark every pre-existing unprocessed message as processed, without replying.

        The first failed update, or a failed scan, aborts the drain with
        BacklogDrainError.
        """
        drained = 0
        try:
            async for msg in self._messages.find_unprocessed():
                try:
                    await self._messages.mark_processed(msg.id)
                except Exception as e:
                    raise BacklogDrainError(msg.id, e) from e
                logger.info("Existing message marked as processed: %s", msg.id)
                drained += 1
        except BacklogDrainError:
            raise
        except Exception as e:
            raise BacklogDrainError(None, e) from e
        logger.info("Backlog drained (%d message(s))", drained)
        return drained

    async def run(self) -> None:
        await self.listen()

    async def listen(self) -> None:
        """Handle messages from the live subscription until it times out.

        A subscription timeout ends the worker cleanly; any other error
        propagates.
        """
        logger.info("Listening for new messages")
        try:
            async for batch in self._messages.watch_unprocessed(timeout=self._listen_timeout):
                for msg in batch:
                    await self.handle_message(msg)
        except SubscriptionTimeout:
            logger.info("Timeout reached")

    async def handle_message(self, msg: InboundMessage) -> OutboundReply:
        """Generate, persist and acknowledge a reply while holding the lock."""
        async with self._shared.hold() as conv:
            self._state = ListenerState.HANDLING
            try:
                conv.record_user_message(self._clock())
                text = await self._generator.reply(msg.message, conv.summary)
                reply = OutboundReply(id=msg.id, message=text, timestamp=self._clock())
                await self._replies.upsert(reply)
                # Only acknowledge once the reply is stored.
                await self._messages.mark_processed(msg.id)
                conv.record_response(self._clock())
            finally:
                self._state = ListenerState.IDLE

        logger.info("Response written for %s: %s", msg.id, text)
        return reply
