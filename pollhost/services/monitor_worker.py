"""Monitor worker: periodic poll refresh and host-initiated prompts."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

from pollhost.infra.db.polls import PollRepo
from pollhost.infra.db.replies import ReplyRepo
from pollhost.models.message import OutboundReply
from pollhost.services.generator import ResponseGenerator
from pollhost.services.policy import Emission, Thresholds, decide
from pollhost.services.state import SharedState, utcnow

logger = logging.getLogger(__name__)


def conversation_summary(poll_summary: str) -> str:
    """Context handed to every reply, rebuilt from the latest poll read."""
    return f"Current poll status:\n{poll_summary}"


class MonitorWorker:
    """Ticks on a fixed interval, refreshing the summary and nudging the chat."""

    name = "monitor"

    def __init__(
        self,
        poll_repo: PollRepo,
        reply_repo: ReplyRepo,
        generator: ResponseGenerator,
        shared: SharedState,
        poll_key: str = "q1",
        sentinel_id: str = "host-prompt",
        thresholds: Thresholds | None = None,
        tick_interval: float = 10,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._polls = poll_repo
        self._replies = reply_repo
        self._generator = generator
        self._shared = shared
        self._poll_key = poll_key
        self._sentinel_id = sentinel_id
        self._thresholds = thresholds or Thresholds()
        self._tick_interval = tick_interval
        self._clock = clock

    async def run(self) -> None:
        """Tick forever. The first failing tick ends the worker."""
        logger.info(
            "Monitor started (tick=%ss, idle>%ss, cooldown=%ss, poll update=%ss)",
            self._tick_interval,
            self._thresholds.idle_after,
            self._thresholds.idle_cooldown,
            self._thresholds.poll_update_after,
        )
        while True:
            await asyncio.sleep(self._tick_interval)
            await self.tick()

    async def tick(self) -> Emission:
        async with self._shared.hold() as conv:
            now = self._clock()

            poll = await self._polls.get(self._poll_key)
            poll_summary = poll.summary_text()
            conv.summary = conversation_summary(poll_summary)

            emission = decide(now, conv, self._thresholds)
            if emission is Emission.IDLE_PROMPT:
                text = await self._generator.idle_prompt(conv.summary)
            elif emission is Emission.POLL_UPDATE:
                text = await self._generator.poll_update(poll_summary)
            else:
                return Emission.NONE

            await self._replies.upsert(
                OutboundReply(id=self._sentinel_id, message=text, timestamp=self._clock())
            )
            conv.record_response(now)

        logger.info("Host prompt written (%s): %s", emission.value, text)
        return emission
