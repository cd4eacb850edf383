"""Bridge lifecycle: drain the backlog, then supervise both workers."""

from __future__ import annotations

import logging

from pollhost.services.message_worker import MessageWorker
from pollhost.services.monitor_worker import MonitorWorker
from pollhost.services.supervisor import Supervisor

logger = logging.getLogger(__name__)


class HostBridge:
    """Startup order and supervision for the message and monitor workers."""

    def __init__(
        self,
        message_worker: MessageWorker,
        monitor_worker: MonitorWorker,
        on_failure: str = "cascade",
    ) -> None:
        self._message_worker = message_worker
        self._monitor_worker = monitor_worker
        self._supervisor = Supervisor([message_worker, monitor_worker], on_failure=on_failure)

    async def run(self) -> None:
        """Drain, then run both workers until they end.

        A drain failure propagates before any worker starts.
        """
        await self._message_worker.drain_backlog()
        logger.info("Starting workers")
        await self._supervisor.run()
