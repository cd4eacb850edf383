"""Runs the workers as asyncio tasks and applies the failure policy."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from pollhost.errors import WorkerFailed

logger = logging.getLogger(__name__)


class Worker(Protocol):
    name: str

    async def run(self) -> None:
        ...


class Supervisor:
    """Spawns workers, waits for them, and decides what a failure means.

    ``cascade``: the first failure cancels every other worker.
    ``isolate``: survivors keep running until they finish on their own.
    Either way the first failure is raised once all tasks have ended.
    A worker that returns normally never affects the others.
    """

    def __init__(self, workers: list[Worker], on_failure: str = "cascade") -> None:
        if on_failure not in ("cascade", "isolate"):
            raise ValueError(f"Unknown failure policy: {on_failure!r}")
        self._workers = workers
        self._on_failure = on_failure

    async def run(self) -> None:
        tasks = {
            asyncio.create_task(worker.run(), name=f"pollhost-{worker.name}"): worker
            for worker in self._workers
        }
        pending = set(tasks)
        first_failure: WorkerFailed | None = None

        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    worker = tasks[task]
                    if task.cancelled():
                        logger.info("%s worker cancelled", worker.name)
                        continue
                    exc = task.exception()
                    if exc is None:
                        logger.info("%s worker finished", worker.name)
                        continue

                    logger.error("%s worker failed", worker.name, exc_info=exc)
                    if first_failure is None:
                        first_failure = WorkerFailed(worker.name, exc)
                    if self._on_failure == "cascade":
                        for other in pending:
                            logger.warning("Stopping %s worker", tasks[other].name)
                            other.cancel()
        finally:
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        if first_failure is not None:
            raise first_failure from first_failure.cause
