"""Tests for worker supervision and the failure policies."""

from __future__ import annotations

import asyncio

import pytest

from pollhost.errors import WorkerFailed
from pollhost.models.message import InboundMessage
from pollhost.services.bridge import HostBridge
from pollhost.services.message_worker import MessageWorker
from pollhost.services.monitor_worker import MonitorWorker
from pollhost.services.supervisor import Supervisor

from conftest import FakeMessageRepo, FakePollRepo, make_poll


class StubWorker:
    def __init__(self, name: str, delay: float = 0, error: Exception | None = None, forever: bool = False):
        self.name = name
        self.delay = delay
        self.error = error
        self.forever = forever
        self.cancelled = False
        self.finished = False

    async def run(self) -> None:
        try:
            await asyncio.sleep(self.delay)
            if self.error:
                raise self.error
            while self.forever:
                await asyncio.sleep(0.005)
            self.finished = True
        except asyncio.CancelledError:
            self.cancelled = True
            raise


class TestSupervisor:
    @pytest.mark.asyncio
    async def test_all_clean(self):
        a, b = StubWorker("a", 0.01), StubWorker("b", 0.02)
        await Supervisor([a, b]).run()
        assert a.finished and b.finished

    @pytest.mark.asyncio
    async def test_cascade_cancels_survivor(self):
        failing = StubWorker("message", 0.01, error=RuntimeError("store down"))
        survivor = StubWorker("monitor", forever=True)

        with pytest.raises(WorkerFailed) as exc_info:
            await asyncio.wait_for(Supervisor([failing, survivor]).run(), timeout=1)

        assert exc_info.value.worker == "message"
        assert isinstance(exc_info.value.cause, RuntimeError)
        assert survivor.cancelled

    @pytest.mark.asyncio
    async def test_isolate_keeps_survivor_running(self):
        failing = StubWorker("message", 0.01, error=RuntimeError("store down"))
        survivor = StubWorker("monitor", 0.05)

        with pytest.raises(WorkerFailed):
            await asyncio.wait_for(
                Supervisor([failing, survivor], on_failure="isolate").run(), timeout=1
            )

        assert survivor.finished
        assert not survivor.cancelled

    @pytest.mark.asyncio
    async def test_clean_exit_does_not_stop_others(self):
        quick = StubWorker("message", 0)
        slow = StubWorker("monitor", 0.03)
        await Supervisor([quick, slow]).run()
        assert quick.finished and slow.finished

    @pytest.mark.asyncio
    async def test_cancel_stops_all_workers(self):
        a, b = StubWorker("a", forever=True), StubWorker("b", forever=True)
        task = asyncio.create_task(Supervisor([a, b]).run())
        await asyncio.sleep(0.02)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert a.cancelled and b.cancelled

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            Supervisor([], on_failure="retry")


class TestHostBridge:
    @pytest.mark.asyncio
    async def test_timeout_ends_listener_but_monitor_keeps_ticking(
        self, reply_repo, generator, shared, clock
    ):
        messages = FakeMessageRepo()
        messages.batches = [[InboundMessage(id="m1", message="hi")]]
        polls = FakePollRepo(make_poll(A=["u1"]))
        message_worker = MessageWorker(messages, reply_repo, generator, shared, clock=clock)
        monitor_worker = MonitorWorker(
            polls, reply_repo, generator, shared, tick_interval=0.01, clock=clock
        )
        bridge = HostBridge(message_worker, monitor_worker)

        task = asyncio.create_task(bridge.run())
        await asyncio.sleep(0.1)

        assert not task.done()
        assert "m1" in reply_repo.replies
        reads = polls.reads
        await asyncio.sleep(0.05)
        assert polls.reads > reads

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_drain_failure_starts_no_worker(self, reply_repo, generator, shared, clock):
        messages = FakeMessageRepo([InboundMessage(id="m1")])
        messages.fail_on = {"m1"}
        polls = FakePollRepo(make_poll(A=[]))
        bridge = HostBridge(
            MessageWorker(messages, reply_repo, generator, shared, clock=clock),
            MonitorWorker(polls, reply_repo, generator, shared, tick_interval=0, clock=clock),
        )

        with pytest.raises(Exception, match="m1"):
            await bridge.run()
        assert polls.reads == 0

    @pytest.mark.asyncio
    async def test_monitor_failure_cascades(self, reply_repo, generator, shared, clock):
        messages = FakeMessageRepo()
        messages.end_with_timeout = False
        polls = FakePollRepo(make_poll(A=[]))
        polls.missing = True
        bridge = HostBridge(
            MessageWorker(messages, reply_repo, generator, shared, clock=clock),
            MonitorWorker(polls, reply_repo, generator, shared, tick_interval=0.01, clock=clock),
        )

        with pytest.raises(WorkerFailed) as exc_info:
            await asyncio.wait_for(bridge.run(), timeout=1)
        assert exc_info.value.worker == "monitor"
