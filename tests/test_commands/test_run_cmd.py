"""Tests for the run command: startup failures and worker failures exit 1."""

import signal

import pytest
from click.testing import CliRunner

from pollhost.cli import cli
from pollhost.context import AppContext
from pollhost.models.message import InboundMessage
from pollhost.services.bridge import HostBridge
from pollhost.services.message_worker import MessageWorker
from pollhost.services.monitor_worker import MonitorWorker

from conftest import FakeMessageRepo, FakePollRepo, make_poll


class FakeMongo:
    reachable = True
    replica_set = True

    def __init__(self, uri: str, database: str) -> None:
        self.db = {}

    async def ping(self) -> bool:
        return self.reachable

    async def supports_change_streams(self) -> bool:
        return self.replica_set

    def close(self) -> None:
        pass


@pytest.fixture
def mongo(monkeypatch):
    monkeypatch.setattr("pollhost.context.MongoClient", FakeMongo)
    monkeypatch.setattr(FakeMongo, "reachable", True)
    monkeypatch.setattr(FakeMongo, "replica_set", True)
    # Keep the test runner's own signal handlers in place.
    monkeypatch.setattr(signal, "signal", lambda *args: None)
    return FakeMongo


@pytest.fixture
def invoke_run(tmp_path):
    def _invoke():
        return CliRunner().invoke(cli, ["--config", str(tmp_path / "config.toml"), "run"])
    return _invoke


def _use_bridge(monkeypatch, bridge: HostBridge) -> None:
    monkeypatch.setattr(AppContext, "build_bridge", lambda self: bridge)


class TestRunStartup:
    def test_unreachable_database(self, mongo, invoke_run):
        mongo.reachable = False

        result = invoke_run()

        assert result.exit_code == 1
        assert "Error: MongoDB not reachable" in result.output

    def test_standalone_server(self, mongo, invoke_run):
        mongo.replica_set = False

        result = invoke_run()

        assert result.exit_code == 1
        assert "change streams need a replica set" in result.output


class TestRunFailures:
    def _bridge(self, messages, polls, reply_repo, generator, shared, clock) -> HostBridge:
        return HostBridge(
            MessageWorker(messages, reply_repo, generator, shared, clock=clock),
            MonitorWorker(polls, reply_repo, generator, shared, tick_interval=0.01, clock=clock),
        )

    def test_worker_failure(self, mongo, invoke_run, monkeypatch, reply_repo, generator, shared, clock):
        messages = FakeMessageRepo()
        messages.end_with_timeout = False
        polls = FakePollRepo(make_poll(A=[]))
        polls.missing = True
        _use_bridge(monkeypatch, self._bridge(messages, polls, reply_repo, generator, shared, clock))

        result = invoke_run()

        assert result.exit_code == 1
        assert "Error: monitor worker failed" in result.output
        assert "Bridge stopped" in result.output

    def test_drain_failure_starts_no_worker(
        self, mongo, invoke_run, monkeypatch, reply_repo, generator, shared, clock
    ):
        messages = FakeMessageRepo([InboundMessage(id="m1"), InboundMessage(id="m2")])
        messages.fail_on = {"m1"}
        polls = FakePollRepo(make_poll(A=["u1"]))
        _use_bridge(monkeypatch, self._bridge(messages, polls, reply_repo, generator, shared, clock))

        result = invoke_run()

        assert result.exit_code == 1
        assert "Error: error marking message m1 as processed" in result.output
        assert polls.reads == 0
        assert reply_repo.writes == []

    def test_drain_scan_failure(self, mongo, invoke_run, monkeypatch, reply_repo, generator, shared, clock):
        messages = FakeMessageRepo()
        messages.scan_error = ConnectionError("store down")
        polls = FakePollRepo(make_poll(A=[]))
        _use_bridge(monkeypatch, self._bridge(messages, polls, reply_repo, generator, shared, clock))

        result = invoke_run()

        assert result.exit_code == 1
        assert "Error: error scanning unprocessed messages: store down" in result.output
        assert polls.reads == 0
