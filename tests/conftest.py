"""Shared fakes for the bridge workers."""

from __future__ import annotations

import asyncio
import dataclasses
from datetime import datetime, timedelta, timezone

import pytest

from pollhost.config import PersonaConfig
from pollhost.errors import PollNotFoundError, SubscriptionTimeout
from pollhost.models.message import InboundMessage, OutboundReply
from pollhost.models.poll import PollOption, PollSnapshot
from pollhost.models.provider import LLMResponse
from pollhost.services.generator import ResponseGenerator
from pollhost.services.state import SharedState

T0 = datetime(2024, 9, 14, 18, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeMessageRepo:
    def __init__(self, messages=(), log: list | None = None) -> None:
        self.docs = {m.id: m for m in messages}
        self.log = log if log is not None else []
        self.fail_on: set[str] = set()
        self.batches: list[list[InboundMessage]] = []
        self.end_with_timeout = True
        self.updates = 0
        self.scan_error: Exception | None = None

    async def find_unprocessed(self):
        if self.scan_error is not None:
            raise self.scan_error
        for msg in list(self.docs.values()):
            if not msg.processed:
                yield msg

    async def mark_processed(self, message_id: str) -> None:
        if message_id in self.fail_on:
            raise RuntimeError(f"update of {message_id} failed")
        self.updates += 1
        self.log.append(("mark", message_id))
        msg = self.docs.get(message_id) or InboundMessage(id=message_id)
        self.docs[message_id] = dataclasses.replace(msg, processed=True)

    async def watch_unprocessed(self, timeout=None):
        for batch in self.batches:
            yield batch
        if self.end_with_timeout:
            raise SubscriptionTimeout("deadline")


class FakeReplyRepo:
    def __init__(self, log: list | None = None) -> None:
        self.replies: dict[str, OutboundReply] = {}
        self.writes: list[OutboundReply] = []
        self.log = log if log is not None else []
        self.fail = False

    async def upsert(self, reply: OutboundReply) -> None:
        if self.fail:
            raise RuntimeError("write failed")
        self.log.append(("reply", reply.id))
        self.writes.append(reply)
        self.replies[reply.id] = reply


class FakePollRepo:
    """Serves snapshots in rotation; yields to the loop mid-read."""

    def __init__(self, *snapshots: PollSnapshot) -> None:
        self.snapshots = list(snapshots)
        self.reads = 0
        self.missing = False

    async def get(self, key: str) -> PollSnapshot:
        if self.missing:
            raise PollNotFoundError(key)
        snapshot = self.snapshots[self.reads % len(self.snapshots)]
        self.reads += 1
        await asyncio.sleep(0)
        return snapshot


class FakeProvider:
    """Records every prompt and answers with a fixed text."""

    def __init__(self, text: str = "Namaskar, deviyon aur sajjanon!") -> None:
        self.text = text
        self.prompts: list[str] = []
        self.configs: list = []
        self.error: Exception | None = None
        self.events: list[str] = []

    async def complete(self, messages, config=None) -> LLMResponse:
        self.events.append("start")
        self.prompts.append(messages[-1].content)
        self.configs.append(config)
        await asyncio.sleep(0)
        self.events.append("end")
        if self.error is not None:
            raise self.error
        return LLMResponse(content=self.text, model="fake")

    async def close(self) -> None:
        pass


def make_poll(question: str = "Who wrote Gitanjali?", **voters) -> PollSnapshot:
    options = {}
    for i, (label, names) in enumerate(voters.items()):
        options[f"opt{i}"] = PollOption(label=label, text=f"Answer {label}", voters=tuple(names))
    return PollSnapshot(question=question, options=options, id="q1")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def shared():
    return SharedState()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def persona():
    return PersonaConfig(template="[{context}] <{input}> ({max_words})", max_words=30)


@pytest.fixture
def generator(provider, persona):
    return ResponseGenerator(provider, persona)


@pytest.fixture
def log():
    return []


@pytest.fixture
def reply_repo(log):
    return FakeReplyRepo(log)
