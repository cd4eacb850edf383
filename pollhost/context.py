"""AppContext: wires DB, config, provider and workers together."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pollhost.config import AppConfig, load_config
from pollhost.errors import StartupError
from pollhost.infra.db.client import MongoClient

if TYPE_CHECKING:
    from pathlib import Path

    from pollhost.infra.db.messages import MessageRepo
    from pollhost.infra.db.polls import PollRepo
    from pollhost.infra.db.replies import ReplyRepo
    from pollhost.infra.providers.base import LLMProvider
    from pollhost.services.bridge import HostBridge
    from pollhost.services.generator import ResponseGenerator
    from pollhost.services.message_worker import MessageWorker
    from pollhost.services.monitor_worker import MonitorWorker
    from pollhost.services.state import SharedState

logger = logging.getLogger(__name__)


class AppContext:
    """Central wiring for all application dependencies.

    Lazily builds components on first access. Call `initialize()` to
    connect to MongoDB before touching any repository.
    """

    def __init__(self, config: AppConfig | None = None, config_path: Path | None = None) -> None:
        self.config = config or load_config(config_path)
        self._mongo: MongoClient | None = None
        self._message_repo: MessageRepo | None = None
        self._reply_repo: ReplyRepo | None = None
        self._poll_repo: PollRepo | None = None
        self._provider: LLMProvider | None = None
        self._generator: ResponseGenerator | None = None
        self._shared_state: SharedState | None = None
        self._message_worker: MessageWorker | None = None
        self._monitor_worker: MonitorWorker | None = None

    async def initialize(self, require_change_streams: bool = False) -> None:
        """Connect to MongoDB.

        Raises StartupError if it is unreachable, or if *require_change_streams*
        is set and the server cannot serve them.
        """
        self._mongo = MongoClient(
            uri=self.config.mongodb.uri,
            database=self.config.mongodb.database,
        )
        if not await self._mongo.ping():
            raise StartupError(f"MongoDB not reachable at {self.config.mongodb.uri}")
        if require_change_streams and not await self._mongo.supports_change_streams():
            raise StartupError(
                f"MongoDB at {self.config.mongodb.uri} is standalone; "
                "change streams need a replica set"
            )
        logger.info("AppContext initialized")

    async def close(self) -> None:
        """Close all connections."""
        if self._provider is not None:
            await self._provider.close()
        if self._mongo:
            self._mongo.close()
        logger.info("AppContext closed")

    @property
    def mongo(self) -> MongoClient:
        if self._mongo is None:
            raise RuntimeError("AppContext not initialized. Call initialize() first.")
        return self._mongo

    @property
    def message_repo(self) -> MessageRepo:
        if self._message_repo is None:
            from pollhost.infra.db.messages import MessageRepo

            self._message_repo = MessageRepo(self.mongo.db, self.config.collections.messages)
        return self._message_repo

    @property
    def reply_repo(self) -> ReplyRepo:
        if self._reply_repo is None:
            from pollhost.infra.db.replies import ReplyRepo

            self._reply_repo = ReplyRepo(self.mongo.db, self.config.collections.replies)
        return self._reply_repo

    @property
    def poll_repo(self) -> PollRepo:
        if self._poll_repo is None:
            from pollhost.infra.db.polls import PollRepo

            self._poll_repo = PollRepo(self.mongo.db, self.config.collections.polls)
        return self._poll_repo

    @property
    def provider(self) -> LLMProvider:
        if self._provider is None:
            from pollhost.infra.providers.registry import get_provider

            try:
                self._provider = get_provider(self.config.host.provider, self.config)
            except Exception as e:
                raise StartupError(f"Cannot create LLM provider: {e}") from e
        return self._provider

    @property
    def generator(self) -> ResponseGenerator:
        if self._generator is None:
            from pollhost.models.provider import LLMConfig
            from pollhost.services.generator import ResponseGenerator

            host = self.config.host
            try:
                self._generator = ResponseGenerator(
                    provider=self.provider,
                    persona=self.config.persona,
                    llm_config=LLMConfig(
                        model=host.model,
                        max_tokens=host.max_tokens,
                        temperature=host.temperature,
                    ),
                )
            except ValueError as e:
                raise StartupError(str(e)) from e
        return self._generator

    @property
    def shared_state(self) -> SharedState:
        if self._shared_state is None:
            from pollhost.services.state import SharedState

            self._shared_state = SharedState()
        return self._shared_state

    @property
    def message_worker(self) -> MessageWorker:
        if self._message_worker is None:
            from pollhost.services.message_worker import MessageWorker

            self._message_worker = MessageWorker(
                message_repo=self.message_repo,
                reply_repo=self.reply_repo,
                generator=self.generator,
                shared=self.shared_state,
                listen_timeout=self.config.host.listen_timeout,
            )
        return self._message_worker

    @property
    def monitor_worker(self) -> MonitorWorker:
        if self._monitor_worker is None:
            from pollhost.services.monitor_worker import MonitorWorker
            from pollhost.services.policy import Thresholds

            self._monitor_worker = MonitorWorker(
                poll_repo=self.poll_repo,
                reply_repo=self.reply_repo,
                generator=self.generator,
                shared=self.shared_state,
                poll_key=self.config.poll.key,
                sentinel_id=self.config.host.sentinel_id,
                thresholds=Thresholds.from_config(self.config.monitor),
                tick_interval=self.config.monitor.tick_interval,
            )
        return self._monitor_worker

    def build_bridge(self) -> HostBridge:
        from pollhost.services.bridge import HostBridge

        return HostBridge(
            message_worker=self.message_worker,
            monitor_worker=self.monitor_worker,
            on_failure=self.config.supervisor.on_failure,
        )
