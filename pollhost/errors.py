"""Exception types raised across the bridge."""

from __future__ import annotations


class PollhostError(Exception):
    """Base class for pollhost errors."""


class StartupError(PollhostError):
    """Initialization failed (database unreachable, provider misconfigured)."""


class BacklogDrainError(PollhostError):
    """The backlog could not be scanned, or a message could not be marked processed.

    ``message_id`` is None when the scan itself failed.
    """

    def __init__(self, message_id: str | None, cause: BaseException) -> None:
        if message_id is None:
            detail = f"error scanning unprocessed messages: {cause}"
        else:
            detail = f"error marking message {message_id} as processed: {cause}"
        super().__init__(detail)
        self.message_id = message_id


class GenerationError(PollhostError):
    """The generation backend failed to produce a response."""


class PollNotFoundError(PollhostError):
    """The well-known poll document does not exist."""

    def __init__(self, key: str) -> None:
        super().__init__(f"poll document {key!r} not found")
        self.key = key


class SubscriptionTimeout(PollhostError):
    """The live subscription reached its deadline.

    Not a failure: the message worker treats it as a clean end of listening.
    """


class WorkerFailed(PollhostError):
    """A supervised worker stopped with an error."""

    def __init__(self, worker: str, cause: BaseException) -> None:
        super().__init__(f"{worker} worker failed: {cause}")
        self.worker = worker
        self.cause = cause
