"""Monitor decision policy: when to emit an idle prompt or a poll update."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from pollhost.config import MonitorConfig
from pollhost.services.state import ConversationState


class Emission(str, Enum):
    NONE = "none"
    IDLE_PROMPT = "idle_prompt"
    POLL_UPDATE = "poll_update"


@dataclass(frozen=True)
class Thresholds:
    """Elapsed-time limits, in seconds."""

    idle_after: float = 30
    idle_cooldown: float = 10
    poll_update_after: float = 15

    @classmethod
    def from_config(cls, config: MonitorConfig) -> Thresholds:
        return cls(
            idle_after=config.idle_after,
            idle_cooldown=config.idle_cooldown,
            poll_update_after=config.poll_update_after,
        )


def decide(now: datetime, state: ConversationState, thresholds: Thresholds) -> Emission:
    """Pick what the monitor should emit this tick.

    An idle nudge wins over a poll update when both are due.
    """
    since_user = now - state.last_user_message_at
    since_response = now - state.last_response_at

    if (
        since_user > timedelta(seconds=thresholds.idle_after)
        and since_response >= timedelta(seconds=thresholds.idle_cooldown)
    ):
        return Emission.IDLE_PROMPT
    if since_response >= timedelta(seconds=thresholds.poll_update_after):
        return Emission.POLL_UPDATE
    return Emission.NONE
