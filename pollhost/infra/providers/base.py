"""LLM provider protocol definition."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pollhost.models.provider import LLMConfig, LLMMessage, LLMResponse


@runtime_checkable
class LLMProvider(Protocol):
    """Protocol for LLM providers.

    One call per invocation. Implementations raise on transport or model
    errors and never retry.
    """

    async def complete(
        self,
        messages: list[LLMMessage],
        config: LLMConfig | None = None,
    ) -> LLMResponse:
        """Generate a completion from the model."""
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...
