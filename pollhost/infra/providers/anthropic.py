"""Anthropic LLM provider using the anthropic SDK."""

from __future__ import annotations

import logging

import anthropic

from pollhost.models.provider import LLMConfig, LLMMessage, LLMResponse

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"


class AnthropicProvider:
    """LLM provider using the Anthropic API."""

    def __init__(self, api_key: str = "", model: str = "") -> None:
        # The SDK retries transient failures by default; callers own that policy.
        self._client = anthropic.AsyncAnthropic(api_key=api_key or None, max_retries=0)
        self._default_model = model or DEFAULT_MODEL

    async def complete(
        self,
        messages: list[LLMMessage],
        config: LLMConfig | None = None,
    ) -> LLMResponse:
        """Generate a completion using the Anthropic API."""
        config = config or LLMConfig()
        model = config.model or self._default_model
        response = await self._client.messages.create(
            model=model,
            max_tokens=config.max_tokens,
            messages=[msg.to_dict() for msg in messages],
            temperature=config.temperature,
        )

        content_text = "".join(
            block.text for block in response.content if block.type == "text"
        )
        return LLMResponse(
            content=content_text,
            model=response.model,
            finish_reason=response.stop_reason or "",
            usage={
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
        )

    async def close(self) -> None:
        await self._client.close()
