"""Response parsing shared by the OpenAI-compatible HTTP providers."""

from __future__ import annotations

from pollhost.models.provider import LLMResponse


def parse_chat_completion(data: dict, fallback_model: str = "") -> LLMResponse:
    """Map an OpenAI-style chat completion body to an LLMResponse."""
    choice = data["choices"][0]
    message = choice["message"]

    raw_usage = data.get("usage", {})
    usage = {
        "input_tokens": raw_usage.get("prompt_tokens", 0),
        "output_tokens": raw_usage.get("completion_tokens", 0),
    }

    return LLMResponse(
        content=message.get("content", "") or "",
        model=data.get("model", fallback_model),
        finish_reason=choice.get("finish_reason", "") or "",
        usage=usage,
    )
