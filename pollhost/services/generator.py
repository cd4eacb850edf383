"""Response generator: persona-primed prompts in, model text out."""

from __future__ import annotations

import logging

from pollhost.config import PersonaConfig
from pollhost.errors import GenerationError
from pollhost.infra.providers.base import LLMProvider
from pollhost.models.provider import LLMConfig, LLMMessage

logger = logging.getLogger(__name__)


class ResponseGenerator:
    """Stateless wrapper that renders the persona template and calls the model.

    The template receives ``{context}`` (situational text such as the poll
    summary), ``{input}`` (what the user said, or a fixed cue for host
    prompts) and ``{max_words}``.
    """

    def __init__(
        self,
        provider: LLMProvider,
        persona: PersonaConfig,
        llm_config: LLMConfig | None = None,
    ) -> None:
        self._provider = provider
        self._persona = persona
        self._llm_config = llm_config or LLMConfig()
        # Fail at startup on a malformed template rather than on the first message.
        try:
            self.build_prompt("", "")
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f"Invalid persona template: {e}") from e

    def build_prompt(self, context: str, text: str) -> str:
        return self._persona.template.format(
            context=context,
            input=text,
            max_words=self._persona.max_words,
        )

    async def generate(self, text: str, context: str) -> str:
        """Single model call. Errors surface as GenerationError, never retried."""
        prompt = self.build_prompt(context, text)
        try:
            response = await self._provider.complete(
                [LLMMessage(role="user", content=prompt)], self._llm_config
            )
        except Exception as e:
            raise GenerationError(f"model error: {e}") from e
        logger.debug("Generated %d chars (model=%s)", len(response.content), response.model)
        return response.content.strip()

    async def reply(self, text: str, summary: str) -> str:
        """Answer a user message in the current conversation context."""
        return await self.generate(text, summary)

    async def idle_prompt(self, summary: str) -> str:
        """Generic continuation to re-engage a quiet audience."""
        return await self.generate(self._persona.idle_input, summary)

    async def poll_update(self, poll_summary: str) -> str:
        """Announce the current poll tallies."""
        return await self.generate(
            self._persona.poll_update_input, f"Poll update: {poll_summary}"
        )
