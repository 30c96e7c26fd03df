"""Language-model client abstraction with an Anthropic API backend."""

from __future__ import annotations

from abc import ABC, abstractmethod

import anthropic

from qbot.config import AIConfig, AnthropicConfig
from qbot.errors import LLMError
from qbot.log import get_logger

logger = get_logger(__name__)


class LLMClient(ABC):
    """Turns a system prompt plus one user question into answer text."""

    @abstractmethod
    async def complete(self, prompt_template: str, user_text: str) -> str:
        """Return the model's answer.

        Raises ``LLMError`` on any backend failure or when the model
        produces no text. Callers are responsible for enforcing a timeout.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        ...


class AnthropicClient(LLMClient):
    """Anthropic API backend using the official SDK."""

    def __init__(self, config: AnthropicConfig, ai_config: AIConfig):
        self._client = anthropic.AsyncAnthropic(
            api_key=config.api_key,
            base_url=config.base_url,
            max_retries=config.max_retries,
            timeout=config.timeout,
        )
        self._ai = ai_config

    @property
    def model_name(self) -> str:
        return self._ai.model

    async def complete(self, prompt_template: str, user_text: str) -> str:
        logger.debug("api_request", model=self._ai.model, prompt_length=len(user_text))
        try:
            response = await self._client.messages.create(
                model=self._ai.model,
                max_tokens=self._ai.max_tokens,
                temperature=self._ai.temperature,
                system=prompt_template,
                messages=[{"role": "user", "content": user_text}],
            )
        except anthropic.APIError as e:
            raise LLMError(f"Anthropic API error: {e}") from e

        logger.debug(
            "api_response",
            model=self._ai.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            stop_reason=response.stop_reason,
        )
        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        ).strip()
        if not text:
            raise LLMError("Model returned an empty answer")
        return text
