"""Text generation backend used by the narrative pipeline."""

import logging
from typing import Protocol

import anthropic

from dyor_scan.config import settings

logger = logging.getLogger(__name__)


class TextServiceUnavailable(RuntimeError):
    pass


class TextService(Protocol):
    async def complete(self, prompt: str, max_tokens: int) -> str:
        """Return generated text for ``prompt``; raise on any failure."""
        ...


class AnthropicTextService:
    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        temperature: float = 0.7,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.anthropic_api_key
        self.model = model or settings.llm_model
        self.temperature = temperature
        self._client = anthropic.AsyncAnthropic(api_key=self.api_key) if self.api_key else None

    async def complete(self, prompt: str, max_tokens: int) -> str:
        if self._client is None:
            raise TextServiceUnavailable("ANTHROPIC_API_KEY is not set")

        message = await self._client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=self.temperature,
            messages=[{"role": "user", "content": prompt}],
        )
        text = "".join(
            block.text for block in message.content if getattr(block, "type", "") == "text"
        ).strip()
        if not text:
            raise TextServiceUnavailable("Empty completion")
        return text
