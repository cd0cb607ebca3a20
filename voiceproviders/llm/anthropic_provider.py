"""Anthropic LLM client."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from typing import Optional

import structlog

from voiceproviders.core.config import LLMConfig
from voiceproviders.core.protocols import LLMProvider
from voiceproviders.core.types import Message

logger = structlog.get_logger()

DEFAULT_MODEL = "claude-3-5-sonnet-20241022"


class AnthropicLLM(LLMProvider):
    """Anthropic Claude messages client."""

    def __init__(self, config: Optional[LLMConfig] = None):
        self.config = config or LLMConfig()
        self._client = None

    @property
    def model(self) -> str:
        return self.config.model or DEFAULT_MODEL

    def _ensure_client(self):
        """Lazy initialize the Anthropic client."""
        if self._client is None:
            from anthropic import AsyncAnthropic

            api_key = self.config.api_key or os.environ.get("ANTHROPIC_API_KEY")
            if not api_key:
                raise ValueError("Anthropic API key required")

            self._client = AsyncAnthropic(api_key=api_key, base_url=self.config.base_url)
            logger.info("Anthropic client initialized", model=self.model)

    @staticmethod
    def _build_messages(prompt: str, context: list[Message] | None) -> list[dict]:
        # System prompts go in a separate field; only user/assistant turns here
        messages = [
            {"role": msg.role, "content": msg.content}
            for msg in context or []
            if msg.role != "system"
        ]
        messages.append({"role": "user", "content": prompt})
        return messages

    async def generate(self, prompt: str, context: list[Message] | None = None) -> str:
        """Generate a response using Anthropic."""
        self._ensure_client()

        response = await self._client.messages.create(
            model=self.model,
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
            system=self.config.system_prompt,
            messages=self._build_messages(prompt, context),
        )

        return "".join(block.text for block in response.content if block.type == "text")

    async def generate_stream(
        self, prompt: str, context: list[Message] | None = None
    ) -> AsyncIterator[str]:
        """Generate a streaming response."""
        self._ensure_client()

        async with self._client.messages.stream(
            model=self.model,
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
            system=self.config.system_prompt,
            messages=self._build_messages(prompt, context),
        ) as stream:
            async for text in stream.text_stream:
                yield text

    async def close(self) -> None:
        """Clean up resources."""
        if self._client is not None:
            await self._client.close()
        self._client = None
