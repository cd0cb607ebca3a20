"""OpenAI LLM client."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from typing import Optional

import structlog

from voiceproviders.core.config import LLMConfig
from voiceproviders.core.protocols import LLMProvider
from voiceproviders.core.types import Message

logger = structlog.get_logger()

DEFAULT_MODEL = "gpt-4.1"


class OpenAILLM(LLMProvider):
    """OpenAI/OpenAI-compatible chat completions client."""

    def __init__(self, config: Optional[LLMConfig] = None):
        self.config = config or LLMConfig()
        self._client = None

    @property
    def model(self) -> str:
        return self.config.model or DEFAULT_MODEL

    def _ensure_client(self):
        """Lazy initialize the OpenAI client."""
        if self._client is None:
            from openai import AsyncOpenAI

            api_key = self.config.api_key or os.environ.get("OPENAI_API_KEY")
            if not api_key:
                raise ValueError("OpenAI API key required")

            self._client = AsyncOpenAI(
                api_key=api_key,
                base_url=self.config.base_url,
            )
            logger.info("OpenAI client initialized", model=self.model)

    def _build_messages(self, prompt: str, context: list[Message] | None) -> list[dict]:
        messages = [{"role": "system", "content": self.config.system_prompt}]
        for msg in context or []:
            messages.append({"role": msg.role, "content": msg.content})
        messages.append({"role": "user", "content": prompt})
        return messages

    async def generate(self, prompt: str, context: list[Message] | None = None) -> str:
        """Generate a response using OpenAI."""
        self._ensure_client()

        response = await self._client.chat.completions.create(
            model=self.model,
            messages=self._build_messages(prompt, context),
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
        )

        return response.choices[0].message.content or ""

    async def generate_stream(
        self, prompt: str, context: list[Message] | None = None
    ) -> AsyncIterator[str]:
        """Generate a streaming response."""
        self._ensure_client()

        stream = await self._client.chat.completions.create(
            model=self.model,
            messages=self._build_messages(prompt, context),
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            stream=True,
        )

        async for chunk in stream:
            if chunk.choices and chunk.choices[0].delta.content:
                yield chunk.choices[0].delta.content

    async def close(self) -> None:
        """Clean up resources."""
        if self._client is not None:
            await self._client.close()
        self._client = None
