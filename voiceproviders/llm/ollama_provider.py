"""Local Ollama LLM client."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from typing import Optional

import structlog

from voiceproviders.core.config import LLMConfig
from voiceproviders.core.protocols import LLMProvider
from voiceproviders.core.types import Message

logger = structlog.get_logger()

DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_MODEL = "llama3"


class OllamaLLM(LLMProvider):
    """
    Chat client for a local Ollama server.

    Talks to the native /api/chat endpoint, which streams
    newline-delimited JSON objects.
    """

    def __init__(self, config: Optional[LLMConfig] = None):
        self.config = config or LLMConfig()
        self._client = None

    @property
    def model(self) -> str:
        return self.config.model or DEFAULT_MODEL

    @property
    def base_url(self) -> str:
        return (self.config.base_url or DEFAULT_BASE_URL).rstrip("/")

    def _ensure_client(self):
        """Lazy initialize the HTTP client."""
        if self._client is None:
            import httpx

            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=60.0)
            logger.info("Ollama client initialized", base_url=self.base_url, model=self.model)

    def _payload(self, prompt: str, context: list[Message] | None, stream: bool) -> dict:
        messages = [{"role": "system", "content": self.config.system_prompt}]
        for msg in context or []:
            messages.append({"role": msg.role, "content": msg.content})
        messages.append({"role": "user", "content": prompt})

        return {
            "model": self.model,
            "messages": messages,
            "stream": stream,
            "options": {
                "temperature": self.config.temperature,
                "num_predict": self.config.max_tokens,
            },
        }

    async def generate(self, prompt: str, context: list[Message] | None = None) -> str:
        """Generate a response using the local model."""
        self._ensure_client()

        response = await self._client.post(
            "/api/chat", json=self._payload(prompt, context, stream=False)
        )
        response.raise_for_status()

        data = response.json()
        return data.get("message", {}).get("content", "")

    async def generate_stream(
        self, prompt: str, context: list[Message] | None = None
    ) -> AsyncIterator[str]:
        """Generate a streaming response."""
        self._ensure_client()

        async with self._client.stream(
            "POST", "/api/chat", json=self._payload(prompt, context, stream=True)
        ) as response:
            response.raise_for_status()
            async for line in response.aiter_lines():
                if not line.strip():
                    continue
                chunk = json.loads(line)
                content = chunk.get("message", {}).get("content")
                if content:
                    yield content
                if chunk.get("done"):
                    break

    async def close(self) -> None:
        """Clean up resources."""
        if self._client:
            await self._client.aclose()
            self._client = None
