"""Google Gemini LLM client."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from typing import Optional

import structlog

from voiceproviders.core.config import LLMConfig
from voiceproviders.core.protocols import LLMProvider
from voiceproviders.core.types import Message

logger = structlog.get_logger()

DEFAULT_MODEL = "gemini-2.5-flash"


def gemini_api_key(explicit: Optional[str]) -> Optional[str]:
    return explicit or os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")


async def close_genai_client(client) -> None:
    """Close a genai client's async session (older SDKs have no aclose)."""
    if client is None:
        return
    aclose = getattr(client.aio, "aclose", None)
    if aclose is not None:
        await aclose()


class GeminiLLM(LLMProvider):
    """Thin wrapper around google-genai's async models API."""

    def __init__(self, config: Optional[LLMConfig] = None):
        self.config = config or LLMConfig()
        self._client = None

    @property
    def model(self) -> str:
        return self.config.model or DEFAULT_MODEL

    def _ensure_client(self):
        """Lazy initialize the genai client."""
        if self._client is None:
            # Local import so Gemini-free setups don't need google-genai at import time.
            from google import genai

            api_key = gemini_api_key(self.config.api_key)
            if not api_key:
                raise ValueError("Missing GEMINI_API_KEY (or GOOGLE_API_KEY) for Gemini provider")

            self._client = genai.Client(api_key=api_key)
            logger.info("Gemini client initialized", model=self.model)

    def _request(self, prompt: str, context: list[Message] | None) -> dict:
        from google.genai import types

        # Gemini names the assistant role "model"
        contents = [
            {"role": "model" if msg.role == "assistant" else "user", "parts": [{"text": msg.content}]}
            for msg in context or []
            if msg.role != "system"
        ]
        contents.append({"role": "user", "parts": [{"text": prompt}]})

        return {
            "model": self.model,
            "contents": contents,
            "config": types.GenerateContentConfig(
                system_instruction=self.config.system_prompt,
                temperature=self.config.temperature,
                max_output_tokens=self.config.max_tokens,
            ),
        }

    async def generate(self, prompt: str, context: list[Message] | None = None) -> str:
        """Generate a response using Gemini."""
        self._ensure_client()

        response = await self._client.aio.models.generate_content(
            **self._request(prompt, context)
        )
        return response.text or ""

    async def generate_stream(
        self, prompt: str, context: list[Message] | None = None
    ) -> AsyncIterator[str]:
        """Generate a streaming response."""
        self._ensure_client()

        stream = await self._client.aio.models.generate_content_stream(
            **self._request(prompt, context)
        )
        async for chunk in stream:
            if chunk.text:
                yield chunk.text

    async def close(self) -> None:
        """Clean up resources."""
        await close_genai_client(self._client)
        self._client = None
