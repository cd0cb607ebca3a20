"""Ollama backend: local LLM, with models discovered from the server."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

import httpx
import structlog

from voiceproviders.core.config import LLMConfig
from voiceproviders.core.types import ModelOption, ValidationResult
from voiceproviders.llm.ollama_provider import DEFAULT_BASE_URL, OllamaLLM

from .common import as_options

logger = structlog.get_logger()


def _tags_url(base_url: Optional[str]) -> str:
    return f"{(base_url or DEFAULT_BASE_URL).rstrip('/')}/api/tags"


async def list_models(
    base_url: Optional[str] = None, *, transport: Optional[httpx.AsyncBaseTransport] = None
) -> list[ModelOption]:
    """
    List models installed on a local Ollama server.

    Raises:
        httpx.HTTPError: If the server is unreachable or answers with an error
        ValueError: If the reply is not an Ollama tags listing
    """
    async with httpx.AsyncClient(timeout=10.0, transport=transport) as client:
        response = await client.get(_tags_url(base_url))
        response.raise_for_status()

    payload = response.json()
    entries = payload.get("models", []) if isinstance(payload, dict) else None
    if not isinstance(entries, list):
        raise ValueError("Unexpected reply from Ollama tags endpoint")

    models = [
        ModelOption(id=entry["name"], name=entry["name"])
        for entry in entries
        if isinstance(entry, dict) and isinstance(entry.get("name"), str) and entry["name"]
    ]
    logger.debug("Discovered Ollama models", count=len(models))
    return models


class OllamaProvider:
    """Client factory for the ``ollama`` provider id."""

    @staticmethod
    async def validate_api_key(
        api_key: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> ValidationResult:
        """Ollama needs no key; succeed when the server answers."""
        try:
            await list_models(base_url, transport=transport)
        except httpx.HTTPError as exc:
            return ValidationResult(
                success=False, error=f"Ollama server not reachable: {exc.__class__.__name__}"
            )
        except ValueError as exc:
            # Also covers json.JSONDecodeError from non-JSON bodies
            return ValidationResult(success=False, error=f"Not an Ollama server: {exc}")
        return ValidationResult(success=True)

    @staticmethod
    def create_llm(opts: Optional[Mapping[str, Any]] = None) -> OllamaLLM:
        config = LLMConfig(**as_options(opts))
        logger.debug("Creating Ollama LLM", model=config.model, base_url=config.base_url)
        return OllamaLLM(config)

    @staticmethod
    def create_streaming_llm(opts: Optional[Mapping[str, Any]] = None) -> OllamaLLM:
        return OllamaProvider.create_llm(opts)


validate_api_key = OllamaProvider.validate_api_key
create_llm = OllamaProvider.create_llm
create_streaming_llm = OllamaProvider.create_streaming_llm
