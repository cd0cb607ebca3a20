"""Anthropic backend: LLM only."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

import httpx
import structlog

from voiceproviders.core.config import LLMConfig
from voiceproviders.core.types import ValidationResult
from voiceproviders.llm.anthropic_provider import AnthropicLLM

from .common import as_options, check_endpoint

logger = structlog.get_logger()

API_VERSION = "2023-06-01"


class AnthropicProvider:
    """Client factory for the ``anthropic`` provider id."""

    models_url = "https://api.anthropic.com/v1/models"

    @staticmethod
    async def validate_api_key(
        api_key: Optional[str], *, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> ValidationResult:
        return await check_endpoint(
            AnthropicProvider.models_url,
            api_key,
            headers={"x-api-key": api_key or "", "anthropic-version": API_VERSION},
            transport=transport,
        )

    @staticmethod
    def create_llm(opts: Optional[Mapping[str, Any]] = None) -> AnthropicLLM:
        config = LLMConfig(**as_options(opts))
        logger.debug("Creating Anthropic LLM", model=config.model)
        return AnthropicLLM(config)

    @staticmethod
    def create_streaming_llm(opts: Optional[Mapping[str, Any]] = None) -> AnthropicLLM:
        return AnthropicProvider.create_llm(opts)


validate_api_key = AnthropicProvider.validate_api_key
create_llm = AnthropicProvider.create_llm
create_streaming_llm = AnthropicProvider.create_streaming_llm
