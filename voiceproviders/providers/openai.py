"""OpenAI backend: transcription STT and chat completions LLM."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

import httpx
import structlog

from voiceproviders.core.config import LLMConfig, STTConfig
from voiceproviders.core.types import ValidationResult
from voiceproviders.llm.openai_provider import OpenAILLM
from voiceproviders.stt.openai_provider import OpenAISTT

from .common import as_options, check_endpoint

logger = structlog.get_logger()


class OpenAIProvider:
    """Client factory for the ``openai`` (and ``openai-glass``) provider ids."""

    models_url = "https://api.openai.com/v1/models"

    @staticmethod
    async def validate_api_key(
        api_key: Optional[str], *, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> ValidationResult:
        return await check_endpoint(
            OpenAIProvider.models_url,
            api_key,
            headers={"Authorization": f"Bearer {api_key}"},
            transport=transport,
        )

    @staticmethod
    def create_stt(opts: Optional[Mapping[str, Any]] = None) -> OpenAISTT:
        config = STTConfig(**as_options(opts))
        logger.debug("Creating OpenAI STT", model=config.model)
        return OpenAISTT(config)

    @staticmethod
    def create_llm(opts: Optional[Mapping[str, Any]] = None) -> OpenAILLM:
        config = LLMConfig(**as_options(opts))
        logger.debug("Creating OpenAI LLM", model=config.model)
        return OpenAILLM(config)

    @staticmethod
    def create_streaming_llm(opts: Optional[Mapping[str, Any]] = None) -> OpenAILLM:
        # Same client; callers use generate_stream
        return OpenAIProvider.create_llm(opts)


validate_api_key = OpenAIProvider.validate_api_key
create_stt = OpenAIProvider.create_stt
create_llm = OpenAIProvider.create_llm
create_streaming_llm = OpenAIProvider.create_streaming_llm
