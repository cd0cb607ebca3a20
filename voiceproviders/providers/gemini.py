"""Gemini backend: multimodal STT and LLM via google-genai."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

import httpx
import structlog

from voiceproviders.core.config import LLMConfig, STTConfig
from voiceproviders.core.types import ValidationResult
from voiceproviders.llm.gemini_provider import GeminiLLM
from voiceproviders.stt.gemini_provider import GeminiSTT

from .common import as_options, check_endpoint

logger = structlog.get_logger()


class GeminiProvider:
    """Client factory for the ``gemini`` provider id."""

    models_url = "https://generativelanguage.googleapis.com/v1beta/models"

    @staticmethod
    async def validate_api_key(
        api_key: Optional[str], *, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> ValidationResult:
        # Gemini rejects malformed keys with 400 rather than 401
        return await check_endpoint(
            GeminiProvider.models_url,
            api_key,
            headers={"x-goog-api-key": api_key or ""},
            invalid_statuses=(400, 401, 403),
            transport=transport,
        )

    @staticmethod
    def create_stt(opts: Optional[Mapping[str, Any]] = None) -> GeminiSTT:
        config = STTConfig(**as_options(opts))
        logger.debug("Creating Gemini STT", model=config.model)
        return GeminiSTT(config)

    @staticmethod
    def create_llm(opts: Optional[Mapping[str, Any]] = None) -> GeminiLLM:
        config = LLMConfig(**as_options(opts))
        logger.debug("Creating Gemini LLM", model=config.model)
        return GeminiLLM(config)

    @staticmethod
    def create_streaming_llm(opts: Optional[Mapping[str, Any]] = None) -> GeminiLLM:
        return GeminiProvider.create_llm(opts)


validate_api_key = GeminiProvider.validate_api_key
create_stt = GeminiProvider.create_stt
create_llm = GeminiProvider.create_llm
create_streaming_llm = GeminiProvider.create_streaming_llm
