"""Whisper backend: offline STT with faster-whisper.

Only loaded in the main process; see the whisper handler in
voiceproviders.factory.
"""

from __future__ import annotations

import importlib.util
from collections.abc import Mapping
from typing import Any, Optional

import structlog

from voiceproviders.core.config import WhisperConfig
from voiceproviders.core.types import ValidationResult
from voiceproviders.stt.whisper_local import LocalWhisperSTT

from .common import as_options

logger = structlog.get_logger()

MODEL_PREFIX = "whisper-"


def whisper_config(opts: Optional[Mapping[str, Any]]) -> WhisperConfig:
    """Build a WhisperConfig, mapping catalog ids like ``whisper-tiny`` to model sizes."""
    options = as_options(opts)
    model = options.pop("model", None)
    if model is not None:
        if isinstance(model, str) and model.startswith(MODEL_PREFIX):
            model = model[len(MODEL_PREFIX):]
        options.setdefault("model_size", model)
    return WhisperConfig(**options)


class WhisperProvider:
    """Client factory for the ``whisper`` provider id."""

    @staticmethod
    async def validate_api_key(api_key: Optional[str] = None) -> ValidationResult:
        """Local models need no key; check that faster-whisper is installed."""
        if importlib.util.find_spec("faster_whisper") is None:
            return ValidationResult(
                success=False, error="faster-whisper is not installed (pip install faster-whisper)"
            )
        return ValidationResult(success=True)

    @staticmethod
    def create_stt(opts: Optional[Mapping[str, Any]] = None) -> LocalWhisperSTT:
        config = whisper_config(opts)
        logger.debug("Creating Whisper STT", model_size=config.model_size)
        return LocalWhisperSTT(config)


validate_api_key = WhisperProvider.validate_api_key
create_stt = WhisperProvider.create_stt
