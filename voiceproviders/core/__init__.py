"""Core types, configuration, and protocols."""

from .config import FactorySettings, LLMConfig, SonioxConfig, STTConfig, WhisperConfig
from .protocols import LLMProvider, STTProvider
from .types import (
    AudioChunk,
    ExecutionContext,
    Message,
    ModelOption,
    TranscriptResult,
    ValidationResult,
    WordInfo,
)

__all__ = [
    "AudioChunk",
    "ExecutionContext",
    "FactorySettings",
    "LLMConfig",
    "LLMProvider",
    "Message",
    "ModelOption",
    "SonioxConfig",
    "STTConfig",
    "STTProvider",
    "TranscriptResult",
    "ValidationResult",
    "WhisperConfig",
    "WordInfo",
]
