"""Provider registry and client factory for speech-to-text and LLM backends.

Usage:
    from voiceproviders import create_llm, create_stt, get_available_providers

    llm = create_llm("anthropic", {"model": "claude-3-5-sonnet-20241022"})
    stt = create_stt("whisper", {"model": "whisper-base"})
    print(get_available_providers().stt)
"""

from voiceproviders.core.types import ExecutionContext, ModelOption
from voiceproviders.factory import (
    PROVIDERS,
    AvailableProviders,
    Provider,
    UnsupportedProviderError,
    create_llm,
    create_streaming_llm,
    create_stt,
    get_available_providers,
    get_provider_class,
    register_provider,
    sanitize_model_id,
)

__all__ = [
    "PROVIDERS",
    "AvailableProviders",
    "ExecutionContext",
    "ModelOption",
    "Provider",
    "UnsupportedProviderError",
    "create_llm",
    "create_streaming_llm",
    "create_stt",
    "get_available_providers",
    "get_provider_class",
    "register_provider",
    "sanitize_model_id",
]
