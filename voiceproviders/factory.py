"""Provider registry and dispatch facade for STT and LLM backends.

Maps a short provider id to its display name, a lazily-invoked handler
loader and the model catalogs for each capability. The ``create_*``
functions resolve aliases, strip environment-specific model suffixes and
delegate construction to the loaded backend module.

Example:
    llm = create_llm("openai", {"model": "gpt-4.1"})
    stt = create_stt("whisper", {"model": "whisper-base"})
"""

from __future__ import annotations

import importlib
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType, SimpleNamespace
from typing import Any, Optional

import structlog

from voiceproviders.core.config import FactorySettings
from voiceproviders.core.types import ExecutionContext, ModelOption, ValidationResult

logger = structlog.get_logger()

GLASS_SUFFIX = "-glass"

# Provider ids that share another provider's backend module
_ALIASES = {"openai-glass": "openai"}

# Exported client class of each backend module
_CLASS_NAMES = {
    "openai": "OpenAIProvider",
    "anthropic": "AnthropicProvider",
    "gemini": "GeminiProvider",
    "ollama": "OllamaProvider",
    "whisper": "WhisperProvider",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider id is unknown or lacks the requested capability."""

    def __init__(self, capability: str, provider: str):
        # Both fields go to args so the error survives pickle and copy
        super().__init__(capability, provider)
        self.capability = capability
        self.provider = provider

    def __str__(self) -> str:
        return f"{self.capability} not supported for provider: {self.provider}"


@dataclass(frozen=True)
class Provider:
    """Registry entry for one backend."""

    name: str
    handler: Callable[[ExecutionContext], Any]
    llm_models: tuple[ModelOption, ...] = ()
    stt_models: tuple[ModelOption, ...] = ()


@dataclass(frozen=True)
class AvailableProviders:
    stt: list[str]
    llm: list[str]


def _module_loader(module_path: str) -> Callable[[ExecutionContext], Any]:
    def load(context: ExecutionContext) -> Any:
        return importlib.import_module(module_path)

    return load


def _whisper_handler(context: ExecutionContext) -> Any:
    """Load local Whisper in the main process, a stand-in everywhere else."""
    if ExecutionContext(context) is ExecutionContext.MAIN:
        return importlib.import_module("voiceproviders.providers.whisper")

    async def validate_api_key(api_key: Optional[str] = None) -> ValidationResult:
        return ValidationResult(success=True)

    def create_stt(opts: Optional[Mapping[str, Any]] = None) -> Any:
        raise RuntimeError("Whisper STT is only available in main process")

    return SimpleNamespace(validate_api_key=validate_api_key, create_stt=create_stt)


PROVIDERS: Mapping[str, Provider] = MappingProxyType(
    {
        "openai": Provider(
            name="OpenAI",
            handler=_module_loader("voiceproviders.providers.openai"),
            llm_models=(ModelOption("gpt-4.1", "GPT-4.1"),),
            stt_models=(ModelOption("gpt-4o-mini-transcribe", "GPT-4o Mini Transcribe"),),
        ),
        "openai-glass": Provider(
            name="OpenAI (Glass)",
            handler=_module_loader("voiceproviders.providers.openai"),
            llm_models=(ModelOption("gpt-4.1-glass", "GPT-4.1 (glass)"),),
            stt_models=(
                ModelOption("gpt-4o-mini-transcribe-glass", "GPT-4o Mini Transcribe (glass)"),
            ),
        ),
        "gemini": Provider(
            name="Gemini",
            handler=_module_loader("voiceproviders.providers.gemini"),
            llm_models=(ModelOption("gemini-2.5-flash", "Gemini 2.5 Flash"),),
            stt_models=(ModelOption("gemini-live-2.5-flash-preview", "Gemini Live 2.5 Flash"),),
        ),
        "anthropic": Provider(
            name="Anthropic",
            handler=_module_loader("voiceproviders.providers.anthropic"),
            llm_models=(ModelOption("claude-3-5-sonnet-20241022", "Claude 3.5 Sonnet"),),
        ),
        "ollama": Provider(
            # Models are discovered from the local server, see providers.ollama.list_models
            name="Ollama (Local)",
            handler=_module_loader("voiceproviders.providers.ollama"),
        ),
        "whisper": Provider(
            name="Whisper (Local)",
            handler=_whisper_handler,
            stt_models=(
                ModelOption("whisper-tiny", "Whisper Tiny (39M)"),
                ModelOption("whisper-base", "Whisper Base (74M)"),
                ModelOption("whisper-small", "Whisper Small (244M)"),
                ModelOption("whisper-medium", "Whisper Medium (769M)"),
            ),
        ),
        "soniox": Provider(
            name="Soniox",
            handler=_module_loader("voiceproviders.providers.soniox"),
            stt_models=(ModelOption("en_v2", "Soniox English v2"),),
        ),
    }
)


def register_provider(
    registry: Mapping[str, Provider], provider_id: str, provider: Provider
) -> Mapping[str, Provider]:
    """Return a new read-only registry with ``provider_id`` added or replaced."""
    entries = dict(registry)
    entries[provider_id] = provider
    logger.debug("Registered provider", provider=provider_id, name=provider.name)
    return MappingProxyType(entries)


# ----------------------------------------------------------------------
# Model-id sanitizing
# ----------------------------------------------------------------------


def sanitize_model_id(model: Any) -> Any:
    """Strip a trailing ``-glass`` from string model ids."""
    if isinstance(model, str) and model.endswith(GLASS_SUFFIX):
        return model[: -len(GLASS_SUFFIX)]
    return model


def sanitize_options(opts: Optional[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    """Return a shallow copy of ``opts`` with its model sanitized.

    Options without a ``model`` key (and ``None``) are returned as-is.
    """
    if opts and "model" in opts:
        return {**opts, "model": sanitize_model_id(opts["model"])}
    return opts


# ----------------------------------------------------------------------
# Dispatch
# ----------------------------------------------------------------------


def _resolve_alias(provider: str) -> str:
    return _ALIASES.get(provider, provider)


def _resolve_context(context: Optional[ExecutionContext]) -> ExecutionContext:
    if context is None:
        return FactorySettings().execution_context
    return context


def _resolve_capability(
    provider: str,
    attribute: str,
    capability: str,
    context: Optional[ExecutionContext],
    registry: Optional[Mapping[str, Provider]],
) -> Callable[..., Any]:
    registry = PROVIDERS if registry is None else registry
    entry = registry.get(_resolve_alias(provider))
    module = entry.handler(_resolve_context(context)) if entry else None
    factory = getattr(module, attribute, None)
    if not callable(factory):
        raise UnsupportedProviderError(capability, provider)
    logger.debug("Resolved provider handler", provider=provider, capability=capability)
    return factory


def create_stt(
    provider: str,
    opts: Optional[Mapping[str, Any]] = None,
    *,
    context: Optional[ExecutionContext] = None,
    registry: Optional[Mapping[str, Provider]] = None,
) -> Any:
    """
    Create a speech-to-text client.

    Args:
        provider: Provider id (e.g., "openai", "whisper")
        opts: Client options; ``model`` is sanitized before delegation
        context: Execution context, defaults to FactorySettings
        registry: Registry to resolve against, defaults to PROVIDERS

    Returns:
        Whatever the backend's ``create_stt`` returns

    Raises:
        UnsupportedProviderError: If the provider is unknown or has no STT
    """
    factory = _resolve_capability(provider, "create_stt", "STT", context, registry)
    return factory(sanitize_options(opts))


def create_llm(
    provider: str,
    opts: Optional[Mapping[str, Any]] = None,
    *,
    context: Optional[ExecutionContext] = None,
    registry: Optional[Mapping[str, Provider]] = None,
) -> Any:
    """Create a non-streaming LLM client. See create_stt for arguments."""
    factory = _resolve_capability(provider, "create_llm", "LLM", context, registry)
    return factory(sanitize_options(opts))


def create_streaming_llm(
    provider: str,
    opts: Optional[Mapping[str, Any]] = None,
    *,
    context: Optional[ExecutionContext] = None,
    registry: Optional[Mapping[str, Provider]] = None,
) -> Any:
    """Create a streaming LLM client. See create_stt for arguments."""
    factory = _resolve_capability(
        provider, "create_streaming_llm", "Streaming LLM", context, registry
    )
    return factory(sanitize_options(opts))


def get_provider_class(
    provider_id: str,
    *,
    context: Optional[ExecutionContext] = None,
    registry: Optional[Mapping[str, Provider]] = None,
) -> Optional[type]:
    """Return the exported client class of a provider's module, or None."""
    registry = PROVIDERS if registry is None else registry
    entry = registry.get(provider_id)
    if entry is None:
        return None

    class_name = _CLASS_NAMES.get(_resolve_alias(provider_id))
    if class_name is None:
        return None

    module = entry.handler(_resolve_context(context))
    return getattr(module, class_name, None)


def get_available_providers(
    registry: Optional[Mapping[str, Provider]] = None,
) -> AvailableProviders:
    """List provider ids with at least one STT / LLM model, in registry order."""
    registry = PROVIDERS if registry is None else registry
    stt: list[str] = []
    llm: list[str] = []
    for provider_id, provider in registry.items():
        if provider.stt_models:
            stt.append(provider_id)
        if provider.llm_models:
            llm.append(provider_id)
    return AvailableProviders(stt=list(dict.fromkeys(stt)), llm=list(dict.fromkeys(llm)))
