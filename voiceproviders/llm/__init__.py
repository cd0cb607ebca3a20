"""LLM clients for conversational AI."""

from voiceproviders.core.protocols import LLMProvider

__all__ = ["LLMProvider"]
