"""Configuration management using Pydantic."""

from __future__ import annotations

from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .types import ExecutionContext

# Load .env file at module import time so all configs can access env vars
load_dotenv()

DEFAULT_SYSTEM_PROMPT = "You are a helpful voice assistant. Keep responses concise and conversational."


class FactorySettings(BaseSettings):
    """Process-wide settings for the provider factory."""

    model_config = SettingsConfigDict(
        env_prefix="VOICE_PROVIDERS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # "renderer" for UI processes that cannot host local models
    execution_context: ExecutionContext = ExecutionContext.MAIN


class LLMConfig(BaseSettings):
    """LLM client configuration, built from the caller's options."""

    model_config = SettingsConfigDict(env_prefix="LLM_", extra="ignore")

    model: Optional[str] = None  # e.g., "gpt-4.1", "claude-3-5-sonnet-20241022"
    api_key: Optional[str] = None
    base_url: Optional[str] = None  # For local LLM servers and proxies
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1024, gt=0)
    system_prompt: str = DEFAULT_SYSTEM_PROMPT


class STTConfig(BaseSettings):
    """Cloud STT client configuration."""

    model_config = SettingsConfigDict(env_prefix="STT_", extra="ignore")

    model: Optional[str] = None
    api_key: Optional[str] = None
    language: Optional[str] = "en"
    sample_rate: int = Field(default=16000, gt=0)


class WhisperConfig(BaseSettings):
    """Local Whisper STT configuration."""

    model_config = SettingsConfigDict(env_prefix="WHISPER_", extra="ignore")

    model_size: str = "base"  # tiny, base, small, medium, large-v3
    device: str = "auto"  # auto, cpu, cuda
    compute_type: str = "auto"  # auto, float16, int8
    language: Optional[str] = None  # None = auto-detect


class SonioxConfig(STTConfig):
    """Soniox realtime STT configuration."""

    model_config = SettingsConfigDict(env_prefix="SONIOX_", extra="ignore")

    ws_url: str = "wss://stt-rt.soniox.com/transcribe-websocket"
