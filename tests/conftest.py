"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from types import MappingProxyType

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from voiceproviders.core.types import AudioChunk, ModelOption
from voiceproviders.factory import Provider


class RecordingBackend:
    """Backend module stand-in that records what the factory hands it."""

    def __init__(self):
        self.calls = []

    def create_stt(self, opts):
        self.calls.append(("stt", opts))
        return "stt-client"

    def create_llm(self, opts):
        self.calls.append(("llm", opts))
        return "llm-client"

    def create_streaming_llm(self, opts):
        self.calls.append(("streaming", opts))
        return "streaming-client"


def tone(duration: float, sample_rate: int = 16000, amplitude: float = 0.5) -> AudioChunk:
    """Generate a 440Hz sine wave chunk."""
    t = np.linspace(0, duration, int(sample_rate * duration), endpoint=False, dtype=np.float32)
    data = (amplitude * np.sin(2 * np.pi * 440 * t)).astype(np.float32)
    return AudioChunk(data=data, sample_rate=sample_rate)


def silence(duration: float, sample_rate: int = 16000) -> AudioChunk:
    return AudioChunk(data=np.zeros(int(sample_rate * duration), dtype=np.float32), sample_rate=sample_rate)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer environment variables out of config-driven tests."""
    for name in (
        "VOICE_PROVIDERS_EXECUTION_CONTEXT",
        "LLM_MODEL",
        "LLM_BASE_URL",
        "STT_MODEL",
        "STT_LANGUAGE",
        "SONIOX_MODEL",
        "SONIOX_API_KEY",
        "WHISPER_MODEL_SIZE",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def handler_calls() -> list:
    return []


@pytest.fixture
def fake_registry(backend, handler_calls):
    """Two-provider registry whose handlers record each invocation."""

    def load(context):
        handler_calls.append(context)
        return backend

    return MappingProxyType(
        {
            "alpha": Provider(
                name="Alpha",
                handler=load,
                llm_models=(ModelOption("alpha-1", "Alpha 1"),),
                stt_models=(ModelOption("alpha-ears", "Alpha Ears"),),
            ),
            "beta": Provider(name="Beta", handler=load),
        }
    )


@pytest.fixture
def sample_audio_chunk() -> AudioChunk:
    """One second of 440Hz sine wave at 16kHz."""
    return tone(1.0)
