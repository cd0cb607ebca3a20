"""Core data types shared by the registry and the backend clients."""

from __future__ import annotations

import io
import wave
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

import numpy as np
from numpy.typing import NDArray


class ExecutionContext(str, Enum):
    """Where the calling code runs.

    ``MAIN`` is the host/backend process that can load local models.
    ``RENDERER`` is a UI-capable process that must not.
    """

    MAIN = "main"
    RENDERER = "renderer"


@dataclass(frozen=True)
class ModelOption:
    """A catalog entry: ``id`` goes to the backend, ``name`` is for display."""

    id: str
    name: str


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of an API key check."""

    success: bool
    error: Optional[str] = None


@dataclass
class WordInfo:
    """Word-level timing information from STT."""

    word: str
    start_time: float  # seconds from utterance start
    end_time: float
    confidence: float = 1.0


@dataclass
class AudioChunk:
    """A chunk of audio handed to an STT client."""

    data: NDArray[np.float32]  # Audio samples (float32, mono, -1.0 to 1.0)
    sample_rate: int
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def duration_seconds(self) -> float:
        """Duration of this audio chunk in seconds."""
        return len(self.data) / self.sample_rate

    @property
    def num_samples(self) -> int:
        return len(self.data)

    def resample(self, target_rate: int) -> "AudioChunk":
        """Resample audio to a different sample rate."""
        if self.sample_rate == target_rate:
            return self

        # Simple linear interpolation resampling
        ratio = target_rate / self.sample_rate
        new_length = int(len(self.data) * ratio)
        indices = np.linspace(0, len(self.data) - 1, new_length)
        resampled = np.interp(indices, np.arange(len(self.data)), self.data)

        return AudioChunk(
            data=resampled.astype(np.float32),
            sample_rate=target_rate,
            timestamp=self.timestamp,
        )

    def to_int16(self) -> NDArray[np.int16]:
        """Convert float32 audio to int16 PCM."""
        clipped = np.clip(self.data, -1.0, 1.0)
        return (clipped * 32767).astype(np.int16)

    def to_pcm_bytes(self) -> bytes:
        """Little-endian 16-bit PCM, as streamed to realtime STT APIs."""
        return self.to_int16().astype("<i2").tobytes()

    def to_wav_bytes(self) -> bytes:
        """Encode as a mono 16-bit WAV file for upload-style STT APIs."""
        buffer = io.BytesIO()
        with wave.open(buffer, "wb") as wav:
            wav.setnchannels(1)
            wav.setsampwidth(2)
            wav.setframerate(self.sample_rate)
            wav.writeframes(self.to_pcm_bytes())
        return buffer.getvalue()

    @classmethod
    def from_int16(
        cls, data: NDArray[np.int16], sample_rate: int, timestamp: Optional[datetime] = None
    ) -> "AudioChunk":
        """Create AudioChunk from int16 audio data."""
        float_data = data.astype(np.float32) / 32767.0
        return cls(
            data=float_data,
            sample_rate=sample_rate,
            timestamp=timestamp or datetime.now(),
        )


@dataclass
class TranscriptResult:
    """Result from speech-to-text transcription."""

    text: str
    is_final: bool  # True for final transcript, False for interim
    confidence: float = 1.0
    language: Optional[str] = None
    words: list[WordInfo] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def duration_seconds(self) -> Optional[float]:
        """Duration of the utterance based on word timings."""
        if not self.words:
            return None
        return self.words[-1].end_time - self.words[0].start_time


@dataclass
class Message:
    """A message in the conversation history."""

    role: str  # "user", "assistant", or "system"
    content: str
    timestamp: datetime = field(default_factory=datetime.now)
