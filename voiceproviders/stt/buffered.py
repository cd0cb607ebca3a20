"""Utterance buffering for STT backends that only accept complete audio."""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import AsyncIterator

import numpy as np

from voiceproviders.core.protocols import STTProvider
from voiceproviders.core.types import AudioChunk, TranscriptResult


class BufferedSTTProvider(STTProvider):
    """
    Turns a chunk-at-a-time backend into a streaming one.

    Audio is buffered and transcribed when silence follows at least one
    second of audio, or when the buffer reaches max_buffer_seconds.
    """

    sample_rate = 16000
    max_buffer_seconds = 30.0
    silence_threshold = 0.01  # RMS below this counts as silence
    silence_trigger_seconds = 0.8
    min_tail_seconds = 0.5

    @abstractmethod
    async def _transcribe_audio(self, audio: np.ndarray) -> TranscriptResult:
        """Transcribe float32 mono samples at ``self.sample_rate``."""
        ...

    def _prepare(self, chunk: AudioChunk) -> np.ndarray:
        if chunk.sample_rate != self.sample_rate:
            return chunk.resample(self.sample_rate).data
        return chunk.data

    async def transcribe_chunk(self, chunk: AudioChunk) -> TranscriptResult:
        return await self._transcribe_audio(self._prepare(chunk))

    async def transcribe_stream(
        self, audio_stream: AsyncIterator[AudioChunk]
    ) -> AsyncIterator[TranscriptResult]:
        audio_buffer: list[np.ndarray] = []
        buffer_duration = 0.0
        silence_duration = 0.0

        async for chunk in audio_stream:
            audio_data = self._prepare(chunk)
            if len(audio_data) == 0:
                continue

            audio_buffer.append(audio_data)
            seconds = len(audio_data) / self.sample_rate
            buffer_duration += seconds

            rms = np.sqrt(np.mean(audio_data**2))
            if rms < self.silence_threshold:
                silence_duration += seconds
            else:
                silence_duration = 0.0

            should_transcribe = (
                buffer_duration > 1.0 and silence_duration > self.silence_trigger_seconds
            ) or buffer_duration >= self.max_buffer_seconds

            if should_transcribe:
                result = await self._transcribe_audio(np.concatenate(audio_buffer))
                if result.text.strip():
                    yield result

                audio_buffer = []
                buffer_duration = 0.0
                silence_duration = 0.0

        # Flush whatever is left once the stream ends
        if audio_buffer:
            combined = np.concatenate(audio_buffer)
            if len(combined) > self.sample_rate * self.min_tail_seconds:
                result = await self._transcribe_audio(combined)
                if result.text.strip():
                    yield result
