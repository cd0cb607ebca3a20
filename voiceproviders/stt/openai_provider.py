"""OpenAI transcription STT."""

from __future__ import annotations

import os
from typing import Optional

import numpy as np
import structlog

from voiceproviders.core.config import STTConfig
from voiceproviders.core.types import AudioChunk, TranscriptResult

from .buffered import BufferedSTTProvider

logger = structlog.get_logger()

DEFAULT_MODEL = "gpt-4o-mini-transcribe"


class OpenAISTT(BufferedSTTProvider):
    """Uploads buffered utterances to the audio transcriptions endpoint."""

    def __init__(self, config: Optional[STTConfig] = None):
        self.config = config or STTConfig()
        self.sample_rate = self.config.sample_rate
        self._client = None

    @property
    def model(self) -> str:
        return self.config.model or DEFAULT_MODEL

    def _ensure_client(self):
        """Lazy initialize the OpenAI client."""
        if self._client is None:
            from openai import AsyncOpenAI

            api_key = self.config.api_key or os.environ.get("OPENAI_API_KEY")
            if not api_key:
                raise ValueError("OpenAI API key required")

            self._client = AsyncOpenAI(api_key=api_key)
            logger.info("OpenAI STT client initialized", model=self.model)

    async def _transcribe_audio(self, audio: np.ndarray) -> TranscriptResult:
        self._ensure_client()

        wav = AudioChunk(data=audio, sample_rate=self.sample_rate).to_wav_bytes()
        kwargs = {"model": self.model, "file": ("speech.wav", wav)}
        if self.config.language:
            kwargs["language"] = self.config.language

        transcription = await self._client.audio.transcriptions.create(**kwargs)

        logger.debug(
            "OpenAI transcription complete",
            text_length=len(transcription.text),
            duration=len(audio) / self.sample_rate,
        )
        return TranscriptResult(
            text=transcription.text.strip(),
            is_final=True,
            language=self.config.language,
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
        self._client = None
