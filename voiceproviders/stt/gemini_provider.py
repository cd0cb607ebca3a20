"""Gemini STT over generate_content or, for Live models, a Live session."""

from __future__ import annotations

import asyncio
from typing import Optional

import numpy as np
import structlog

from voiceproviders.core.config import STTConfig
from voiceproviders.core.types import AudioChunk, TranscriptResult
from voiceproviders.llm.gemini_provider import close_genai_client, gemini_api_key

from .buffered import BufferedSTTProvider

logger = structlog.get_logger()

DEFAULT_MODEL = "gemini-2.5-flash"
LIVE_MODEL_PREFIX = "gemini-live-"
TRANSCRIBE_PROMPT = "Transcribe this audio verbatim. Reply with the transcript only."


class GeminiSTT(BufferedSTTProvider):
    """
    Speech-to-text through Gemini.

    Live-only models (``gemini-live-*``) cannot serve generate_content, so
    for them each utterance is streamed into a Live session and the
    session's input transcription is returned. Other models get the audio
    as an inline WAV part.
    """

    live_timeout_seconds = 30.0

    def __init__(self, config: Optional[STTConfig] = None):
        self.config = config or STTConfig()
        self.sample_rate = self.config.sample_rate
        self._client = None

    @property
    def model(self) -> str:
        return self.config.model or DEFAULT_MODEL

    @property
    def is_live(self) -> bool:
        return self.model.startswith(LIVE_MODEL_PREFIX)

    def _ensure_client(self):
        if self._client is None:
            from google import genai

            api_key = gemini_api_key(self.config.api_key)
            if not api_key:
                raise ValueError("Missing GEMINI_API_KEY (or GOOGLE_API_KEY) for Gemini provider")

            self._client = genai.Client(api_key=api_key)
            logger.info("Gemini STT client initialized", model=self.model, live=self.is_live)

    async def _transcribe_audio(self, audio: np.ndarray) -> TranscriptResult:
        self._ensure_client()
        chunk = AudioChunk(data=audio, sample_rate=self.sample_rate)

        if self.is_live:
            text = await asyncio.wait_for(self._transcribe_live(chunk), self.live_timeout_seconds)
        else:
            text = await self._transcribe_content(chunk)

        logger.debug("Gemini transcription complete", text_length=len(text), live=self.is_live)
        return TranscriptResult(text=text, is_final=True, language=self.config.language)

    async def _transcribe_content(self, chunk: AudioChunk) -> str:
        from google.genai import types

        prompt = TRANSCRIBE_PROMPT
        if self.config.language:
            prompt = f"{prompt} The speech is in language '{self.config.language}'."

        response = await self._client.aio.models.generate_content(
            model=self.model,
            contents=[prompt, types.Part.from_bytes(data=chunk.to_wav_bytes(), mime_type="audio/wav")],
        )
        return (response.text or "").strip()

    async def _transcribe_live(self, chunk: AudioChunk) -> str:
        from google.genai import types

        config = {"response_modalities": ["TEXT"], "input_audio_transcription": {}}
        parts = []

        async with self._client.aio.live.connect(model=self.model, config=config) as session:
            await session.send_realtime_input(
                audio=types.Blob(
                    data=chunk.to_pcm_bytes(), mime_type=f"audio/pcm;rate={self.sample_rate}"
                )
            )
            await session.send_realtime_input(audio_stream_end=True)

            async for response in session.receive():
                content = response.server_content
                if content is None:
                    continue
                if content.input_transcription and content.input_transcription.text:
                    parts.append(content.input_transcription.text)
                if content.turn_complete:
                    break

        return "".join(parts).strip()

    async def close(self) -> None:
        await close_genai_client(self._client)
        self._client = None
