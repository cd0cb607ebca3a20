"""Local Whisper STT using faster-whisper (CTranslate2)."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Optional

import numpy as np
import structlog

from voiceproviders.core.config import WhisperConfig
from voiceproviders.core.types import TranscriptResult, WordInfo

from .buffered import BufferedSTTProvider

logger = structlog.get_logger()


class LocalWhisperSTT(BufferedSTTProvider):
    """
    Offline STT using faster-whisper (CTranslate2 optimized).

    Features:
    - Fully offline operation
    - Multiple model sizes (tiny to large-v3)
    - Word-level timestamps
    - Automatic language detection
    - GPU acceleration when available
    """

    def __init__(self, config: Optional[WhisperConfig] = None):
        """
        Initialize local Whisper STT.

        The model itself is loaded on first use.

        Args:
            config: Whisper configuration, uses defaults if not provided
        """
        self.config = config or WhisperConfig()
        self._model = None

    def _ensure_model_loaded(self):
        """Lazy load the Whisper model."""
        if self._model is None:
            from faster_whisper import WhisperModel

            # faster-whisper picks the device itself for "auto"
            device = self.config.device
            compute_type = self.config.compute_type
            if compute_type == "auto":
                compute_type = "default"

            logger.info(
                "Loading Whisper model",
                model_size=self.config.model_size,
                device=device,
                compute_type=compute_type,
            )

            self._model = WhisperModel(
                self.config.model_size,
                device=device,
                compute_type=compute_type,
            )

            logger.info("Whisper model loaded")

    async def _transcribe_audio(self, audio: np.ndarray) -> TranscriptResult:
        """
        Transcribe an audio array in a worker thread.

        Args:
            audio: Audio samples (float32, mono, 16kHz)

        Returns:
            TranscriptResult with transcribed text
        """
        self._ensure_model_loaded()
        loop = asyncio.get_running_loop()

        def do_transcribe():
            segments, info = self._model.transcribe(
                audio,
                beam_size=5,
                language=self.config.language,
                word_timestamps=True,
                vad_filter=True,
            )
            return list(segments), info

        segments, info = await loop.run_in_executor(None, do_transcribe)

        text_parts = []
        all_words = []

        for segment in segments:
            text_parts.append(segment.text)

            for word in segment.words or []:
                all_words.append(
                    WordInfo(
                        word=word.word,
                        start_time=word.start,
                        end_time=word.end,
                        confidence=word.probability,
                    )
                )

        text = " ".join(part.strip() for part in text_parts).strip()

        avg_confidence = 1.0
        if all_words:
            avg_confidence = sum(w.confidence for w in all_words) / len(all_words)

        logger.debug(
            "Whisper transcription complete",
            text_length=len(text),
            duration=len(audio) / self.sample_rate,
            language=info.language,
            confidence=avg_confidence,
        )

        return TranscriptResult(
            text=text,
            is_final=True,
            confidence=avg_confidence,
            language=info.language,
            words=all_words,
            timestamp=datetime.now(),
        )

    async def close(self) -> None:
        """Release the model."""
        self._model = None
        logger.debug("Whisper STT closed")
