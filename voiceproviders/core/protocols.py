"""Interfaces implemented by the backend clients."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from .types import AudioChunk, Message, TranscriptResult


class STTProvider(ABC):
    """Abstract base class for Speech-to-Text clients."""

    @abstractmethod
    async def transcribe_stream(
        self, audio_stream: AsyncIterator[AudioChunk]
    ) -> AsyncIterator[TranscriptResult]:
        """
        Transcribe a stream of audio chunks.

        Yields TranscriptResult objects as transcription progresses.
        Results may be interim (is_final=False) or final (is_final=True).

        Args:
            audio_stream: Async iterator of AudioChunk objects

        Yields:
            TranscriptResult objects with transcribed text
        """
        ...

    @abstractmethod
    async def transcribe_chunk(self, chunk: AudioChunk) -> TranscriptResult:
        """
        Transcribe a single, complete audio segment.

        Args:
            chunk: AudioChunk containing the audio to transcribe

        Returns:
            TranscriptResult with the transcribed text
        """
        ...

    async def close(self) -> None:
        """Clean up resources. Override if needed."""
        pass


class LLMProvider(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    async def generate(self, prompt: str, context: list[Message] | None = None) -> str:
        """
        Generate a response to the given prompt.

        Args:
            prompt: User's input text
            context: Optional conversation history

        Returns:
            Generated response text
        """
        ...

    async def generate_stream(
        self, prompt: str, context: list[Message] | None = None
    ) -> AsyncIterator[str]:
        """
        Generate a response in streaming mode.

        Default implementation falls back to non-streaming generation.

        Args:
            prompt: User's input text
            context: Optional conversation history

        Yields:
            Response text chunks as they are generated
        """
        response = await self.generate(prompt, context)
        yield response

    async def close(self) -> None:
        """Clean up resources. Override if needed."""
        pass
