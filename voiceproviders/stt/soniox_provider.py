"""Soniox realtime STT over WebSocket."""

from __future__ import annotations

import asyncio
import contextlib
import json
from collections.abc import AsyncIterator
from typing import Any, Optional

import structlog

from voiceproviders.core.config import SonioxConfig
from voiceproviders.core.protocols import STTProvider
from voiceproviders.core.types import AudioChunk, TranscriptResult

logger = structlog.get_logger()

DEFAULT_MODEL = "stt-rt-preview"
# Catalog ids from the older Soniox API that the realtime websocket does not serve
LEGACY_MODELS = {"en_v2": DEFAULT_MODEL}


class SonioxError(RuntimeError):
    """Error frame returned by the Soniox service."""


class SonioxSTT(STTProvider):
    """
    Streaming STT against the Soniox realtime API.

    The first frame is a JSON config; audio follows as raw 16-bit PCM and
    an empty frame marks the end of audio. Responses carry tokens flagged
    final or non-final.
    """

    def __init__(self, config: Optional[SonioxConfig] = None):
        self.config = config or SonioxConfig()

    @property
    def model(self) -> str:
        model = self.config.model or DEFAULT_MODEL
        return LEGACY_MODELS.get(model, model)

    def _start_message(self) -> str:
        if not self.config.api_key:
            raise ValueError("Soniox API key required. Set SONIOX_API_KEY environment variable.")

        message: dict[str, Any] = {
            "api_key": self.config.api_key,
            "model": self.model,
            "audio_format": "pcm_s16le",
            "sample_rate": self.config.sample_rate,
            "num_channels": 1,
        }
        if self.config.language:
            message["language_hints"] = [self.config.language]
        return json.dumps(message)

    async def _send_audio(self, ws, audio_stream: AsyncIterator[AudioChunk]) -> None:
        async for chunk in audio_stream:
            await ws.send(chunk.resample(self.config.sample_rate).to_pcm_bytes())
        await ws.send("")

    @staticmethod
    def _parse(data: dict) -> list[TranscriptResult]:
        if data.get("error_code"):
            raise SonioxError(f"Soniox error {data['error_code']}: {data.get('error_message')}")

        results = []
        tokens = data.get("tokens") or []
        for is_final in (True, False):
            selected = [t for t in tokens if bool(t.get("is_final")) is is_final]
            text = "".join(t.get("text", "") for t in selected)
            if not text.strip():
                continue
            confidence = sum(t.get("confidence", 1.0) for t in selected) / len(selected)
            results.append(TranscriptResult(text=text, is_final=is_final, confidence=confidence))
        return results

    async def transcribe_stream(
        self, audio_stream: AsyncIterator[AudioChunk]
    ) -> AsyncIterator[TranscriptResult]:
        import websockets

        async with websockets.connect(self.config.ws_url) as ws:
            await ws.send(self._start_message())
            logger.info("Soniox stream opened", model=self.model)

            sender = asyncio.create_task(self._send_audio(ws, audio_stream))
            receive = None
            try:
                while True:
                    if receive is None:
                        receive = asyncio.ensure_future(ws.recv())
                    # Watch the sender too, so a failing audio source ends the stream
                    waiting = {receive} if sender.done() else {receive, sender}
                    await asyncio.wait(waiting, return_when=asyncio.FIRST_COMPLETED)

                    if sender.done() and not sender.cancelled() and sender.exception():
                        raise sender.exception()
                    if not receive.done():
                        continue

                    try:
                        message = receive.result()
                    except websockets.ConnectionClosedOK:
                        break
                    receive = None

                    data = json.loads(message)
                    for result in self._parse(data):
                        yield result
                    if data.get("finished"):
                        break
            finally:
                for task in (receive, sender):
                    if task is not None and not task.done():
                        task.cancel()
                        with contextlib.suppress(asyncio.CancelledError):
                            await task

        logger.debug("Soniox stream closed")

    async def transcribe_chunk(self, chunk: AudioChunk) -> TranscriptResult:
        async def single() -> AsyncIterator[AudioChunk]:
            yield chunk

        finals = []
        async for result in self.transcribe_stream(single()):
            if result.is_final:
                finals.append(result)

        if not finals:
            return TranscriptResult(text="", is_final=True)
        return TranscriptResult(
            text="".join(r.text for r in finals).strip(),
            is_final=True,
            confidence=sum(r.confidence for r in finals) / len(finals),
        )
