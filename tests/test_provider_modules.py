"""Tests for the backend modules reached through the factory."""

import asyncio
import json
from types import SimpleNamespace

import pytest
import websockets
from pydantic import ValidationError

from conftest import tone
from voiceproviders.core.config import LLMConfig, STTConfig
from voiceproviders.core.types import ExecutionContext
from voiceproviders.factory import PROVIDERS, create_llm, create_streaming_llm, create_stt
from voiceproviders.llm.anthropic_provider import AnthropicLLM
from voiceproviders.llm.gemini_provider import GeminiLLM
from voiceproviders.llm.ollama_provider import OllamaLLM
from voiceproviders.llm.openai_provider import OpenAILLM
from voiceproviders.providers.whisper import whisper_config
from voiceproviders.stt.gemini_provider import GeminiSTT
from voiceproviders.stt.openai_provider import OpenAISTT
from voiceproviders.stt.soniox_provider import SonioxError, SonioxSTT

CAPABILITIES = ("create_stt", "create_llm", "create_streaming_llm", "validate_api_key")


@pytest.mark.parametrize(
    "provider_id, expected",
    [
        ("openai", {"create_stt", "create_llm", "create_streaming_llm", "validate_api_key"}),
        ("gemini", {"create_stt", "create_llm", "create_streaming_llm", "validate_api_key"}),
        ("anthropic", {"create_llm", "create_streaming_llm", "validate_api_key"}),
        ("ollama", {"create_llm", "create_streaming_llm", "validate_api_key"}),
        ("whisper", {"create_stt", "validate_api_key"}),
        ("soniox", {"create_stt", "validate_api_key"}),
    ],
)
def test_module_capabilities(provider_id, expected):
    module = PROVIDERS[provider_id].handler(ExecutionContext.MAIN)
    assert {name for name in CAPABILITIES if callable(getattr(module, name, None))} == expected


class TestLLMClients:
    def test_openai_glass_model_is_canonical(self):
        llm = create_llm("openai-glass", {"model": "gpt-4.1-glass", "temperature": 0.1})

        assert isinstance(llm, OpenAILLM)
        assert llm.model == "gpt-4.1"
        assert llm.config.temperature == 0.1

    def test_default_models(self):
        assert create_llm("openai").model == "gpt-4.1"
        assert create_streaming_llm("anthropic").model == "claude-3-5-sonnet-20241022"
        assert create_llm("gemini").model == "gemini-2.5-flash"
        assert create_llm("ollama").model == "llama3"

    def test_streaming_clients(self):
        assert isinstance(create_streaming_llm("openai"), OpenAILLM)
        assert isinstance(create_streaming_llm("gemini"), GeminiLLM)
        assert isinstance(create_streaming_llm("anthropic"), AnthropicLLM)
        assert isinstance(create_streaming_llm("ollama"), OllamaLLM)

    def test_unknown_options_are_ignored(self):
        llm = create_llm("anthropic", {"model": "claude-x", "on_token": print})
        assert llm.model == "claude-x"

    def test_ollama_base_url(self):
        llm = create_llm("ollama", {"base_url": "http://gpu-box:11434/", "model": "qwen2.5:7b"})
        assert llm.base_url == "http://gpu-box:11434"
        assert llm.model == "qwen2.5:7b"

    def test_ollama_payload(self):
        llm = create_llm("ollama", {"max_tokens": 64, "system_prompt": "Be brief."})
        payload = llm._payload("hi", None, stream=True)

        assert payload["stream"] is True
        assert payload["options"]["num_predict"] == 64
        assert payload["messages"] == [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "hi"},
        ]

    @pytest.mark.asyncio
    async def test_missing_api_key_fails_on_first_use(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        monkeypatch.delenv("LLM_API_KEY", raising=False)
        llm = create_llm("openai")
        with pytest.raises(ValueError, match="API key required"):
            await llm.generate("hello")


class TestSTTClients:
    def test_openai_stt(self):
        stt = create_stt("openai-glass", {"model": "gpt-4o-mini-transcribe-glass", "language": "fr"})

        assert isinstance(stt, OpenAISTT)
        assert stt.model == "gpt-4o-mini-transcribe"
        assert stt.config.language == "fr"

    def test_gemini_stt(self):
        stt = create_stt("gemini", {"model": "gemini-live-2.5-flash-preview"})
        assert isinstance(stt, GeminiSTT)
        assert stt.model == "gemini-live-2.5-flash-preview"

    @pytest.mark.parametrize(
        "model, size",
        [("whisper-tiny", "tiny"), ("whisper-medium", "medium"), ("large-v3", "large-v3")],
    )
    def test_whisper_model_mapping(self, model, size):
        assert whisper_config({"model": model}).model_size == size

    def test_whisper_defaults(self):
        assert whisper_config(None).model_size == "base"


class TestSoniox:
    def test_start_message(self):
        stt = create_stt("soniox", {"model": "en_v2", "api_key": "key", "language": "en"})
        message = json.loads(stt._start_message())

        assert isinstance(stt, SonioxSTT)
        assert message == {
            "api_key": "key",
            "model": "stt-rt-preview",
            "audio_format": "pcm_s16le",
            "sample_rate": 16000,
            "num_channels": 1,
            "language_hints": ["en"],
        }

    def test_start_message_requires_key(self):
        stt = create_stt("soniox", {"model": "en_v2"})
        with pytest.raises(ValueError, match="Soniox API key required"):
            stt._start_message()

    def test_parse_splits_final_and_interim(self):
        results = SonioxSTT._parse(
            {
                "tokens": [
                    {"text": "Hello", "is_final": True, "confidence": 0.9},
                    {"text": " world", "is_final": True, "confidence": 0.7},
                    {"text": " aga", "is_final": False, "confidence": 0.5},
                ]
            }
        )

        assert [(r.text, r.is_final) for r in results] == [("Hello world", True), (" aga", False)]
        assert results[0].confidence == pytest.approx(0.8)

    def test_parse_without_tokens(self):
        assert SonioxSTT._parse({"tokens": [], "finished": True}) == []

    def test_parse_error_frame(self):
        with pytest.raises(SonioxError, match="401"):
            SonioxSTT._parse({"error_code": 401, "error_message": "Invalid API key"})

    def test_legacy_model_id_maps_to_realtime_model(self):
        assert create_stt("soniox", {"model": "en_v2"}).model == "stt-rt-preview"
        assert create_stt("soniox", {"model": "stt-rt-v3"}).model == "stt-rt-v3"
        assert create_stt("soniox").model == "stt-rt-preview"


class FakeSonioxSocket:
    """Websocket stand-in that answers once the empty end-of-audio frame arrives."""

    def __init__(self, replies):
        self.replies = replies
        self.sent = []
        self.inbox = asyncio.Queue()

    async def send(self, frame):
        self.sent.append(frame)
        if frame == "":
            for reply in self.replies:
                self.inbox.put_nowait(json.dumps(reply))

    async def recv(self):
        return await self.inbox.get()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


@pytest.fixture
def soniox_socket(monkeypatch):
    socket = FakeSonioxSocket(
        [
            {"tokens": [{"text": "Hello", "is_final": True, "confidence": 0.9}]},
            {"tokens": [], "finished": True},
        ]
    )
    monkeypatch.setattr(websockets, "connect", lambda url: socket)
    return socket


class TestSonioxStream:
    @pytest.mark.asyncio
    async def test_stream_sends_audio_then_end_frame(self, soniox_socket):
        async def source():
            yield tone(0.1)
            yield tone(0.1)

        stt = create_stt("soniox", {"api_key": "key"})
        results = [r async for r in stt.transcribe_stream(source())]

        assert [(r.text, r.is_final) for r in results] == [("Hello", True)]
        assert json.loads(soniox_socket.sent[0])["model"] == "stt-rt-preview"
        assert [len(frame) for frame in soniox_socket.sent[1:3]] == [3200, 3200]
        assert soniox_socket.sent[-1] == ""

    @pytest.mark.asyncio
    async def test_failing_audio_source_ends_stream(self, soniox_socket):
        async def source():
            yield tone(0.1)
            raise OSError("microphone unplugged")

        async def consume():
            return [r async for r in create_stt("soniox", {"api_key": "key"}).transcribe_stream(source())]

        with pytest.raises(OSError, match="microphone unplugged"):
            await asyncio.wait_for(consume(), timeout=2.0)

        # No end-of-audio frame after the source failed
        assert len(soniox_socket.sent) == 2
        assert isinstance(soniox_socket.sent[1], bytes)

    @pytest.mark.asyncio
    async def test_consumer_cancellation_is_not_masked(self, monkeypatch):
        socket = FakeSonioxSocket([])
        monkeypatch.setattr(websockets, "connect", lambda url: socket)

        async def endless():
            while True:
                yield tone(0.01)
                await asyncio.sleep(0.01)

        async def consume():
            async for _ in create_stt("soniox", {"api_key": "key"}).transcribe_stream(endless()):
                pass

        task = asyncio.create_task(consume())
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert "" not in socket.sent

    @pytest.mark.asyncio
    async def test_transcribe_chunk_joins_finals(self, soniox_socket):
        stt = create_stt("soniox", {"api_key": "key"})
        result = await stt.transcribe_chunk(tone(0.1))

        assert result.text == "Hello"
        assert result.is_final
        assert result.confidence == pytest.approx(0.9)


class FakeLiveSession:
    def __init__(self, responses):
        self.responses = responses
        self.sent = []

    async def send_realtime_input(self, **kwargs):
        self.sent.append(kwargs)

    async def receive(self):
        for response in self.responses:
            yield response

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class FakeGenaiClient:
    """Records calls made through ``client.aio``."""

    def __init__(self, session=None, with_aclose=True):
        self.session = session
        self.connected = []
        self.generated = []
        self.closed = 0
        self.aio = SimpleNamespace(
            live=SimpleNamespace(connect=self._connect),
            models=SimpleNamespace(generate_content=self._generate_content),
        )
        if with_aclose:
            self.aio.aclose = self._aclose

    def _connect(self, model, config):
        self.connected.append((model, config))
        return self.session

    async def _generate_content(self, **kwargs):
        self.generated.append(kwargs)
        return SimpleNamespace(text=" from content ")

    async def _aclose(self):
        self.closed += 1


def live_response(text=None, turn_complete=False):
    transcription = SimpleNamespace(text=text) if text is not None else None
    return SimpleNamespace(
        server_content=SimpleNamespace(input_transcription=transcription, turn_complete=turn_complete)
    )


class TestGemini:
    @pytest.mark.asyncio
    async def test_live_model_uses_live_session(self):
        session = FakeLiveSession(
            [
                SimpleNamespace(server_content=None),
                live_response("Hello"),
                live_response(" there"),
                live_response(turn_complete=True),
                live_response("never read"),
            ]
        )
        client = FakeGenaiClient(session)
        stt = create_stt("gemini", {"model": "gemini-live-2.5-flash-preview"})
        stt._client = client

        result = await stt._transcribe_audio(tone(0.5).data)

        assert stt.is_live
        assert result.text == "Hello there"
        assert client.generated == []
        assert client.connected[0][0] == "gemini-live-2.5-flash-preview"
        assert client.connected[0][1]["input_audio_transcription"] == {}
        assert session.sent[0]["audio"].mime_type == "audio/pcm;rate=16000"
        assert session.sent[1] == {"audio_stream_end": True}

    @pytest.mark.asyncio
    async def test_content_model_uses_generate_content(self):
        client = FakeGenaiClient()
        stt = create_stt("gemini", {"model": "gemini-2.5-flash", "language": "de"})
        stt._client = client

        result = await stt._transcribe_audio(tone(0.5).data)

        assert not stt.is_live
        assert result.text == "from content"
        assert result.language == "de"
        assert client.connected == []
        assert client.generated[0]["model"] == "gemini-2.5-flash"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("make_client", [lambda: create_llm("gemini"), lambda: create_stt("gemini")])
    async def test_close_releases_async_session(self, make_client):
        provider = make_client()
        fake = FakeGenaiClient()
        provider._client = fake

        await provider.close()

        assert fake.closed == 1
        assert provider._client is None

    @pytest.mark.asyncio
    async def test_close_without_aclose_or_client(self):
        llm = GeminiLLM()
        await llm.close()

        llm._client = FakeGenaiClient(with_aclose=False)
        await llm.close()
        assert llm._client is None


class TestConfigLimits:
    @pytest.mark.parametrize("opts", [{"temperature": 5}, {"temperature": -0.1}, {"max_tokens": 0}])
    def test_llm_config_rejects_out_of_range(self, opts):
        with pytest.raises(ValidationError):
            LLMConfig(**opts)

    def test_stt_sample_rate_must_be_positive(self):
        with pytest.raises(ValidationError):
            STTConfig(sample_rate=0)

    def test_factory_surfaces_invalid_options(self):
        with pytest.raises(ValidationError):
            create_llm("openai", {"temperature": 9})
