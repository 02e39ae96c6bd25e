"""
Tests for the speech channels.

ElevenLabs calls go through httpx.MockTransport; nothing leaves the
process.
"""

import json

import httpx
import pytest

from voicebudget.config import ElevenLabsSettings
from voicebudget.services.speech import (
    SAMPLE_COMMANDS,
    ElevenLabsSpeechChannel,
    SimulatedSpeechChannel,
    SpeechError,
)


def _settings(**overrides) -> ElevenLabsSettings:
    return ElevenLabsSettings(api_key="test-key", **overrides)


def _channel(handler, **overrides) -> ElevenLabsSpeechChannel:
    return ElevenLabsSpeechChannel(
        settings=_settings(**overrides),
        transport=httpx.MockTransport(handler),
    )


class TestElevenLabsSpeechToText:
    """Tests for POST /speech-to-text."""

    @pytest.mark.asyncio
    async def test_transcribes(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["key"] = request.headers.get("xi-api-key")
            seen["body"] = request.read()
            return httpx.Response(200, json={"text": "Spend $25 on transportation"})

        channel = _channel(handler)
        text = await channel.speech_to_text(b"fake-audio", "clip.m4a")

        assert text == "Spend $25 on transportation"
        assert seen["path"] == "/v1/speech-to-text"
        assert seen["key"] == "test-key"
        assert b"scribe_v1" in seen["body"]
        assert b"eng" in seen["body"]
        assert b"clip.m4a" in seen["body"]
        assert b"fake-audio" in seen["body"]

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        channel = _channel(lambda request: httpx.Response(401, json={"detail": "bad key"}))

        with pytest.raises(SpeechError) as exc_info:
            await channel.speech_to_text(b"fake-audio")

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_empty_audio_raises(self):
        channel = _channel(lambda request: httpx.Response(200, json={"text": "x"}))

        with pytest.raises(SpeechError):
            await channel.speech_to_text(b"")

    @pytest.mark.asyncio
    async def test_missing_text_is_empty_transcript(self):
        channel = _channel(lambda request: httpx.Response(200, json={}))
        assert await channel.speech_to_text(b"fake-audio") == ""


class TestElevenLabsTextToSpeech:
    """Tests for POST /text-to-speech/{voice_id}."""

    @pytest.mark.asyncio
    async def test_synthesizes(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["accept"] = request.headers.get("accept")
            seen["payload"] = json.loads(request.read())
            return httpx.Response(200, content=b"ID3-mp3-bytes")

        channel = _channel(handler)
        audio = await channel.text_to_speech("Perfect! I've recorded your $25.00 expense.")

        assert audio == b"ID3-mp3-bytes"
        assert seen["path"] == "/v1/text-to-speech/pNInz6obpgDQGcFmaJgB"
        assert seen["accept"] == "audio/mpeg"
        payload = seen["payload"]
        assert payload["text"] == "Perfect! I've recorded your $25.00 expense."
        assert payload["model_id"] == "eleven_multilingual_v2"
        assert payload["output_format"] == "mp3_44100_128"
        assert payload["voice_settings"]["stability"] == 0.5
        assert payload["voice_settings"]["use_speaker_boost"] is True

    @pytest.mark.asyncio
    async def test_custom_voice(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            return httpx.Response(200, content=b"audio")

        channel = _channel(handler, voice_id="voice-123")
        await channel.text_to_speech("hello")

        assert seen["path"] == "/v1/text-to-speech/voice-123"

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        channel = _channel(lambda request: httpx.Response(500, text="upstream down"))

        with pytest.raises(SpeechError) as exc_info:
            await channel.text_to_speech("hello")

        assert exc_info.value.status_code == 500


class TestElevenLabsUnconfigured:
    """Without an API key the channel refuses STT and stays silent."""

    @pytest.fixture
    def channel(self, monkeypatch, tmp_path):
        monkeypatch.delenv("ELEVENLABS_API_KEY", raising=False)
        monkeypatch.chdir(tmp_path)
        return ElevenLabsSpeechChannel()

    def test_not_configured(self, channel):
        assert channel.is_configured is False

    @pytest.mark.asyncio
    async def test_speech_to_text_raises(self, channel):
        with pytest.raises(SpeechError):
            await channel.speech_to_text(b"fake-audio")

    @pytest.mark.asyncio
    async def test_text_to_speech_returns_none(self, channel):
        assert await channel.text_to_speech("hello") is None


class TestSimulatedSpeechChannel:
    """Tests for the canned transcript channel."""

    @pytest.mark.asyncio
    async def test_returns_a_sample(self):
        channel = SimulatedSpeechChannel()
        assert await channel.speech_to_text(b"anything") in SAMPLE_COMMANDS

    @pytest.mark.asyncio
    async def test_choice_is_injectable(self):
        channel = SimulatedSpeechChannel(choose=lambda samples: samples[-1])
        assert await channel.speech_to_text(b"") == "Show my budget"

    @pytest.mark.asyncio
    async def test_never_speaks(self):
        assert await SimulatedSpeechChannel().text_to_speech("hello") is None

    def test_requires_samples(self):
        with pytest.raises(ValueError):
            SimulatedSpeechChannel(samples=[])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
