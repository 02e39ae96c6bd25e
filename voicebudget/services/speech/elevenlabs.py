"""
Speech Channel using ElevenLabs

Two endpoints are used:

    POST /speech-to-text              multipart upload, returns {"text": ...}
    POST /text-to-speech/{voice_id}   JSON body, returns audio/mpeg bytes

Both authenticate with the `xi-api-key` header. Transport errors
(connection resets, timeouts) are retried; HTTP error statuses are not.
"""

from typing import Optional

import httpx
import structlog
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from voicebudget.config import ElevenLabsSettings, get_settings
from voicebudget.services.speech.interface import SpeechChannel, SpeechError


logger = structlog.get_logger(__name__)


VOICE_SETTINGS = {
    "stability": 0.5,
    "similarity_boost": 0.5,
    "style": 0.0,
    "use_speaker_boost": True,
    "speed": 1.0,
}


class ElevenLabsSpeechChannel(SpeechChannel):
    """
    ElevenLabs speech-to-text and text-to-speech over httpx.

    Args:
        settings: Provider settings. Loaded from the environment when omitted;
                  if the API key is missing there, the channel is unconfigured.
        transport: Optional httpx transport (tests pass httpx.MockTransport).
    """

    def __init__(
        self,
        settings: Optional[ElevenLabsSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if settings is None:
            try:
                settings = get_settings().elevenlabs
            except ValidationError:
                settings = None
        self._settings = settings
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return self._settings is not None and bool(self._settings.api_key)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._settings.base_url,
            timeout=self._settings.timeout_seconds,
            headers={"xi-api-key": self._settings.api_key},
            transport=self._transport,
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _post(self, path: str, **kwargs) -> httpx.Response:
        """POST to the API, raising for error statuses."""
        async with self._client() as client:
            response = await client.post(path, **kwargs)
            response.raise_for_status()
            return response

    async def speech_to_text(
        self,
        audio: bytes,
        filename: str = "recording.mp4",
    ) -> str:
        if not self.is_configured:
            raise SpeechError("ElevenLabs API key not configured")
        if not audio:
            raise SpeechError("No audio to transcribe")

        try:
            response = await self._post(
                "/speech-to-text",
                files={"file": (filename, audio)},
                data={
                    "model_id": self._settings.stt_model_id,
                    "language_code": self._settings.language_code,
                },
            )
        except httpx.HTTPStatusError as e:
            logger.error(
                "speech_to_text_failed",
                status_code=e.response.status_code,
                body=e.response.text[:200],
            )
            raise SpeechError(
                f"Speech-to-text failed: {e.response.status_code}",
                status_code=e.response.status_code,
            )
        except httpx.HTTPError as e:
            logger.error("speech_to_text_failed", error=str(e))
            raise SpeechError(f"Speech-to-text request failed: {e}")

        try:
            text = response.json().get("text", "")
        except ValueError:
            raise SpeechError("Speech-to-text returned invalid JSON")

        logger.info("speech_to_text_completed", characters=len(text))
        return text

    async def text_to_speech(self, text: str) -> Optional[bytes]:
        if not self.is_configured:
            logger.debug("text_to_speech_skipped", reason="no_api_key")
            return None

        try:
            response = await self._post(
                f"/text-to-speech/{self._settings.voice_id}",
                headers={"Accept": "audio/mpeg"},
                json={
                    "text": text,
                    "model_id": self._settings.tts_model_id,
                    "output_format": self._settings.output_format,
                    "voice_settings": VOICE_SETTINGS,
                },
            )
        except httpx.HTTPStatusError as e:
            logger.error(
                "text_to_speech_failed",
                status_code=e.response.status_code,
                body=e.response.text[:200],
            )
            raise SpeechError(
                f"Text-to-speech failed: {e.response.status_code}",
                status_code=e.response.status_code,
            )
        except httpx.HTTPError as e:
            logger.error("text_to_speech_failed", error=str(e))
            raise SpeechError(f"Text-to-speech request failed: {e}")

        logger.info("text_to_speech_completed", audio_bytes=len(response.content))
        return response.content
