"""
Abstract Speech Channel

Speech-to-text turns a recorded command into a transcript; text-to-speech
turns a confirmation into audio. Which provider is used is decided once,
when the app components are built.
"""

from abc import ABC, abstractmethod
from typing import Optional


class SpeechChannel(ABC):
    """Abstract interface for speech recognition and synthesis."""

    @abstractmethod
    async def speech_to_text(
        self,
        audio: bytes,
        filename: str = "recording.mp4",
    ) -> str:
        """
        Transcribe a recording.

        Args:
            audio: Raw recording bytes
            filename: Name sent with the upload (carries the container type)

        Returns:
            The transcript text

        Raises:
            SpeechError: If transcription fails
        """
        pass

    @abstractmethod
    async def text_to_speech(self, text: str) -> Optional[bytes]:
        """
        Synthesize speech for `text`.

        Returns:
            Audio bytes, or None when this channel produces no audio

        Raises:
            SpeechError: If synthesis was attempted and failed
        """
        pass


class SpeechError(Exception):
    """Speech recognition or synthesis failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
