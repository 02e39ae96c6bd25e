"""
Simulated speech channel.

Stands in for a real provider when no API key is configured, and is the
fallback transcript source when real transcription fails.
"""

import random
from typing import Callable, Optional, Sequence

from voicebudget.services.speech.interface import SpeechChannel


SAMPLE_COMMANDS = (
    "Add $50 for groceries",
    "Add $2000 from salary to my income",
    "Spend $25 on transportation",
    "Add $100 from freelance to my income",
    "Deduct $15 for coffee",
    "Show my budget",
)


class SimulatedSpeechChannel(SpeechChannel):
    """Returns a canned sample command as the transcript and never speaks."""

    def __init__(
        self,
        samples: Sequence[str] = SAMPLE_COMMANDS,
        choose: Callable[[Sequence[str]], str] = random.choice,
    ):
        if not samples:
            raise ValueError("At least one sample command is required")
        self._samples = tuple(samples)
        self._choose = choose

    @property
    def samples(self) -> tuple[str, ...]:
        return self._samples

    def sample_transcript(self) -> str:
        return self._choose(self._samples)

    async def speech_to_text(
        self,
        audio: bytes,
        filename: str = "recording.mp4",
    ) -> str:
        return self.sample_transcript()

    async def text_to_speech(self, text: str) -> Optional[bytes]:
        return None
