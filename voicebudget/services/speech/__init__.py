"""
Speech Services Package

Speech-to-text and text-to-speech behind one interface.
"""

from voicebudget.services.speech.interface import SpeechChannel, SpeechError
from voicebudget.services.speech.elevenlabs import ElevenLabsSpeechChannel
from voicebudget.services.speech.simulated import SAMPLE_COMMANDS, SimulatedSpeechChannel

__all__ = [
    "ElevenLabsSpeechChannel",
    "SAMPLE_COMMANDS",
    "SimulatedSpeechChannel",
    "SpeechChannel",
    "SpeechError",
]
