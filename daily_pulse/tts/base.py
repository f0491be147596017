# daily_pulse/tts/base.py
"""
Base interface for narration (text-to-speech) generators.
"""

import io
import math
import wave
from abc import ABC, abstractmethod
from dataclasses import dataclass

# Gemini TTS returns L16 (16-bit linear PCM) at 24kHz mono
PCM_SAMPLE_RATE = 24000
PCM_SAMPLE_WIDTH = 2
PCM_CHANNELS = 1


class NarrationError(Exception):
    """The narration service failed or returned no audio."""


@dataclass
class NarrationResult:
    """Encoded audio plus its duration in whole seconds."""
    audio: bytes  # Complete WAV file
    duration_seconds: int


def pcm_to_wav(
    pcm: bytes,
    sample_rate: int = PCM_SAMPLE_RATE,
    sample_width: int = PCM_SAMPLE_WIDTH,
    channels: int = PCM_CHANNELS,
) -> bytes:
    """Wrap raw PCM frames in a WAV header."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(channels)
        wav_file.setsampwidth(sample_width)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(pcm)
    return buffer.getvalue()


def wav_duration_seconds(data: bytes) -> int:
    """Duration of a WAV file, rounded up to whole seconds."""
    with wave.open(io.BytesIO(data), "rb") as wav_file:
        frames = wav_file.getnframes()
        rate = wav_file.getframerate()
    if not rate:
        return 0
    return math.ceil(frames / rate)


class NarrationGenerator(ABC):
    """Abstract base class for narration generators."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the provider name (e.g., 'gemini', 'placeholder')."""
        pass

    @abstractmethod
    def synthesize(self, script: str) -> NarrationResult:
        """
        Narrate the script.

        Raises:
            NarrationError: synthesis failed
        """
        pass
