# daily_pulse/tts/placeholder.py
"""
Placeholder narration: one second of silence.

Used when no TTS service is configured. Duration is estimated from the
script at a typical speaking rate rather than measured from the audio.
"""

import math

from daily_pulse.tts.base import NarrationGenerator, NarrationResult, pcm_to_wav

WORDS_PER_MINUTE = 150
SILENCE_SAMPLE_RATE = 44100


def estimate_duration_seconds(script: str) -> int:
    words = len(script.split())
    return math.ceil(words / WORDS_PER_MINUTE * 60)


class PlaceholderNarrationGenerator(NarrationGenerator):

    @property
    def name(self) -> str:
        return "placeholder"

    def synthesize(self, script: str) -> NarrationResult:
        silence = bytes(SILENCE_SAMPLE_RATE * 2)  # 1s, 16-bit mono
        return NarrationResult(
            audio=pcm_to_wav(silence, sample_rate=SILENCE_SAMPLE_RATE),
            duration_seconds=estimate_duration_seconds(script),
        )
