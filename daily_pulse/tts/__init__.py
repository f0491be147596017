# daily_pulse/tts/__init__.py
"""
Narration generator abstraction layer.

Usage:
    from daily_pulse.tts import build_audio_script, get_narration_generator

    narrator = get_narration_generator()  # Uses NARRATION_PROVIDER
    result = narrator.synthesize(build_audio_script(content))
"""

from typing import Optional

from daily_pulse.config import get_settings
from daily_pulse.llm.base import NewsletterContent
from daily_pulse.tts.base import (
    NarrationError,
    NarrationGenerator,
    NarrationResult,
    pcm_to_wav,
    wav_duration_seconds,
)

__all__ = [
    "NarrationError",
    "NarrationGenerator",
    "NarrationResult",
    "build_audio_script",
    "get_narration_generator",
    "pcm_to_wav",
    "wav_duration_seconds",
]


def build_audio_script(content: NewsletterContent) -> str:
    """
    Title, hook, each section heading and body, then conclusion.

    Parts are separated by blank lines so the narrator pauses between them.
    """
    parts = [content.title, content.hook]
    for section in content.sections:
        parts.append(section.heading)
        parts.append(section.body)
    parts.append(content.conclusion)
    return "\n\n".join(p.strip() for p in parts if p and p.strip())


def get_narration_generator(
    provider_name: Optional[str] = None,
    **kwargs,
) -> NarrationGenerator:
    """
    Factory function to get a narration generator.

    Args:
        provider_name: 'gemini' or 'placeholder'.
                      If not provided, uses NARRATION_PROVIDER (default: 'gemini')
    """
    name = provider_name or get_settings().NARRATION_PROVIDER
    name = name.lower().strip()

    if name == "gemini":
        from daily_pulse.tts.gemini_tts import GeminiNarrationGenerator

        return GeminiNarrationGenerator(**kwargs)

    if name == "placeholder":
        from daily_pulse.tts.placeholder import PlaceholderNarrationGenerator

        return PlaceholderNarrationGenerator()

    raise ValueError(
        f"Unknown narration provider: {name}. Available: gemini, placeholder"
    )
