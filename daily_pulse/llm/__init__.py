# daily_pulse/llm/__init__.py
"""
Content generator abstraction layer.

Usage:
    from daily_pulse.llm import get_content_generator

    generator = get_content_generator()  # Uses CONTENT_PROVIDER
    content = generator.generate(date(2025, 6, 1))
"""

from __future__ import annotations

from typing import Optional

from daily_pulse.config import get_settings
from daily_pulse.llm.base import (
    ContentGenerationError,
    ContentGenerator,
    ContentValidationError,
    NewsletterContent,
    NewsletterSection,
    NewsletterSource,
    parse_newsletter_payload,
)

__all__ = [
    "ContentGenerationError",
    "ContentGenerator",
    "ContentValidationError",
    "NewsletterContent",
    "NewsletterSection",
    "NewsletterSource",
    "parse_newsletter_payload",
    "get_content_generator",
]


def get_content_generator(
    provider_name: Optional[str] = None,
    **kwargs,
) -> ContentGenerator:
    """
    Factory function to get a content generator instance.

    Args:
        provider_name: 'gemini', 'openai' or 'mock'.
                      If not provided, uses CONTENT_PROVIDER (default: 'gemini')
        **kwargs: Additional arguments passed to the generator constructor
    """
    name = provider_name or get_settings().CONTENT_PROVIDER
    name = name.lower().strip()

    if name == "gemini":
        from daily_pulse.llm.gemini_provider import GeminiContentGenerator

        return GeminiContentGenerator(**kwargs)

    if name == "openai":
        from daily_pulse.llm.openai_provider import OpenAIContentGenerator

        return OpenAIContentGenerator(**kwargs)

    if name == "mock":
        from daily_pulse.llm.mock_provider import MockContentGenerator

        return MockContentGenerator()

    raise ValueError(
        f"Unknown content provider: {name}. Available: gemini, openai, mock"
    )
