# daily_pulse/services/__init__.py
"""
Business logic services.
"""

from daily_pulse.services.generation_jobs import GenerationInProgressError, GenerationJobRegistry
from daily_pulse.services.newsletter_service import NewsletterService, build_newsletter_service

__all__ = [
    "NewsletterService",
    "build_newsletter_service",
    "GenerationJobRegistry",
    "GenerationInProgressError",
]
