"""
Pydantic schemas for API request/response validation.
"""

from daily_pulse.schemas.cleanup import (
    AudioFileStats,
    CleanupResultsOut,
    CleanupRunResponse,
    CleanupStatsOut,
    CleanupStatsResponse,
    CutoffDates,
    NewsletterRecordStats,
    SchedulerStatusOut,
    SchedulerStatusResponse,
)
from daily_pulse.schemas.newsletter import (
    DeletedNewsletter,
    DeleteNewsletterResponse,
    GenerateRequest,
    GenerateResponse,
    GenerationJobsResponse,
    NewsletterHistoryResponse,
    NewsletterOut,
    NewsletterResponse,
)

__all__ = [
    # Newsletter
    "GenerateRequest",
    "GenerateResponse",
    "NewsletterOut",
    "NewsletterResponse",
    "NewsletterHistoryResponse",
    "GenerationJobsResponse",
    "DeletedNewsletter",
    "DeleteNewsletterResponse",
    # Cleanup
    "AudioFileStats",
    "NewsletterRecordStats",
    "CutoffDates",
    "CleanupStatsOut",
    "CleanupStatsResponse",
    "CleanupResultsOut",
    "CleanupRunResponse",
    "SchedulerStatusOut",
    "SchedulerStatusResponse",
]
