"""
Schemas for retention cleanup endpoints.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class AudioFileStats(BaseModel):
    total: int
    to_delete: int
    total_size_mb: float
    to_delete_size_mb: float


class NewsletterRecordStats(BaseModel):
    total: int
    to_delete: int


class CutoffDates(BaseModel):
    audio: str = Field(..., description="Audio cutoff date, YYYY-MM-DD")
    newsletter: str = Field(..., description="Newsletter cutoff date, YYYY-MM-DD")


class CleanupStatsOut(BaseModel):
    audio_files: AudioFileStats
    newsletters: NewsletterRecordStats
    cutoff_dates: CutoffDates


class CleanupStatsResponse(BaseModel):
    """
    Dry-run snapshot.
    GET /cleanup/stats
    """
    success: bool = True
    stats: CleanupStatsOut


class CleanupResultsOut(BaseModel):
    audio_files_deleted: int
    audio_errors: int
    audio_files_vanished: int = 0
    newsletters_deleted: int
    database_errors: int
    deleted_files: List[Dict[str, Any]] = Field(default_factory=list)
    deleted_records: List[Dict[str, Any]] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    start_time: datetime
    end_time: datetime
    duration_ms: int


class CleanupRunResponse(BaseModel):
    """
    Cleanup summary.
    POST /cleanup/run
    """
    success: bool
    message: str
    results: CleanupResultsOut


class SchedulerStatusOut(BaseModel):
    running: bool
    schedule: str
    next_run: Optional[datetime] = None


class SchedulerStatusResponse(BaseModel):
    """
    Cleanup scheduler status.
    GET /cleanup/scheduler
    """
    success: bool = True
    scheduler: SchedulerStatusOut
