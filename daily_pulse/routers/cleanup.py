# daily_pulse/routers/cleanup.py
"""
Retention cleanup endpoints.

POST /cleanup/run        - Run cleanup now (synchronous)
GET  /cleanup/stats      - Preview what cleanup would delete
GET  /cleanup/scheduler  - Daily scheduler status
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from daily_pulse.database import get_db
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
from daily_pulse.services.retention import compute_stats, run_cleanup
from daily_pulse.services.scheduler import SchedulerState, get_scheduler_status
from daily_pulse.storage import AudioStore, get_audio_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cleanup", tags=["cleanup"])


def get_scheduler_state(request: Request) -> SchedulerState:
    return request.app.state.cleanup_scheduler


@router.post("/run", response_model=CleanupRunResponse)
def run_cleanup_now(
    db: Session = Depends(get_db),
    store: AudioStore = Depends(get_audio_store),
) -> CleanupRunResponse:
    """Delete audio older than 14 days and newsletters older than 365 days."""
    logger.info("Manual cleanup triggered via API")
    result = run_cleanup(db, store)

    return CleanupRunResponse(
        success=result.success,
        message="Cleanup completed successfully" if result.success else "Cleanup completed with errors",
        results=CleanupResultsOut(
            audio_files_deleted=result.audio_files_deleted,
            audio_errors=result.audio_errors,
            audio_files_vanished=result.audio_files_vanished,
            newsletters_deleted=result.newsletters_deleted,
            database_errors=result.database_errors,
            deleted_files=result.deleted_files,
            deleted_records=result.deleted_records,
            errors=result.errors,
            start_time=result.start_time,
            end_time=result.end_time,
            duration_ms=result.duration_ms,
        ),
    )


@router.get("/stats", response_model=CleanupStatsResponse)
def get_cleanup_stats(
    db: Session = Depends(get_db),
    store: AudioStore = Depends(get_audio_store),
) -> CleanupStatsResponse:
    """Dry run: counts and sizes only, nothing is deleted."""
    stats = compute_stats(db, store)

    return CleanupStatsResponse(
        stats=CleanupStatsOut(
            audio_files=AudioFileStats(
                total=stats.audio_total,
                to_delete=stats.audio_to_delete,
                total_size_mb=stats.audio_total_mb,
                to_delete_size_mb=stats.audio_to_delete_mb,
            ),
            newsletters=NewsletterRecordStats(
                total=stats.newsletters_total,
                to_delete=stats.newsletters_to_delete,
            ),
            cutoff_dates=CutoffDates(
                audio=stats.audio_cutoff.date().isoformat(),
                newsletter=stats.newsletter_cutoff.isoformat(),
            ),
        )
    )


@router.get("/scheduler", response_model=SchedulerStatusResponse)
def get_cleanup_scheduler(
    state: SchedulerState = Depends(get_scheduler_state),
) -> SchedulerStatusResponse:
    return SchedulerStatusResponse(scheduler=SchedulerStatusOut(**get_scheduler_status(state)))
