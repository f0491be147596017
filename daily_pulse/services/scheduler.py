# daily_pulse/services/scheduler.py
"""
Daily retention cleanup scheduler.

Runs the cleanup at 02:00 UTC every day on an APScheduler AsyncIOScheduler.
The scheduler handle lives in a SchedulerState owned by the application
(app.state.cleanup_scheduler) and is passed to start/stop/status explicitly.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Callable, Optional

from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

logger = logging.getLogger(__name__)

CLEANUP_HOUR_UTC = 2
CLEANUP_CRON = "0 2 * * *"
CLEANUP_JOB_ID = "daily_cleanup"


@dataclass
class SchedulerState:
    """Scheduler handle for one application instance."""

    scheduler: Optional[AsyncIOScheduler] = None
    job: Optional[Job] = None
    cron: str = CLEANUP_CRON

    @property
    def running(self) -> bool:
        return self.scheduler is not None and self.job is not None


def next_fire_time(now: Optional[datetime] = None) -> datetime:
    """Next 02:00 UTC strictly after now. Naive datetimes are taken as UTC."""
    now = now or datetime.now(UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    now = now.astimezone(UTC)

    candidate = now.replace(hour=CLEANUP_HOUR_UTC, minute=0, second=0, microsecond=0)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


def scheduled_cleanup() -> None:
    """Cleanup job body. Never raises; the scheduler keeps its schedule."""
    from daily_pulse.database import SessionLocal
    from daily_pulse.services.retention import run_cleanup
    from daily_pulse.storage import get_audio_store

    logger.info(f"Scheduled cleanup triggered at {datetime.now(UTC).isoformat()}")
    db = SessionLocal()
    try:
        result = run_cleanup(db, get_audio_store())
        logger.info(
            f"Scheduled cleanup completed: {result.audio_files_deleted} audio files, "
            f"{result.newsletters_deleted} newsletters deleted",
        )
    except Exception as e:
        logger.exception(f"Scheduled cleanup failed: {e}")
    finally:
        db.close()


def start_cleanup_scheduler(
    state: SchedulerState,
    job_func: Callable[[], Any] = scheduled_cleanup,
) -> Job:
    """
    Register the daily cleanup and start the scheduler.

    Replaces any job already registered on this state.
    Must be called with an event loop running.
    """
    stop_cleanup_scheduler(state)

    scheduler = AsyncIOScheduler(
        timezone=UTC,
        job_defaults={
            "coalesce": True,  # Combine missed runs into one
            "max_instances": 1,
            "misfire_grace_time": 3600,
        },
    )
    job = scheduler.add_job(
        job_func,
        CronTrigger(hour=CLEANUP_HOUR_UTC, minute=0, timezone=UTC),
        id=CLEANUP_JOB_ID,
        name="Daily Retention Cleanup",
        replace_existing=True,
    )
    scheduler.start()

    state.scheduler = scheduler
    state.job = job

    logger.info("Cleanup scheduler started: daily at 02:00 UTC (audio > 14 days, newsletters > 365 days)")
    return job


def stop_cleanup_scheduler(state: SchedulerState) -> None:
    """Shut the scheduler down. No-op when idle."""
    if state.scheduler is None:
        return

    if state.scheduler.running:
        state.scheduler.shutdown(wait=False)
    state.scheduler = None
    state.job = None
    logger.info("Cleanup scheduler stopped")


def get_scheduler_status(state: SchedulerState, now: Optional[datetime] = None) -> dict:
    """{running, schedule, next_run}; next_run is None when idle."""
    running = state.running
    return {
        "running": running,
        "schedule": f"{state.cron} (Daily at 02:00 UTC)",
        "next_run": next_fire_time(now) if running else None,
    }
