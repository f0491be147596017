# daily_pulse/services/retention/cleanup_service.py
"""
Cleanup service for expired audio files and newsletter rows.

Handles:
- Dry-run statistics (compute_stats) using the same predicates as deletion
- Audio pass: per-file conditional delete, errors counted, loop continues
- Text pass: one bulk delete by publish_date, failure rolled back and counted
- Both passes always report, whatever happened in the other
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session

from daily_pulse.services import newsletter_store
from daily_pulse.services.retention.policy import DEFAULT_POLICY, RetentionPolicy, utc_now
from daily_pulse.storage.base import AudioStore, DeleteOutcome

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


@dataclass
class CleanupStats:
    """Read-only snapshot of what a cleanup would delete."""

    audio_total: int = 0
    audio_to_delete: int = 0
    audio_total_bytes: int = 0
    audio_to_delete_bytes: int = 0
    newsletters_total: int = 0
    newsletters_to_delete: int = 0
    audio_cutoff: Optional[datetime] = None
    newsletter_cutoff: Optional[date] = None

    @property
    def audio_total_mb(self) -> float:
        return round(self.audio_total_bytes / BYTES_PER_MB, 2)

    @property
    def audio_to_delete_mb(self) -> float:
        return round(self.audio_to_delete_bytes / BYTES_PER_MB, 2)


@dataclass
class CleanupResult:
    """Result of a cleanup run."""

    audio_files_deleted: int = 0
    audio_errors: int = 0
    audio_files_vanished: int = 0
    newsletters_deleted: int = 0
    database_errors: int = 0
    deleted_files: list[dict] = field(default_factory=list)
    deleted_records: list[dict] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    audio_cutoff: Optional[datetime] = None
    newsletter_cutoff: Optional[date] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration_ms: int = 0

    @property
    def success(self) -> bool:
        return self.audio_errors == 0 and self.database_errors == 0


def compute_stats(
    db: Session,
    store: AudioStore,
    policy: RetentionPolicy = DEFAULT_POLICY,
    now: Optional[datetime] = None,
) -> CleanupStats:
    """
    Preview cleanup without deleting anything.

    to_delete counts use exactly the predicates run_cleanup() applies, so
    with the same `now` and no changes in between they match what it deletes.
    Storage errors propagate.
    """
    now = now or utc_now()
    stats = CleanupStats(
        audio_cutoff=policy.audio_cutoff(now),
        newsletter_cutoff=policy.text_cutoff(now),
    )

    for artifact in store.list_artifacts():
        stats.audio_total += 1
        stats.audio_total_bytes += artifact.size_bytes
        if artifact.last_modified < stats.audio_cutoff:
            stats.audio_to_delete += 1
            stats.audio_to_delete_bytes += artifact.size_bytes

    stats.newsletters_total = newsletter_store.count_all(db)
    stats.newsletters_to_delete = len(newsletter_store.get_older_than(db, stats.newsletter_cutoff))

    return stats


def _cleanup_audio(store: AudioStore, cutoff: datetime, result: CleanupResult) -> None:
    try:
        artifacts = store.list_artifacts()
    except OSError as e:
        logger.error(f"Could not list audio files: {e}")
        result.audio_errors += 1
        result.errors.append(f"audio listing: {e}")
        return

    logger.info(f"Found {len(artifacts)} audio files, cutoff {cutoff.isoformat()}")

    for artifact in artifacts:
        if not artifact.last_modified < cutoff:
            continue
        try:
            outcome = store.delete_if_older_than(artifact, cutoff)
        except (OSError, ValueError) as e:
            logger.error(f"Error deleting {artifact.file_name}: {e}")
            result.audio_errors += 1
            result.errors.append(f"{artifact.file_name}: {e}")
            continue

        if outcome == DeleteOutcome.DELETED:
            result.audio_files_deleted += 1
            result.deleted_files.append(
                {
                    "name": artifact.file_name,
                    "size_bytes": artifact.size_bytes,
                    "modified": artifact.last_modified.isoformat(),
                }
            )
            logger.info(f"Deleted {artifact.file_name} ({artifact.size_mb:.2f} MB)")
        elif outcome == DeleteOutcome.VANISHED:
            result.audio_files_vanished += 1


def _cleanup_newsletters(db: Session, cutoff: date, result: CleanupResult) -> None:
    try:
        expired = newsletter_store.get_older_than(db, cutoff)
        if not expired:
            logger.info(f"No newsletters published before {cutoff.isoformat()}")
            return

        records = [
            {"id": n.id, "publish_date": n.publish_date.isoformat(), "title": n.title}
            for n in expired
        ]
        result.newsletters_deleted = newsletter_store.delete_older_than(db, cutoff)
        result.deleted_records = records
        logger.info(f"Deleted {result.newsletters_deleted} newsletters published before {cutoff.isoformat()}")
    except Exception as e:
        db.rollback()
        logger.error(f"Newsletter cleanup failed: {e}")
        result.database_errors = 1
        result.errors.append(f"database: {e}")


def run_cleanup(
    db: Session,
    store: AudioStore,
    policy: RetentionPolicy = DEFAULT_POLICY,
    now: Optional[datetime] = None,
) -> CleanupResult:
    """
    Delete expired audio files and newsletter rows.

    Never raises for per-file or database errors: they are counted on the
    result so both halves always report.
    """
    now = now or utc_now()
    result = CleanupResult(
        audio_cutoff=policy.audio_cutoff(now),
        newsletter_cutoff=policy.text_cutoff(now),
        start_time=utc_now(),
    )

    logger.info(
        f"Starting cleanup (audio > {policy.audio_days}d, newsletters > {policy.text_days}d)",
        extra={"event": "cleanup_start"},
    )

    _cleanup_audio(store, result.audio_cutoff, result)
    _cleanup_newsletters(db, result.newsletter_cutoff, result)

    result.end_time = utc_now()
    result.duration_ms = int((result.end_time - result.start_time).total_seconds() * 1000)

    logger.info(
        f"Cleanup finished: {result.audio_files_deleted} audio files ({result.audio_errors} errors), "
        f"{result.newsletters_deleted} newsletters ({result.database_errors} errors) in {result.duration_ms}ms",
        extra={
            "event": "cleanup_complete",
            "files_deleted": result.audio_files_deleted,
            "records_deleted": result.newsletters_deleted,
            "duration_ms": result.duration_ms,
        },
    )
    return result
