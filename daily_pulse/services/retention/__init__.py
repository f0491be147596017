# daily_pulse/services/retention/__init__.py
"""
Retention management for newsletter artifacts.

Two fixed windows:
- Audio files: 14 days by modification time
- Newsletter rows: 365 days by publish date

Services:
- policy: retention windows and cutoff computation
- cleanup_service: dry-run stats and the deleting cleanup run
"""

from daily_pulse.services.retention.cleanup_service import (
    CleanupResult,
    CleanupStats,
    compute_stats,
    run_cleanup,
)
from daily_pulse.services.retention.policy import (
    AUDIO_RETENTION_DAYS,
    DEFAULT_POLICY,
    TEXT_RETENTION_DAYS,
    RetentionPolicy,
)

__all__ = [
    # Policy
    "RetentionPolicy",
    "DEFAULT_POLICY",
    "AUDIO_RETENTION_DAYS",
    "TEXT_RETENTION_DAYS",
    # Cleanup
    "compute_stats",
    "run_cleanup",
    "CleanupStats",
    "CleanupResult",
]
