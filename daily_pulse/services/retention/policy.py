# daily_pulse/services/retention/policy.py
"""
Fixed retention windows.

- Audio: 14 days, by file modification time
- Newsletter text: 365 days, by publish_date
"""

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Optional

AUDIO_RETENTION_DAYS = 14
TEXT_RETENTION_DAYS = 365


def utc_now() -> datetime:
    """Naive UTC, comparable with artifact mtimes and DB timestamps."""
    return datetime.now(UTC).replace(tzinfo=None)


@dataclass(frozen=True)
class RetentionPolicy:
    """Retention windows in days."""

    audio_days: int = AUDIO_RETENTION_DAYS
    text_days: int = TEXT_RETENTION_DAYS

    def audio_cutoff(self, now: Optional[datetime] = None) -> datetime:
        """Audio modified strictly before this instant is expired."""
        return (now or utc_now()) - timedelta(days=self.audio_days)

    def text_cutoff(self, now: Optional[datetime] = None) -> date:
        """Newsletters published strictly before this date are expired."""
        return ((now or utc_now()) - timedelta(days=self.text_days)).date()


DEFAULT_POLICY = RetentionPolicy()
