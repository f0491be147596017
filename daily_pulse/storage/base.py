# daily_pulse/storage/base.py
"""
Audio storage interface for narration files.

Design principles:
- One audio file per publish date, named <prefix>-<YYYY-MM-DD>.wav
- Flat directory, served read-only under /audio
- Not transactionally coupled to the newsletter row
- Every listing re-reads storage; nothing is cached between calls
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional


AUDIO_EXTENSION = ".wav"


class DeleteOutcome(str, Enum):
    """Outcome of a conditional delete."""
    DELETED = "deleted"
    KEPT = "kept"  # Newer than the cutoff when re-checked
    VANISHED = "vanished"  # Already gone, not an error


@dataclass(frozen=True)
class AudioArtifact:
    """A stored narration file."""
    file_name: str
    size_bytes: int
    last_modified: datetime  # Naive UTC, from file mtime
    publish_date: Optional[date] = None  # None when the name doesn't match the pattern

    @property
    def size_mb(self) -> float:
        return self.size_bytes / (1024 * 1024)


def parse_publish_date(file_name: str, prefix: str) -> Optional[date]:
    """
    Extract the publish date from '<prefix>-YYYY-MM-DD.wav'.

    Returns None for foreign names or impossible dates.
    """
    pattern = rf"^{re.escape(prefix)}-(\d{{4}}-\d{{2}}-\d{{2}}){re.escape(AUDIO_EXTENSION)}$"
    match = re.match(pattern, file_name)
    if not match:
        return None
    try:
        return date.fromisoformat(match.group(1))
    except ValueError:
        return None


class AudioStore(ABC):
    """
    Abstract interface for narration storage.

    Implementations must handle:
    - Atomic writes (a referenced file is never half written)
    - Listing with size and modification time
    - Conditional deletion that tolerates concurrent removal
    """

    def __init__(self, file_prefix: str = "daily-pulse"):
        self.file_prefix = file_prefix

    @property
    @abstractmethod
    def name(self) -> str:
        """Store name (e.g., 'local')."""
        pass

    def file_name_for(self, publish_date: date) -> str:
        """File name for a date: daily-pulse-2025-06-01.wav"""
        return f"{self.file_prefix}-{publish_date.isoformat()}{AUDIO_EXTENSION}"

    def public_path_for(self, publish_date: date) -> str:
        """URL path the static mount serves the file under."""
        return f"/audio/{self.file_name_for(publish_date)}"

    @abstractmethod
    def ensure_storage_root(self) -> None:
        """Create the storage location if missing. Idempotent."""
        pass

    @abstractmethod
    def write_audio(self, publish_date: date, data: bytes) -> AudioArtifact:
        """
        Store narration for a date, replacing any previous file.

        Returns:
            AudioArtifact describing the written file
        """
        pass

    @abstractmethod
    def list_artifacts(self) -> list[AudioArtifact]:
        """
        List audio files currently in storage.

        Returns an empty list if the storage location doesn't exist.
        """
        pass

    @abstractmethod
    def delete_if_older_than(self, artifact: AudioArtifact, cutoff: datetime) -> DeleteOutcome:
        """
        Delete an artifact if its modification time is strictly before cutoff.

        Re-checks the modification time at delete time. Errors other than
        the file having vanished propagate to the caller.
        """
        pass

    @abstractmethod
    def exists(self, publish_date: date) -> bool:
        """Check if narration exists for a date."""
        pass

    @abstractmethod
    def delete(self, publish_date: date) -> bool:
        """
        Delete narration for a date.

        Returns:
            True if deleted, False if not found
        """
        pass
