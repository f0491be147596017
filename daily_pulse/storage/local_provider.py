# daily_pulse/storage/local_provider.py
"""
Local filesystem audio store.

Files live in one flat directory which the API also serves under /audio.
"""

import logging
import os
import tempfile
from datetime import UTC, date, datetime
from pathlib import Path

from daily_pulse.logging_config import log_storage_operation
from daily_pulse.storage.base import (
    AUDIO_EXTENSION,
    AudioArtifact,
    AudioStore,
    DeleteOutcome,
    parse_publish_date,
)

logger = logging.getLogger(__name__)


def _mtime_to_utc(mtime_ns: int) -> datetime:
    """Convert a stat mtime (ns since epoch) to naive UTC, keeping microseconds."""
    seconds, nanos = divmod(mtime_ns, 1_000_000_000)
    dt = datetime.fromtimestamp(seconds, UTC).replace(tzinfo=None)
    return dt.replace(microsecond=nanos // 1000)


class LocalAudioStore(AudioStore):
    """
    Local filesystem audio store.

    Configuration:
    - AUDIO_STORAGE_PATH: Base directory (default: ./data/audio)
    - AUDIO_FILE_PREFIX: File name prefix (default: daily-pulse)
    """

    def __init__(self, base_path: str, file_prefix: str = "daily-pulse"):
        super().__init__(file_prefix=file_prefix)
        self._base_path = Path(base_path)
        logger.info(f"Local audio store initialized: {self._base_path}")

    @property
    def name(self) -> str:
        return "local"

    @property
    def base_path(self) -> Path:
        return self._base_path

    def _get_path(self, file_name: str) -> Path:
        """Get filesystem path for a file name, with path traversal protection."""
        resolved = (self._base_path / file_name).resolve()
        if not resolved.is_relative_to(self._base_path.resolve()):
            raise ValueError("Path traversal detected")
        return resolved

    def path_for(self, publish_date: date) -> Path:
        return self._get_path(self.file_name_for(publish_date))

    def ensure_storage_root(self) -> None:
        self._base_path.mkdir(parents=True, exist_ok=True)

    def write_audio(self, publish_date: date, data: bytes) -> AudioArtifact:
        """Write to a temp file in the same directory, then rename over the target."""
        self.ensure_storage_root()
        file_name = self.file_name_for(publish_date)
        target = self._get_path(file_name)

        with log_storage_operation("write", file_name) as metrics:
            fd, tmp_name = tempfile.mkstemp(dir=self._base_path, prefix=".tmp-", suffix=AUDIO_EXTENSION)
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
            metrics["size_bytes"] = len(data)

        stat = target.stat()
        return AudioArtifact(
            file_name=file_name,
            size_bytes=stat.st_size,
            last_modified=_mtime_to_utc(stat.st_mtime_ns),
            publish_date=publish_date,
        )

    def list_artifacts(self) -> list[AudioArtifact]:
        if not self._base_path.is_dir():
            return []

        artifacts = []
        for entry in os.scandir(self._base_path):
            # Skip in-flight temp files and anything that isn't narration
            if not entry.name.endswith(AUDIO_EXTENSION) or entry.name.startswith("."):
                continue
            try:
                if not entry.is_file():
                    continue
                stat = entry.stat()
            except FileNotFoundError:
                continue
            artifacts.append(
                AudioArtifact(
                    file_name=entry.name,
                    size_bytes=stat.st_size,
                    last_modified=_mtime_to_utc(stat.st_mtime_ns),
                    publish_date=parse_publish_date(entry.name, self.file_prefix),
                )
            )

        artifacts.sort(key=lambda a: a.file_name)
        return artifacts

    def delete_if_older_than(self, artifact: AudioArtifact, cutoff: datetime) -> DeleteOutcome:
        path = self._get_path(artifact.file_name)
        try:
            last_modified = _mtime_to_utc(path.stat().st_mtime_ns)
        except FileNotFoundError:
            logger.debug(f"Audio file already gone: {artifact.file_name}")
            return DeleteOutcome.VANISHED
        if not last_modified < cutoff:
            return DeleteOutcome.KEPT

        # A file removed between stat and unlink is not a storage failure
        with log_storage_operation("delete", artifact.file_name) as metrics:
            try:
                path.unlink()
            except FileNotFoundError:
                logger.debug(f"Audio file already gone: {artifact.file_name}")
                return DeleteOutcome.VANISHED
            metrics["size_bytes"] = artifact.size_bytes
        return DeleteOutcome.DELETED

    def exists(self, publish_date: date) -> bool:
        return self.path_for(publish_date).is_file()

    def delete(self, publish_date: date) -> bool:
        path = self.path_for(publish_date)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True
