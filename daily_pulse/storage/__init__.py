# daily_pulse/storage/__init__.py
"""
Audio storage for newsletter narration.

Narration files are kept on the local filesystem in one flat directory,
not in Postgres. The newsletter row only stores the public URL.
"""

from daily_pulse.storage.base import (
    AudioArtifact,
    AudioStore,
    DeleteOutcome,
    parse_publish_date,
)
from daily_pulse.storage.factory import (
    get_audio_store,
    reset_audio_store,
    set_audio_store,
)
from daily_pulse.storage.local_provider import LocalAudioStore

__all__ = [
    "AudioStore",
    "AudioArtifact",
    "DeleteOutcome",
    "LocalAudioStore",
    "parse_publish_date",
    "get_audio_store",
    "set_audio_store",
    "reset_audio_store",
]
