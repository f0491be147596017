# daily_pulse/storage/factory.py
"""
Factory function for the audio store.
"""

import logging
from typing import Optional

from daily_pulse.config import get_settings
from daily_pulse.storage.base import AudioStore

logger = logging.getLogger(__name__)

# Global singleton instance
_audio_store: Optional[AudioStore] = None


def get_audio_store() -> AudioStore:
    """
    Get or create the audio store instance.

    Environment:
        AUDIO_STORAGE_PATH: directory for narration files
        AUDIO_FILE_PREFIX: file name prefix
    """
    global _audio_store

    if _audio_store is not None:
        return _audio_store

    from daily_pulse.storage.local_provider import LocalAudioStore

    settings = get_settings()
    _audio_store = LocalAudioStore(
        base_path=settings.AUDIO_STORAGE_PATH,
        file_prefix=settings.AUDIO_FILE_PREFIX,
    )

    logger.info(f"Audio store initialized: {_audio_store.name}")
    return _audio_store


def set_audio_store(store: AudioStore) -> None:
    """
    Set a custom audio store (useful for testing).
    """
    global _audio_store
    _audio_store = store


def reset_audio_store() -> None:
    """
    Reset the audio store singleton (for testing).
    """
    global _audio_store
    _audio_store = None
