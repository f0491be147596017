# tests/conftest.py
"""
Shared fixtures.

Settings are read once (get_settings is cached), so the environment is
pinned here before anything imports daily_pulse.
"""

import os
import tempfile
from datetime import date

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("API_SECRET_KEY", "test-secret")
os.environ.setdefault("CONTENT_PROVIDER", "mock")
os.environ.setdefault("NARRATION_PROVIDER", "placeholder")
os.environ.setdefault("CLEANUP_SCHEDULER_ENABLED", "false")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("PUBLIC_URL", "http://localhost:3001")
os.environ.setdefault("AUDIO_STORAGE_PATH", tempfile.mkdtemp(prefix="daily-pulse-audio-"))

from daily_pulse.llm.base import (  # noqa: E402
    ContentGenerationError,
    ContentGenerator,
    NewsletterContent,
    NewsletterSection,
    NewsletterSource,
)
from daily_pulse.tts.base import NarrationGenerator, NarrationResult, pcm_to_wav  # noqa: E402


class FakeContentGenerator(ContentGenerator):
    """Deterministic content; records the dates it was asked for."""

    def __init__(self):
        self.calls = []

    @property
    def name(self) -> str:
        return "fake"

    @property
    def model_name(self) -> str:
        return "fake-model"

    def generate(self, publish_date: date) -> NewsletterContent:
        self.calls.append(publish_date)
        return NewsletterContent(
            title=f"Pulse for {publish_date.isoformat()}",
            hook="Oil slid and tech rallied.",
            sections=[
                NewsletterSection(heading="Energy", body="Brent fell 3% on supply news."),
                NewsletterSection(heading="Tech", body="Chipmakers led the Nasdaq higher."),
            ],
            conclusion="That's the pulse.",
            sources=[NewsletterSource(url="https://example.com/oil", title="Oil report")],
        )


class FailingContentGenerator(ContentGenerator):
    """Always fails, like a content service that is down."""

    @property
    def name(self) -> str:
        return "failing"

    @property
    def model_name(self) -> str:
        return "failing-model"

    def generate(self, publish_date: date) -> NewsletterContent:
        raise ContentGenerationError("content service unavailable")


class FakeNarrationGenerator(NarrationGenerator):
    """Two seconds of silence at 8kHz."""

    def __init__(self):
        self.scripts = []

    @property
    def name(self) -> str:
        return "fake"

    def synthesize(self, script: str) -> NarrationResult:
        self.scripts.append(script)
        audio = pcm_to_wav(bytes(8000 * 2 * 2), sample_rate=8000)
        return NarrationResult(audio=audio, duration_seconds=2)


@pytest.fixture
def db_session():
    """Fresh schema on the shared in-memory database, dropped afterwards."""
    from daily_pulse import models  # noqa: F401
    from daily_pulse.database import Base, SessionLocal, engine

    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def audio_store(tmp_path):
    """Local audio store in a temp dir, installed as the process-wide store."""
    from daily_pulse.storage import LocalAudioStore, reset_audio_store, set_audio_store

    store = LocalAudioStore(base_path=str(tmp_path / "audio"))
    store.ensure_storage_root()
    set_audio_store(store)
    yield store
    reset_audio_store()


@pytest.fixture
def content_generator():
    return FakeContentGenerator()


@pytest.fixture
def failing_content_generator():
    return FailingContentGenerator()


@pytest.fixture
def narration_generator():
    return FakeNarrationGenerator()


@pytest.fixture
def newsletter_service(db_session, content_generator, narration_generator, audio_store):
    from daily_pulse.database import SessionLocal
    from daily_pulse.services.newsletter_service import NewsletterService

    return NewsletterService(
        content_generator=content_generator,
        narration_generator=narration_generator,
        audio_store=audio_store,
        session_factory=SessionLocal,
        public_url="http://localhost:3001",
    )


@pytest.fixture
def auth_headers():
    return {"X-API-Key": "test-secret"}
