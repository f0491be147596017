# tests/unit/test_newsletter_service.py
"""Tests for the generation orchestrator."""

from datetime import date
from unittest.mock import MagicMock

import pytest


class TestMarkGenerating:

    def test_creates_placeholder_row(self, newsletter_service, db_session):
        row = newsletter_service.mark_generating(db_session, date(2025, 6, 1))

        assert row.generation_status == "generating"
        assert row.title == "Generating newsletter for 2025-06-01..."
        assert row.sections == []
        assert row.audio_url is None

    def test_resets_a_complete_row(self, newsletter_service, db_session):
        d = date(2025, 6, 1)
        newsletter_service.generate(d)

        row = newsletter_service.mark_generating(db_session, d)

        assert row.generation_status == "generating"
        assert row.audio_url is None
        assert row.error_message is None


class TestGenerate:
    """Full run through fake collaborators."""

    def test_success_writes_complete_row_and_audio(self, newsletter_service, db_session, audio_store, narration_generator):
        from daily_pulse.services import newsletter_store

        d = date(2025, 6, 1)
        row = newsletter_service.generate(d)

        assert row.generation_status == "complete"
        assert row.title == "Pulse for 2025-06-01"
        assert row.hook == "Oil slid and tech rallied."
        assert row.sections == [
            {"heading": "Energy", "body": "Brent fell 3% on supply news."},
            {"heading": "Tech", "body": "Chipmakers led the Nasdaq higher."},
        ]
        assert row.sources == [{"url": "https://example.com/oil", "title": "Oil report"}]
        assert row.audio_url == "http://localhost:3001/audio/daily-pulse-2025-06-01.wav"
        assert row.audio_duration_seconds == 2
        assert row.error_message is None
        assert audio_store.exists(d)

        db_session.expire_all()
        assert newsletter_store.count_all(db_session) == 1

    def test_audio_script_order(self, newsletter_service, narration_generator):
        newsletter_service.generate(date(2025, 6, 1))

        (script,) = narration_generator.scripts
        assert script.split("\n\n") == [
            "Pulse for 2025-06-01",
            "Oil slid and tech rallied.",
            "Energy",
            "Brent fell 3% on supply news.",
            "Tech",
            "Chipmakers led the Nasdaq higher.",
            "That's the pulse.",
        ]

    def test_regenerating_keeps_one_row(self, newsletter_service, db_session):
        from daily_pulse.services import newsletter_store

        d = date(2025, 6, 1)
        first = newsletter_service.generate(d)
        second = newsletter_service.generate(d)

        assert second.id == first.id
        assert second.created_at == first.created_at
        assert second.updated_at > first.updated_at
        db_session.expire_all()
        assert newsletter_store.count_all(db_session) == 1


class TestFailure:
    """A failing collaborator leaves a failed row and no audio."""

    @pytest.fixture
    def failing_service(self, db_session, failing_content_generator, narration_generator, audio_store):
        from daily_pulse.database import SessionLocal
        from daily_pulse.services.newsletter_service import NewsletterService

        return NewsletterService(
            content_generator=failing_content_generator,
            narration_generator=narration_generator,
            audio_store=audio_store,
            session_factory=SessionLocal,
            public_url="http://localhost:3001",
        )

    def test_content_failure_records_failed(self, failing_service, db_session, audio_store, narration_generator):
        from daily_pulse.llm.base import ContentGenerationError
        from daily_pulse.services import newsletter_store

        d = date(2025, 6, 1)
        with pytest.raises(ContentGenerationError):
            failing_service.generate(d)

        db_session.expire_all()
        row = newsletter_store.get_by_date(db_session, d)
        assert row.generation_status == "failed"
        assert row.error_message == "content service unavailable"
        assert row.audio_url is None
        assert not audio_store.exists(d)
        assert narration_generator.scripts == []

    def test_narration_failure_records_failed(self, db_session, content_generator, audio_store):
        from daily_pulse.database import SessionLocal
        from daily_pulse.services import newsletter_store
        from daily_pulse.services.newsletter_service import NewsletterService
        from daily_pulse.tts.base import NarrationError

        narrator = MagicMock()
        narrator.synthesize.side_effect = NarrationError("No audio data in Gemini TTS response")
        service = NewsletterService(content_generator, narrator, audio_store, session_factory=SessionLocal)

        d = date(2025, 6, 2)
        with pytest.raises(NarrationError):
            service.generate(d)

        db_session.expire_all()
        row = newsletter_store.get_by_date(db_session, d)
        assert row.generation_status == "failed"
        assert "No audio data" in row.error_message
        assert not audio_store.exists(d)

    def test_failure_after_complete_replaces_content(self, newsletter_service, failing_service, db_session):
        from daily_pulse.services import newsletter_store

        d = date(2025, 6, 1)
        newsletter_service.generate(d)

        with pytest.raises(Exception):
            failing_service.generate(d)

        db_session.expire_all()
        row = newsletter_store.get_by_date(db_session, d)
        assert row.generation_status == "failed"
        assert row.title == "Failed to generate newsletter for 2025-06-01"
        assert row.hook == ""
        assert row.sections == []
        assert row.sources == []
        assert row.audio_url is None
        assert row.audio_duration_seconds is None

    def test_late_failure_does_not_mix_with_other_run(self, newsletter_service, failing_service, db_session):
        from daily_pulse.services import newsletter_store

        d = date(2025, 6, 1)
        # Run A is marked generating, run B completes, then A fails
        failing_service.mark_generating(db_session, d)
        newsletter_service.generate(d)
        with pytest.raises(Exception):
            failing_service.run(d)

        db_session.expire_all()
        row = newsletter_store.get_by_date(db_session, d)
        assert row.generation_status == "failed"
        assert row.title == "Failed to generate newsletter for 2025-06-01"
        assert row.sections == []
        assert row.audio_url is None
        assert row.audio_duration_seconds is None
        assert newsletter_store.count_all(db_session) == 1

    def test_row_deleted_mid_run_is_recreated_failed(self, failing_service, db_session):
        from daily_pulse.services import newsletter_store

        d = date(2025, 6, 3)
        # run() without mark_generating: no row exists when the failure is recorded
        with pytest.raises(Exception):
            failing_service.run(d)

        db_session.expire_all()
        row = newsletter_store.get_by_date(db_session, d)
        assert row.generation_status == "failed"
        assert row.error_message == "content service unavailable"


class TestBuildNewsletterService:

    def test_uses_configured_providers(self, audio_store):
        from daily_pulse.llm.mock_provider import MockContentGenerator
        from daily_pulse.services.newsletter_service import build_newsletter_service
        from daily_pulse.tts.placeholder import PlaceholderNarrationGenerator

        service = build_newsletter_service()

        assert isinstance(service.content_generator, MockContentGenerator)
        assert isinstance(service.narration_generator, PlaceholderNarrationGenerator)
        assert service.audio_store is audio_store

    def test_overrides_win(self, content_generator, audio_store):
        from daily_pulse.services.newsletter_service import build_newsletter_service

        service = build_newsletter_service(content_generator=content_generator, public_url="https://pulse.example.com/")

        assert service.content_generator is content_generator
        assert service.audio_url_for(date(2025, 6, 1)) == "https://pulse.example.com/audio/daily-pulse-2025-06-01.wav"
