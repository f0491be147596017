# daily_pulse/services/newsletter_service.py
"""
Newsletter generation orchestrator.

Per publish date:
1. Mark generating (placeholder row, so readers see the job)
2. Generate content
3. Narrate and store audio
4. Persist the complete newsletter
5. On any failure in 2-4, overwrite the row as failed + error_message and re-raise

Every step writes through the date-keyed upsert, so retrying a date
rewrites the same row. Nothing here retries automatically.
"""

import logging
import uuid
from datetime import date
from typing import Callable, Optional

from sqlalchemy.orm import Session

from daily_pulse.config import get_settings
from daily_pulse.llm.base import ContentGenerator
from daily_pulse.logging_config import log_stage, trace_id_var
from daily_pulse.models import DailyNewsletter, GenerationStatus
from daily_pulse.services import newsletter_store
from daily_pulse.storage.base import AudioStore
from daily_pulse.tts import build_audio_script
from daily_pulse.tts.base import NarrationGenerator

logger = logging.getLogger(__name__)


def generating_title(publish_date: date) -> str:
    return f"Generating newsletter for {publish_date.isoformat()}..."


def failed_title(publish_date: date) -> str:
    return f"Failed to generate newsletter for {publish_date.isoformat()}"


class NewsletterService:
    """
    Drives one generation per call.

    Collaborators are injected so tests can swap in fakes; the default
    session factory is the application's SessionLocal.
    """

    def __init__(
        self,
        content_generator: ContentGenerator,
        narration_generator: NarrationGenerator,
        audio_store: AudioStore,
        session_factory: Optional[Callable[[], Session]] = None,
        public_url: Optional[str] = None,
    ):
        if session_factory is None:
            from daily_pulse.database import SessionLocal

            session_factory = SessionLocal

        self.content_generator = content_generator
        self.narration_generator = narration_generator
        self.audio_store = audio_store
        self.session_factory = session_factory
        self.public_url = (public_url or get_settings().PUBLIC_URL).rstrip("/")

    def audio_url_for(self, publish_date: date) -> str:
        return f"{self.public_url}{self.audio_store.public_path_for(publish_date)}"

    def mark_generating(self, db: Session, publish_date: date) -> DailyNewsletter:
        """Step 1: placeholder row with status generating."""
        row = newsletter_store.upsert_newsletter(
            db,
            publish_date,
            title=generating_title(publish_date),
            hook="",
            sections=[],
            conclusion="",
            sources=[],
            audio_url=None,
            audio_duration_seconds=None,
            status=GenerationStatus.GENERATING,
            error_message=None,
        )
        logger.info(
            f"Newsletter {publish_date} marked generating",
            extra={"event": "generation_started", "publish_date": str(publish_date)},
        )
        return row

    def run(self, publish_date: date, trace_id: Optional[str] = None) -> DailyNewsletter:
        """
        Steps 2-5 in a session of their own.

        Raises whatever step 2-4 raised, after recording the failure.
        """
        trace_id = trace_id or str(uuid.uuid4())
        trace_id_var.set(trace_id)
        db = self.session_factory()

        try:
            with log_stage("content", trace_id=trace_id):
                content = self.content_generator.generate(publish_date)

            with log_stage("narration", trace_id=trace_id):
                narration = self.narration_generator.synthesize(build_audio_script(content))
                self.audio_store.write_audio(publish_date, narration.audio)

            with log_stage("persist", trace_id=trace_id):
                row = newsletter_store.upsert_newsletter(
                    db,
                    publish_date,
                    title=content.title,
                    hook=content.hook,
                    sections=content.sections_as_dicts(),
                    conclusion=content.conclusion,
                    sources=content.sources_as_dicts(),
                    audio_url=self.audio_url_for(publish_date),
                    audio_duration_seconds=narration.duration_seconds,
                    status=GenerationStatus.COMPLETE,
                    error_message=None,
                )

            logger.info(
                f"Newsletter {publish_date} complete: {len(content.sections)} sections, "
                f"{narration.duration_seconds}s audio",
                extra={"event": "generation_complete", "publish_date": str(publish_date)},
            )
            return row

        except Exception as e:
            logger.exception(
                f"Newsletter generation failed for {publish_date}: {e}",
                extra={"event": "generation_failed", "publish_date": str(publish_date)},
            )
            try:
                self._record_failure(db, publish_date, str(e))
            except Exception:
                logger.exception(f"Could not record failure for {publish_date}")
            raise

        finally:
            db.close()
            trace_id_var.set(None)

    def _record_failure(self, db: Session, publish_date: date, message: str) -> None:
        """Replace the whole row with a failure record; no field survives from any earlier run."""
        db.rollback()
        newsletter_store.upsert_newsletter(
            db,
            publish_date,
            title=failed_title(publish_date),
            hook="",
            sections=[],
            conclusion="",
            sources=[],
            audio_url=None,
            audio_duration_seconds=None,
            status=GenerationStatus.FAILED,
            error_message=message,
        )

    def generate(self, publish_date: date) -> DailyNewsletter:
        """Mark generating, then run to completion in the calling thread."""
        db = self.session_factory()
        try:
            self.mark_generating(db, publish_date)
        finally:
            db.close()
        return self.run(publish_date)


def build_newsletter_service(**overrides) -> NewsletterService:
    """Wire the service from settings; keyword overrides replace single collaborators."""
    from daily_pulse.llm import get_content_generator
    from daily_pulse.storage import get_audio_store
    from daily_pulse.tts import get_narration_generator

    if "content_generator" not in overrides:
        overrides["content_generator"] = get_content_generator()
    if "narration_generator" not in overrides:
        overrides["narration_generator"] = get_narration_generator()
    if "audio_store" not in overrides:
        overrides["audio_store"] = get_audio_store()
    return NewsletterService(**overrides)
