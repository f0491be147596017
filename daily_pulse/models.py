# daily_pulse/models.py
"""
Daily Pulse Database Models

Tables:
- DailyNewsletter: one generated newsletter per publish date (upsert key)
"""

from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB

from daily_pulse.database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the TIMESTAMP columns."""
    return datetime.now(UTC).replace(tzinfo=None)


# JSONB on Postgres, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class GenerationStatus(str, Enum):
    """Lifecycle of a newsletter row."""
    PENDING = "pending"
    GENERATING = "generating"
    COMPLETE = "complete"
    FAILED = "failed"


# -----------------------------------------------------------------------------
# DailyNewsletter
# -----------------------------------------------------------------------------

class DailyNewsletter(Base):
    """
    A generated newsletter, unique per publish_date.

    Rows are written only through the upsert in services.newsletter_store so
    retries for the same day update the existing row in place.
    """
    __tablename__ = "daily_newsletters"

    id = Column(Integer, primary_key=True, autoincrement=True)
    publish_date = Column(Date, unique=True, nullable=False)

    title = Column(String(500), nullable=False)
    hook = Column(Text, nullable=False, default="")
    sections = Column(JSONType, nullable=False, default=list)  # [{heading, body}]
    conclusion = Column(Text, nullable=False, default="")
    sources = Column(JSONType, nullable=False, default=list)  # [{url, title}]

    audio_url = Column(String(1000), nullable=True)
    audio_duration_seconds = Column(Integer, nullable=True)

    generation_status = Column(String(50), nullable=False, default=GenerationStatus.PENDING.value)
    error_message = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_daily_newsletters_status", "generation_status"),
        Index("ix_daily_newsletters_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<DailyNewsletter {self.publish_date} {self.generation_status}>"
