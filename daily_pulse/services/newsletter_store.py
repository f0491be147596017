# daily_pulse/services/newsletter_store.py
"""
Date-keyed persistence for generated newsletters.

At most one row exists per publish_date. Every write of a full record goes
through upsert_newsletter(), a single INSERT ... ON CONFLICT (publish_date)
DO UPDATE statement, so concurrent generations for the same day can never
create duplicates. The only partial write is update_status().
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from daily_pulse.models import DailyNewsletter, GenerationStatus, utcnow

logger = logging.getLogger(__name__)


def _insert_for(db: Session):
    """Pick the dialect-specific INSERT that supports ON CONFLICT."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise RuntimeError(f"Upsert not supported for database dialect: {dialect}")


def upsert_newsletter(
    db: Session,
    publish_date: date,
    *,
    title: str,
    hook: str = "",
    sections: Optional[list] = None,
    conclusion: str = "",
    sources: Optional[list] = None,
    audio_url: Optional[str] = None,
    audio_duration_seconds: Optional[int] = None,
    status: GenerationStatus = GenerationStatus.PENDING,
    error_message: Optional[str] = None,
) -> DailyNewsletter:
    """
    Insert or replace the newsletter for publish_date.

    Last writer wins on content fields; the first writer's id and created_at
    are kept; updated_at is refreshed on every call.

    Returns:
        The stored row, re-read after commit
    """
    now = utcnow()
    values = {
        "publish_date": publish_date,
        "title": title,
        "hook": hook,
        "sections": sections or [],
        "conclusion": conclusion,
        "sources": sources or [],
        "audio_url": audio_url,
        "audio_duration_seconds": audio_duration_seconds,
        "generation_status": GenerationStatus(status).value,
        "error_message": error_message,
        "created_at": now,
        "updated_at": now,
    }

    insert = _insert_for(db)
    stmt = insert(DailyNewsletter).values(**values)
    update_cols = {
        key: stmt.excluded[key]
        for key in values
        if key not in ("publish_date", "created_at")
    }
    stmt = stmt.on_conflict_do_update(
        index_elements=[DailyNewsletter.publish_date],
        set_=update_cols,
    )

    db.execute(stmt)
    db.commit()

    # Bypass the identity map so callers see what the statement wrote
    row = (
        db.query(DailyNewsletter)
        .filter(DailyNewsletter.publish_date == publish_date)
        .populate_existing()
        .one()
    )
    logger.debug(
        f"Upserted newsletter {publish_date} ({row.generation_status})",
        extra={"event": "newsletter_upsert", "publish_date": str(publish_date), "status": row.generation_status},
    )
    return row


def update_status(
    db: Session,
    publish_date: date,
    status: GenerationStatus,
    error_message: Optional[str] = None,
) -> Optional[DailyNewsletter]:
    """
    Set generation_status and error_message for an existing row.

    Returns:
        The updated row, or None if no row exists for publish_date
    """
    row = get_by_date(db, publish_date)
    if not row:
        return None

    row.generation_status = GenerationStatus(status).value
    row.error_message = error_message
    row.updated_at = utcnow()
    db.commit()
    db.refresh(row)
    return row


def get_by_date(db: Session, publish_date: date) -> Optional[DailyNewsletter]:
    return (
        db.query(DailyNewsletter)
        .filter(DailyNewsletter.publish_date == publish_date)
        .first()
    )


def get_by_id(db: Session, newsletter_id: int) -> Optional[DailyNewsletter]:
    return db.query(DailyNewsletter).filter(DailyNewsletter.id == newsletter_id).first()


def get_latest_complete(db: Session) -> Optional[DailyNewsletter]:
    """Most recently updated complete newsletter."""
    return (
        db.query(DailyNewsletter)
        .filter(DailyNewsletter.generation_status == GenerationStatus.COMPLETE.value)
        .order_by(DailyNewsletter.updated_at.desc())
        .first()
    )


def get_history(db: Session, limit: int = 30) -> list[DailyNewsletter]:
    """Complete newsletters, newest publish_date first."""
    return (
        db.query(DailyNewsletter)
        .filter(DailyNewsletter.generation_status == GenerationStatus.COMPLETE.value)
        .order_by(DailyNewsletter.publish_date.desc())
        .limit(limit)
        .all()
    )


def get_all(db: Session) -> list[DailyNewsletter]:
    return db.query(DailyNewsletter).order_by(DailyNewsletter.publish_date.desc()).all()


def count_all(db: Session) -> int:
    return db.query(func.count(DailyNewsletter.id)).scalar() or 0


def get_older_than(db: Session, cutoff: date) -> list[DailyNewsletter]:
    """Rows with publish_date strictly before cutoff, oldest first."""
    return (
        db.query(DailyNewsletter)
        .filter(DailyNewsletter.publish_date < cutoff)
        .order_by(DailyNewsletter.publish_date.asc())
        .all()
    )


def delete_older_than(db: Session, cutoff: date) -> int:
    """
    Bulk delete rows with publish_date strictly before cutoff.

    Same predicate as get_older_than(). Commits.

    Returns:
        Number of rows deleted
    """
    deleted = (
        db.query(DailyNewsletter)
        .filter(DailyNewsletter.publish_date < cutoff)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted


def delete_by_date(db: Session, publish_date: date) -> Optional[DailyNewsletter]:
    row = get_by_date(db, publish_date)
    if not row:
        return None
    db.delete(row)
    db.commit()
    return row


def delete_by_id(db: Session, newsletter_id: int) -> Optional[DailyNewsletter]:
    """
    Admin delete by primary key.

    Returns:
        The deleted row (detached), or None if not found
    """
    row = get_by_id(db, newsletter_id)
    if not row:
        return None
    db.delete(row)
    db.commit()
    return row
