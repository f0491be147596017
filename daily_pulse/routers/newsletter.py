# daily_pulse/routers/newsletter.py
"""
Newsletter endpoints.

POST   /newsletter/generate  - Start generation for a date (202, runs in background)
GET    /newsletter/latest    - Most recently updated complete newsletter
GET    /newsletter/history   - Complete newsletters, newest publish date first
GET    /newsletter/jobs      - Dates with a generation in flight
GET    /newsletter/{date}    - Newsletter for one date, any status
DELETE /newsletter/{id}      - Admin delete by row id

Clients poll GET /newsletter/{date} after a 202 to see the final status.
"""

import logging
import re
from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from daily_pulse.auth import require_api_key
from daily_pulse.database import get_db
from daily_pulse.models import DailyNewsletter
from daily_pulse.schemas.newsletter import (
    DeletedNewsletter,
    DeleteNewsletterResponse,
    GenerateRequest,
    GenerateResponse,
    GenerationJobsResponse,
    NewsletterHistoryResponse,
    NewsletterOut,
    NewsletterResponse,
)
from daily_pulse.services import newsletter_store
from daily_pulse.services.generation_jobs import GenerationInProgressError, GenerationJobRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/newsletter", tags=["newsletter"])

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
HISTORY_DEFAULT_LIMIT = 30
HISTORY_MAX_LIMIT = 365


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def parse_date_param(value: Any) -> date:
    """YYYY-MM-DD and a real calendar date, else 400."""
    if value is None or value == "":
        raise HTTPException(status_code=400, detail="Date is required (YYYY-MM-DD)")
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise HTTPException(status_code=400, detail="Invalid date format. Use YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid calendar date: {value}")


async def read_generate_request(request: Request) -> GenerateRequest:
    """Parse the generate body ourselves so malformed input is a 400, not a 422."""
    raw = await request.body()
    if not raw.strip():
        return GenerateRequest()
    try:
        return GenerateRequest.model_validate_json(raw)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Invalid date format. Use YYYY-MM-DD")


def get_generation_jobs(request: Request) -> GenerationJobRegistry:
    return request.app.state.generation_jobs


def public_audio_url(audio_url: Optional[str], request: Request) -> Optional[str]:
    """Point localhost audio URLs at the host the client actually reached."""
    if not audio_url or "localhost" not in audio_url:
        return audio_url
    file_name = audio_url.rsplit("/", 1)[-1]
    return f"{str(request.base_url).rstrip('/')}/audio/{file_name}"


def to_newsletter_out(
    newsletter: DailyNewsletter,
    request: Request,
    generation_in_progress: Optional[bool] = None,
) -> NewsletterOut:
    return NewsletterOut(
        id=newsletter.id,
        publish_date=newsletter.publish_date,
        title=newsletter.title,
        hook=newsletter.hook or "",
        sections=newsletter.sections or [],
        conclusion=newsletter.conclusion or "",
        sources=newsletter.sources or [],
        audio_url=public_audio_url(newsletter.audio_url, request),
        audio_duration_seconds=newsletter.audio_duration_seconds,
        generation_status=newsletter.generation_status,
        error_message=newsletter.error_message,
        created_at=newsletter.created_at,
        updated_at=newsletter.updated_at,
        generation_in_progress=generation_in_progress,
    )


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.post("/generate", status_code=202, response_model=GenerateResponse)
async def generate_newsletter(
    db: Session = Depends(get_db),
    jobs: GenerationJobRegistry = Depends(get_generation_jobs),
    _: None = Depends(require_api_key),
    payload: GenerateRequest = Depends(read_generate_request),
) -> GenerateResponse:
    """
    Start generation for a date and return immediately.

    The row is set to generating before this returns; content, narration
    and the final write happen in a background task (4-5 minutes).
    """
    publish_date = parse_date_param(payload.date)

    try:
        await jobs.start(db, publish_date)
    except GenerationInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))

    logger.info(f"Generation requested for {publish_date}", extra={"publish_date": str(publish_date)})
    return GenerateResponse(date=publish_date.isoformat())


@router.get("/latest", response_model=NewsletterResponse)
def get_latest_newsletter(
    request: Request,
    db: Session = Depends(get_db),
) -> NewsletterResponse:
    newsletter = newsletter_store.get_latest_complete(db)
    if not newsletter:
        raise HTTPException(status_code=404, detail="No newsletters found")
    return NewsletterResponse(newsletter=to_newsletter_out(newsletter, request))


@router.get("/history", response_model=NewsletterHistoryResponse)
def get_newsletter_history(
    request: Request,
    db: Session = Depends(get_db),
    limit: Optional[str] = Query(None, description="1-365, default 30"),
) -> NewsletterHistoryResponse:
    if limit is None or limit == "":
        n = HISTORY_DEFAULT_LIMIT
    else:
        try:
            n = int(limit)
        except ValueError:
            raise HTTPException(status_code=400, detail="Limit must be an integer")
    if n < 1 or n > HISTORY_MAX_LIMIT:
        raise HTTPException(status_code=400, detail=f"Limit must be between 1 and {HISTORY_MAX_LIMIT}")

    newsletters = newsletter_store.get_history(db, n)
    return NewsletterHistoryResponse(
        count=len(newsletters),
        newsletters=[to_newsletter_out(n, request) for n in newsletters],
    )


@router.get("/jobs", response_model=GenerationJobsResponse)
def get_generation_jobs_status(
    jobs: GenerationJobRegistry = Depends(get_generation_jobs),
) -> GenerationJobsResponse:
    running = jobs.running_dates()
    return GenerationJobsResponse(count=len(running), running=running)


@router.get("/{publish_date}", response_model=NewsletterResponse)
def get_newsletter_by_date(
    publish_date: str,
    request: Request,
    db: Session = Depends(get_db),
    jobs: GenerationJobRegistry = Depends(get_generation_jobs),
) -> NewsletterResponse:
    d = parse_date_param(publish_date)
    newsletter = newsletter_store.get_by_date(db, d)
    if not newsletter:
        raise HTTPException(status_code=404, detail=f"No newsletter found for {d.isoformat()}")
    return NewsletterResponse(
        newsletter=to_newsletter_out(newsletter, request, generation_in_progress=jobs.is_running(d)),
    )


@router.delete("/{newsletter_id}", response_model=DeleteNewsletterResponse)
def delete_newsletter(
    newsletter_id: str,
    db: Session = Depends(get_db),
    _: None = Depends(require_api_key),
) -> DeleteNewsletterResponse:
    """Delete a newsletter row. The audio file is left to retention cleanup."""
    try:
        row_id = int(newsletter_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid newsletter ID")

    deleted = newsletter_store.delete_by_id(db, row_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Newsletter not found")

    logger.info(f"Deleted newsletter {row_id} ({deleted.publish_date})")
    return DeleteNewsletterResponse(
        message=f"Newsletter ID {row_id} deleted successfully",
        deleted=DeletedNewsletter(id=deleted.id, title=deleted.title, publish_date=deleted.publish_date),
    )
