"""
Schemas for newsletter endpoints.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class GenerateRequest(BaseModel):
    """
    Generation trigger.
    POST /newsletter/generate
    """
    # Any type; the router checks the format and answers 400
    date: Optional[Any] = Field(None, description="Publish date, YYYY-MM-DD")


class GenerateResponse(BaseModel):
    """202 body: generation accepted and running in the background."""
    success: bool = True
    message: str = "Newsletter generation started"
    date: str
    status: str = "generating"
    estimated_duration: str = "4-5 minutes"


class NewsletterOut(BaseModel):
    """A stored newsletter as returned to clients."""
    id: int
    publish_date: date
    title: str
    hook: str
    sections: List[Dict[str, Any]] = Field(default_factory=list, description="[{heading, body}]")
    conclusion: str
    sources: List[Dict[str, Any]] = Field(default_factory=list, description="[{url, title}]")
    audio_url: Optional[str] = None
    audio_duration_seconds: Optional[int] = None
    generation_status: str
    error_message: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    generation_in_progress: Optional[bool] = Field(
        None, description="Whether a generation task for this date is running in this process"
    )


class NewsletterResponse(BaseModel):
    """
    Single newsletter.
    GET /newsletter/latest, GET /newsletter/{date}
    """
    success: bool = True
    newsletter: NewsletterOut


class NewsletterHistoryResponse(BaseModel):
    """
    Complete newsletters, newest first.
    GET /newsletter/history
    """
    success: bool = True
    count: int
    newsletters: List[NewsletterOut]


class GenerationJobsResponse(BaseModel):
    """
    Dates with a generation task in flight.
    GET /newsletter/jobs
    """
    success: bool = True
    count: int
    running: List[date]


class DeletedNewsletter(BaseModel):
    id: int
    title: str
    publish_date: date


class DeleteNewsletterResponse(BaseModel):
    """
    Admin delete.
    DELETE /newsletter/{id}
    """
    success: bool = True
    message: str
    deleted: DeletedNewsletter
