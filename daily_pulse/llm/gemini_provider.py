# daily_pulse/llm/gemini_provider.py
"""
Gemini content generator with Google Search grounding.

Two calls per newsletter:
1. Write the newsletter with the google_search tool enabled (grounded prose)
2. Reformat that prose as JSON in JSON mode (no tools)

Sources come from the grounding metadata of call 1, not from the model's text.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from google import genai
from google.genai import errors, types
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from daily_pulse.config import get_settings
from daily_pulse.llm.base import (
    ContentGenerationError,
    ContentGenerator,
    NewsletterContent,
    NewsletterSource,
    extract_json,
    parse_newsletter_payload,
)
from daily_pulse.llm.prompts import (
    NEWSLETTER_FORMAT_PROMPT,
    NEWSLETTER_RESPONSE_SCHEMA,
    NEWSLETTER_WRITER_PROMPT,
)
from daily_pulse.logging_config import log_llm_call

logger = logging.getLogger(__name__)


def grounding_sources(response) -> List[NewsletterSource]:
    """Collect web sources from a grounded response, dropping chunks without a URI."""
    if not response.candidates:
        return []
    metadata = getattr(response.candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    sources: List[NewsletterSource] = []
    seen = set()
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        uri = getattr(web, "uri", None)
        if not uri or uri in seen:
            continue
        seen.add(uri)
        sources.append(NewsletterSource(url=uri, title=getattr(web, "title", None) or ""))
    return sources


def _usage(response, metrics: dict) -> None:
    usage = getattr(response, "usage_metadata", None)
    if usage:
        metrics["tokens_in"] = usage.prompt_token_count
        metrics["tokens_out"] = usage.candidates_token_count


class GeminiContentGenerator(ContentGenerator):
    """Gemini-based newsletter writer."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[genai.Client] = None,
    ):
        """
        Args:
            api_key: Gemini API key. If not provided, uses GEMINI_API_KEY.
            model: Model to use. If not provided, uses GEMINI_MODEL.
            client: Pre-built client (tests).
        """
        settings = get_settings()
        self._model = model or settings.GEMINI_MODEL

        if client is not None:
            self._client = client
            return

        api_key = api_key or settings.GEMINI_API_KEY
        if not api_key:
            raise ValueError("Gemini API key required. Set GEMINI_API_KEY env var or pass api_key.")
        self._client = genai.Client(api_key=api_key)

    @property
    def name(self) -> str:
        return "gemini"

    @property
    def model_name(self) -> str:
        return self._model

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=16),
        retry=retry_if_exception_type(errors.ServerError),
        reraise=True,
    )
    def _generate_content(self, contents: str, config: types.GenerateContentConfig):
        """Single Gemini call; retried only on 5xx."""
        return self._client.models.generate_content(
            model=self._model,
            contents=contents,
            config=config,
        )

    def _write_draft(self, publish_date: date):
        prompt = NEWSLETTER_WRITER_PROMPT.format(date=publish_date.isoformat())
        config = types.GenerateContentConfig(
            tools=[types.Tool(google_search=types.GoogleSearch())],
        )
        with log_llm_call("google", self._model, "newsletter_draft") as metrics:
            response = self._generate_content(prompt, config)
            _usage(response, metrics)
        return response

    def _format_json(self, draft: str) -> dict:
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=NEWSLETTER_RESPONSE_SCHEMA,
        )
        with log_llm_call("google", self._model, "newsletter_format") as metrics:
            response = self._generate_content(NEWSLETTER_FORMAT_PROMPT.format(content=draft), config)
            _usage(response, metrics)
        return extract_json(response.text or "")

    def generate(self, publish_date: date) -> NewsletterContent:
        try:
            draft_response = self._write_draft(publish_date)
        except errors.APIError as e:
            raise ContentGenerationError(f"Newsletter generation failed: {e}") from e

        draft = draft_response.text
        if not draft or not draft.strip():
            raise ContentGenerationError("Newsletter generation failed: empty draft from Gemini")

        sources = grounding_sources(draft_response)
        logger.info(
            f"Draft written for {publish_date}: {len(draft)} chars, {len(sources)} grounding sources",
            extra={"publish_date": str(publish_date)},
        )

        try:
            payload = self._format_json(draft)
        except errors.APIError as e:
            raise ContentGenerationError(f"Newsletter formatting failed: {e}") from e

        return parse_newsletter_payload(payload, sources=sources)
