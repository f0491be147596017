# daily_pulse/llm/openai_provider.py
"""
OpenAI content generator implementation.

No search grounding: the newsletter carries no sources.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from openai import OpenAI, OpenAIError

from daily_pulse.config import get_settings
from daily_pulse.llm.base import (
    ContentGenerationError,
    ContentGenerator,
    NewsletterContent,
    extract_json,
    parse_newsletter_payload,
)
from daily_pulse.llm.prompts import (
    NEWSLETTER_JSON_SYSTEM_PROMPT,
    NEWSLETTER_JSON_USER_TEMPLATE,
)
from daily_pulse.logging_config import log_llm_call

logger = logging.getLogger(__name__)


class OpenAIContentGenerator(ContentGenerator):
    """OpenAI-based newsletter writer."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
    ):
        """
        Initialize OpenAI generator.

        Args:
            api_key: OpenAI API key. If not provided, uses OPENAI_API_KEY.
            model: Model to use. If not provided, uses OPENAI_MODEL
                   or defaults to gpt-4o-mini for cost efficiency.
        """
        settings = get_settings()
        self._api_key = api_key or settings.OPENAI_API_KEY
        if not self._api_key:
            raise ValueError(
                "OpenAI API key required. Set OPENAI_API_KEY env var or pass api_key."
            )
        self._model = model or settings.OPENAI_MODEL
        self._client = OpenAI(api_key=self._api_key)

    @property
    def name(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self._model

    def generate(self, publish_date: date) -> NewsletterContent:
        try:
            with log_llm_call("openai", self._model, "newsletter_json") as metrics:
                response = self._client.chat.completions.create(
                    model=self._model,
                    messages=[
                        {"role": "system", "content": NEWSLETTER_JSON_SYSTEM_PROMPT},
                        {"role": "user", "content": NEWSLETTER_JSON_USER_TEMPLATE.format(date=publish_date.isoformat())},
                    ],
                    temperature=0.7,
                    response_format={"type": "json_object"},
                )
                if response.usage:
                    metrics["tokens_in"] = response.usage.prompt_tokens
                    metrics["tokens_out"] = response.usage.completion_tokens
        except OpenAIError as e:
            raise ContentGenerationError(f"Newsletter generation failed: {e}") from e

        content = response.choices[0].message.content or ""
        return parse_newsletter_payload(extract_json(content), sources=[])
