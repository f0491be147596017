# daily_pulse/llm/base.py
"""
Base interface for newsletter content generators.
Allows swapping between Gemini, OpenAI, or a canned generator for tests.
"""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional


class ContentGenerationError(Exception):
    """The content service failed or returned nothing usable."""


class ContentValidationError(ContentGenerationError):
    """The content service answered, but the payload is malformed."""


@dataclass
class NewsletterSection:
    """One titled block of the newsletter body."""
    heading: str
    body: str

    def to_dict(self) -> Dict[str, str]:
        return {"heading": self.heading, "body": self.body}


@dataclass
class NewsletterSource:
    """A cited web page."""
    url: str
    title: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"url": self.url, "title": self.title}


@dataclass
class NewsletterContent:
    """Result from newsletter content generation."""
    title: str
    hook: str
    sections: List[NewsletterSection]
    conclusion: str
    sources: List[NewsletterSource] = field(default_factory=list)

    def sections_as_dicts(self) -> List[Dict[str, str]]:
        return [s.to_dict() for s in self.sections]

    def sources_as_dicts(self) -> List[Dict[str, str]]:
        return [s.to_dict() for s in self.sources]


def extract_json(text: str) -> Dict[str, Any]:
    """Extract JSON from LLM response, handling markdown code blocks."""
    code_block_match = re.search(r"```(?:json)?\s*([\s\S]*?)```", text)
    if code_block_match:
        text = code_block_match.group(1).strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        json_match = re.search(r"\{[\s\S]*\}", text)
        if json_match:
            try:
                return json.loads(json_match.group())
            except json.JSONDecodeError:
                pass
        raise ContentValidationError(f"Could not extract JSON from response: {text[:200]}")


def _require_str(payload: Dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str):
        raise ContentValidationError(f"Newsletter payload field '{key}' missing or not a string")
    return value.strip()


def parse_newsletter_payload(
    payload: Any,
    sources: Optional[List[NewsletterSource]] = None,
) -> NewsletterContent:
    """
    Validate a structured newsletter payload.

    Expected shape:
        {"title": str, "hook": str, "conclusion": str,
         "sections": [{"heading": str, "body": str}, ...]}

    Sections may use "content" instead of "body". Sources embedded in the
    payload are only used when none are passed in (grounded sources win).

    Raises:
        ContentValidationError: on any missing or mistyped field
    """
    if not isinstance(payload, dict):
        raise ContentValidationError(f"Newsletter payload must be an object, got {type(payload).__name__}")

    title = _require_str(payload, "title")
    if not title:
        raise ContentValidationError("Newsletter title is empty")
    hook = _require_str(payload, "hook")
    conclusion = _require_str(payload, "conclusion")

    raw_sections = payload.get("sections")
    if not isinstance(raw_sections, list):
        raise ContentValidationError("Newsletter payload field 'sections' missing or not a list")

    sections: List[NewsletterSection] = []
    for i, raw in enumerate(raw_sections):
        if not isinstance(raw, dict):
            raise ContentValidationError(f"Section {i} is not an object")
        heading = raw.get("heading")
        body = raw.get("body", raw.get("content"))
        if not isinstance(heading, str) or not isinstance(body, str):
            raise ContentValidationError(f"Section {i} needs string 'heading' and 'body'")
        sections.append(NewsletterSection(heading=heading.strip(), body=body.strip()))

    if sources is None:
        sources = []
        for raw in payload.get("sources") or []:
            if isinstance(raw, dict) and isinstance(raw.get("url"), str) and raw["url"]:
                sources.append(NewsletterSource(url=raw["url"], title=str(raw.get("title") or "")))

    return NewsletterContent(
        title=title,
        hook=hook,
        sections=sections,
        conclusion=conclusion,
        sources=sources,
    )


class ContentGenerator(ABC):
    """Abstract base class for newsletter content generators."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the provider name (e.g., 'gemini', 'openai')."""
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model being used (e.g., 'gemini-2.5-flash')."""
        pass

    @abstractmethod
    def generate(self, publish_date: date) -> NewsletterContent:
        """
        Write the newsletter for publish_date.

        Raises:
            ContentGenerationError: the service call failed
            ContentValidationError: the response could not be parsed
        """
        pass
