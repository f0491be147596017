# tests/unit/test_openai_provider.py
"""Tests for the OpenAI content generator (client mocked)."""

import json
from datetime import date
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from openai import OpenAIError

from daily_pulse.llm.base import ContentGenerationError


def completion(content: str):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(prompt_tokens=50, completion_tokens=700),
    )


class TestOpenAIContentGenerator:

    @pytest.fixture
    def client(self):
        with patch("daily_pulse.llm.openai_provider.OpenAI") as mock_cls:
            yield mock_cls.return_value

    def test_parses_json_and_drops_sources(self, client):
        from daily_pulse.llm.openai_provider import OpenAIContentGenerator

        payload = {
            "title": "Yields Slide",
            "hook": "Bonds caught a bid.",
            "sections": [{"heading": "Rates", "body": "The 10-year fell 8bp."}],
            "conclusion": "Watch CPI.",
            "sources": [{"url": "https://made-up.example"}],
        }
        client.chat.completions.create.return_value = completion(json.dumps(payload))

        generator = OpenAIContentGenerator(api_key="sk-test", model="gpt-test")
        content = generator.generate(date(2025, 6, 1))

        assert content.title == "Yields Slide"
        assert content.sources == []
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["response_format"] == {"type": "json_object"}
        assert "2025-06-01" in kwargs["messages"][1]["content"]

    def test_api_error_wrapped(self, client):
        from daily_pulse.llm.openai_provider import OpenAIContentGenerator

        client.chat.completions.create.side_effect = OpenAIError("rate limited")
        generator = OpenAIContentGenerator(api_key="sk-test")

        with pytest.raises(ContentGenerationError, match="rate limited"):
            generator.generate(date(2025, 6, 1))

    def test_requires_api_key(self, client, monkeypatch):
        from daily_pulse.config import get_settings
        from daily_pulse.llm.openai_provider import OpenAIContentGenerator

        monkeypatch.setattr(get_settings(), "OPENAI_API_KEY", None)

        with pytest.raises(ValueError, match="OpenAI API key required"):
            OpenAIContentGenerator()
