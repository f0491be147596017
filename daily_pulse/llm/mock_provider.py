# daily_pulse/llm/mock_provider.py
"""
Canned content generator for local runs without API keys.
"""

from datetime import date

from daily_pulse.llm.base import (
    ContentGenerator,
    NewsletterContent,
    NewsletterSection,
    NewsletterSource,
)


class MockContentGenerator(ContentGenerator):
    """Returns a fixed newsletter for any date."""

    @property
    def name(self) -> str:
        return "mock"

    @property
    def model_name(self) -> str:
        return "mock"

    def generate(self, publish_date: date) -> NewsletterContent:
        day = publish_date.isoformat()
        return NewsletterContent(
            title=f"Markets Catch Their Breath ({day})",
            hook="Stocks drifted sideways while traders waited on the Fed.",
            sections=[
                NewsletterSection(
                    heading="Market Overview",
                    body="The S&P 500 and Nasdaq finished flat as volume stayed light.",
                ),
                NewsletterSection(
                    heading="Key Developments",
                    body="Treasury yields eased after a softer inflation print.",
                ),
            ],
            conclusion="Patience pays. See you tomorrow.",
            sources=[NewsletterSource(url="https://example.com/markets", title="Market wrap")],
        )
