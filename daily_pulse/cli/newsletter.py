# daily_pulse/cli/newsletter.py
"""
CLI commands for newsletter generation.

Usage:
    python -m daily_pulse.cli.newsletter generate --date 2025-06-01
    python -m daily_pulse.cli.newsletter generate --date 2025-06-01 --content mock --narration placeholder
    python -m daily_pulse.cli.newsletter show --date 2025-06-01
"""

import argparse
import sys
from datetime import UTC, date, datetime

from dotenv import load_dotenv

load_dotenv()


def get_db_session():
    """Get a database session."""
    from daily_pulse.database import SessionLocal

    return SessionLocal()


def parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}'. Use YYYY-MM-DD")


def cmd_generate(args):
    """Generate synchronously in this process."""
    from daily_pulse.config import get_settings
    from daily_pulse.database import init_db
    from daily_pulse.llm import get_content_generator
    from daily_pulse.logging_config import configure_logging
    from daily_pulse.services.newsletter_service import build_newsletter_service
    from daily_pulse.tts import get_narration_generator

    settings = get_settings()
    configure_logging(json_format=False, level=settings.LOG_LEVEL)
    init_db()

    service = build_newsletter_service(
        content_generator=get_content_generator(args.content),
        narration_generator=get_narration_generator(args.narration),
    )

    print(f"\nGenerating newsletter for {args.date}...\n")
    try:
        newsletter = service.generate(args.date)
    except Exception as e:
        print(f"Error: generation failed: {e}")
        sys.exit(1)

    print(f"Title: {newsletter.title}")
    print(f"Sections: {len(newsletter.sections)}")
    print(f"Sources: {len(newsletter.sources)}")
    print(f"Audio: {newsletter.audio_url} ({newsletter.audio_duration_seconds}s)")


def cmd_show(args):
    """Print the stored newsletter for a date."""
    from daily_pulse.services import newsletter_store

    db = get_db_session()
    try:
        newsletter = newsletter_store.get_by_date(db, args.date)
        if not newsletter:
            print(f"No newsletter found for {args.date}")
            sys.exit(1)

        print(f"\n=== {newsletter.title} ===\n")
        print(f"Date: {newsletter.publish_date}")
        print(f"Status: {newsletter.generation_status}")
        if newsletter.error_message:
            print(f"Error: {newsletter.error_message}")
        print(f"Updated: {newsletter.updated_at}")

        if newsletter.hook:
            print(f"\n{newsletter.hook}")
        for section in newsletter.sections or []:
            print(f"\n## {section.get('heading', '')}\n{section.get('body', '')}")
        if newsletter.conclusion:
            print(f"\n{newsletter.conclusion}")

        if newsletter.sources:
            print("\nSources:")
            for source in newsletter.sources:
                print(f"  - {source.get('title') or source.get('url')}: {source.get('url')}")

        if newsletter.audio_url:
            print(f"\nAudio: {newsletter.audio_url} ({newsletter.audio_duration_seconds}s)")
        print()
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(
        description="Daily Pulse Newsletter CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    today = datetime.now(UTC).date()

    generate_parser = subparsers.add_parser("generate", help="Generate a newsletter now")
    generate_parser.add_argument("--date", type=parse_date, default=today, help="Publish date (default: today UTC)")
    generate_parser.add_argument("--content", choices=["gemini", "openai", "mock"], help="Override CONTENT_PROVIDER")
    generate_parser.add_argument("--narration", choices=["gemini", "placeholder"], help="Override NARRATION_PROVIDER")
    generate_parser.set_defaults(func=cmd_generate)

    show_parser = subparsers.add_parser("show", help="Show a stored newsletter")
    show_parser.add_argument("--date", type=parse_date, default=today, help="Publish date (default: today UTC)")
    show_parser.set_defaults(func=cmd_show)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
