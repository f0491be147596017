# daily_pulse/cli/retention.py
"""
CLI commands for retention cleanup.

Usage:
    python -m daily_pulse.cli.retention stats
    python -m daily_pulse.cli.retention run --confirm
    python -m daily_pulse.cli.retention scheduler-status
"""

import argparse
import sys

from dotenv import load_dotenv

load_dotenv()


def get_db_session():
    """Get a database session."""
    from daily_pulse.database import SessionLocal

    return SessionLocal()


def cmd_stats(args):
    """Show what a cleanup would delete right now."""
    from daily_pulse.services.retention import DEFAULT_POLICY, compute_stats
    from daily_pulse.storage import get_audio_store

    db = get_db_session()
    try:
        stats = compute_stats(db, get_audio_store())

        print("\n=== Retention Stats ===\n")

        print(f"Audio files (keep {DEFAULT_POLICY.audio_days} days, cutoff {stats.audio_cutoff:%Y-%m-%d %H:%M} UTC)")
        print(f"  Total: {stats.audio_total} ({stats.audio_total_mb:.2f} MB)")
        print(f"  To delete: {stats.audio_to_delete} ({stats.audio_to_delete_mb:.2f} MB)")

        print(f"\nNewsletters (keep {DEFAULT_POLICY.text_days} days, cutoff {stats.newsletter_cutoff})")
        print(f"  Total: {stats.newsletters_total}")
        print(f"  To delete: {stats.newsletters_to_delete}")

        print()
    finally:
        db.close()


def cmd_run(args):
    """Delete expired audio files and newsletters."""
    from daily_pulse.services.retention import run_cleanup
    from daily_pulse.storage import get_audio_store

    if not args.confirm:
        print("Error: Cleanup requires --confirm")
        print("Use 'stats' to preview what would be deleted")
        sys.exit(1)

    db = get_db_session()
    try:
        print("\nRunning cleanup...\n")
        result = run_cleanup(db, get_audio_store())

        print(f"Audio files deleted: {result.audio_files_deleted}")
        print(f"Audio errors: {result.audio_errors}")
        if result.audio_files_vanished:
            print(f"Audio files already gone: {result.audio_files_vanished}")
        print(f"Newsletters deleted: {result.newsletters_deleted}")
        print(f"Database errors: {result.database_errors}")
        print(f"Duration: {result.duration_ms}ms")

        if result.errors:
            print("\nErrors:")
            for error in result.errors:
                print(f"  - {error}")

        if not result.success:
            sys.exit(1)
    finally:
        db.close()


def cmd_schedule(args):
    """Show the daily cleanup schedule."""
    from daily_pulse.services.scheduler import CLEANUP_CRON, next_fire_time

    print(f"Schedule: {CLEANUP_CRON} (Daily at 02:00 UTC)")
    print(f"Next run: {next_fire_time().isoformat()}")
    print("The scheduler runs inside the API process (CLEANUP_SCHEDULER_ENABLED).")


def main():
    parser = argparse.ArgumentParser(
        description="Daily Pulse Retention CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Preview what would be deleted
  python -m daily_pulse.cli.retention stats

  # Delete audio > 14 days and newsletters > 365 days
  python -m daily_pulse.cli.retention run --confirm
        """,
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    stats_parser = subparsers.add_parser("stats", help="Preview cleanup")
    stats_parser.set_defaults(func=cmd_stats)

    run_parser = subparsers.add_parser("run", help="Run cleanup now")
    run_parser.add_argument("--confirm", action="store_true", help="Confirm deletion")
    run_parser.set_defaults(func=cmd_run)

    schedule_parser = subparsers.add_parser("scheduler-status", help="Show the cleanup schedule")
    schedule_parser.set_defaults(func=cmd_schedule)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
