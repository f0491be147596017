# tests/unit/test_retention/test_cleanup_service.py
"""Unit tests for the retention cleanup service."""

import os
from datetime import date, datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest

NOW = datetime(2025, 6, 15, 12, 0, 0)
EPOCH = datetime(1970, 1, 1)


def age_file(store, publish_date: date, days: float) -> None:
    """Write audio for publish_date and backdate its mtime by `days` before NOW."""
    store.write_audio(publish_date, b"\x00" * 1024)
    delta = (NOW - timedelta(days=days)) - EPOCH
    ns = (delta.days * 86400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1000
    os.utime(store.path_for(publish_date), ns=(ns, ns))


def add_newsletter(db, days_ago: int):
    from daily_pulse.models import GenerationStatus
    from daily_pulse.services import newsletter_store

    d = (NOW - timedelta(days=days_ago)).date()
    return newsletter_store.upsert_newsletter(db, d, title=f"{days_ago} days old", status=GenerationStatus.COMPLETE)


class TestAudioCleanup:
    """Audio pass: per-file, by modification time."""

    def test_deletes_only_files_past_fourteen_days(self, db_session, audio_store):
        from daily_pulse.services.retention import run_cleanup

        age_file(audio_store, date(2025, 5, 26), 20)
        age_file(audio_store, date(2025, 6, 5), 10)
        age_file(audio_store, date(2025, 6, 14), 1)

        result = run_cleanup(db_session, audio_store, now=NOW)

        assert result.audio_files_deleted == 1
        assert result.audio_errors == 0
        assert [f["name"] for f in result.deleted_files] == ["daily-pulse-2025-05-26.wav"]
        assert not audio_store.exists(date(2025, 5, 26))
        assert audio_store.exists(date(2025, 6, 5))
        assert audio_store.exists(date(2025, 6, 14))
        assert result.success

    def test_exactly_fourteen_days_is_kept(self, db_session, audio_store):
        from daily_pulse.services.retention import run_cleanup

        age_file(audio_store, date(2025, 6, 1), 14)

        result = run_cleanup(db_session, audio_store, now=NOW)

        assert result.audio_files_deleted == 0
        assert audio_store.exists(date(2025, 6, 1))

    def test_per_file_error_counted_and_loop_continues(self, db_session, audio_store):
        from daily_pulse.services.retention import run_cleanup

        age_file(audio_store, date(2025, 5, 1), 45)
        age_file(audio_store, date(2025, 5, 2), 44)
        original = audio_store.delete_if_older_than

        def flaky(artifact, cutoff):
            if artifact.file_name == "daily-pulse-2025-05-01.wav":
                raise PermissionError("read-only")
            return original(artifact, cutoff)

        with patch.object(audio_store, "delete_if_older_than", side_effect=flaky):
            result = run_cleanup(db_session, audio_store, now=NOW)

        assert result.audio_errors == 1
        assert result.audio_files_deleted == 1
        assert not result.success
        assert "read-only" in result.errors[0]
        assert audio_store.exists(date(2025, 5, 1))
        assert not audio_store.exists(date(2025, 5, 2))

    def test_vanished_file_is_not_an_error(self, db_session):
        from daily_pulse.services.retention import run_cleanup
        from daily_pulse.storage.base import AudioArtifact, DeleteOutcome

        store = MagicMock()
        store.list_artifacts.return_value = [
            AudioArtifact(file_name="daily-pulse-2025-05-01.wav", size_bytes=10, last_modified=datetime(2025, 5, 1)),
        ]
        store.delete_if_older_than.return_value = DeleteOutcome.VANISHED

        result = run_cleanup(db_session, store, now=NOW)

        assert result.audio_files_deleted == 0
        assert result.audio_files_vanished == 1
        assert result.audio_errors == 0

    def test_listing_failure_still_runs_text_pass(self, db_session):
        from daily_pulse.services.retention import run_cleanup

        add_newsletter(db_session, 400)
        store = MagicMock()
        store.list_artifacts.side_effect = OSError("storage offline")

        result = run_cleanup(db_session, store, now=NOW)

        assert result.audio_errors == 1
        assert result.newsletters_deleted == 1
        assert not result.success


class TestNewsletterCleanup:
    """Text pass: bulk delete by publish_date."""

    def test_deletes_only_rows_past_a_year(self, db_session, audio_store):
        from daily_pulse.services import newsletter_store
        from daily_pulse.services.retention import run_cleanup

        old = add_newsletter(db_session, 400)
        add_newsletter(db_session, 10)

        result = run_cleanup(db_session, audio_store, now=NOW)

        assert result.newsletters_deleted == 1
        assert result.deleted_records == [
            {"id": old.id, "publish_date": old.publish_date.isoformat(), "title": "400 days old"},
        ]
        assert [n.title for n in newsletter_store.get_all(db_session)] == ["10 days old"]

    def test_publish_date_equal_to_cutoff_is_kept(self, db_session, audio_store):
        from daily_pulse.services.retention import run_cleanup

        add_newsletter(db_session, 365)

        result = run_cleanup(db_session, audio_store, now=NOW)

        assert result.newsletters_deleted == 0

    def test_database_error_isolated_from_audio(self, db_session, audio_store):
        from daily_pulse.services.retention import run_cleanup

        age_file(audio_store, date(2025, 5, 1), 30)

        with patch(
            "daily_pulse.services.newsletter_store.get_older_than",
            side_effect=RuntimeError("connection reset"),
        ):
            result = run_cleanup(db_session, audio_store, now=NOW)

        assert result.database_errors == 1
        assert result.audio_files_deleted == 1
        assert "connection reset" in result.errors[-1]
        assert not result.success


class TestIdempotence:

    def test_second_run_deletes_nothing(self, db_session, audio_store):
        from daily_pulse.services.retention import run_cleanup

        age_file(audio_store, date(2025, 5, 1), 30)
        add_newsletter(db_session, 500)

        first = run_cleanup(db_session, audio_store, now=NOW)
        second = run_cleanup(db_session, audio_store, now=NOW)

        assert (first.audio_files_deleted, first.newsletters_deleted) == (1, 1)
        assert (second.audio_files_deleted, second.newsletters_deleted) == (0, 0)
        assert second.success

    def test_empty_stores(self, db_session, audio_store):
        from daily_pulse.services.retention import run_cleanup

        result = run_cleanup(db_session, audio_store, now=NOW)

        assert result.audio_files_deleted == 0
        assert result.newsletters_deleted == 0
        assert result.success
        assert result.duration_ms >= 0


class TestComputeStats:
    """Dry run uses the same predicates as the cleanup."""

    @pytest.fixture
    def populated(self, db_session, audio_store):
        age_file(audio_store, date(2025, 5, 1), 30)
        age_file(audio_store, date(2025, 5, 31), 15)
        age_file(audio_store, date(2025, 6, 10), 5)
        add_newsletter(db_session, 366)
        add_newsletter(db_session, 400)
        add_newsletter(db_session, 30)
        return db_session, audio_store

    def test_stats_match_cleanup(self, populated):
        from daily_pulse.services.retention import compute_stats, run_cleanup

        db, store = populated
        stats = compute_stats(db, store, now=NOW)
        result = run_cleanup(db, store, now=NOW)

        assert stats.audio_to_delete == result.audio_files_deleted == 2
        assert stats.newsletters_to_delete == result.newsletters_deleted == 2

    def test_stats_do_not_delete(self, populated):
        from daily_pulse.services import newsletter_store
        from daily_pulse.services.retention import compute_stats

        db, store = populated
        stats = compute_stats(db, store, now=NOW)

        assert stats.audio_total == 3
        assert stats.audio_total_bytes == 3 * 1024
        assert stats.audio_to_delete_bytes == 2 * 1024
        assert stats.newsletters_total == 3
        assert len(store.list_artifacts()) == 3
        assert newsletter_store.count_all(db) == 3

    def test_cutoffs(self, populated):
        from daily_pulse.services.retention import compute_stats

        db, store = populated
        stats = compute_stats(db, store, now=NOW)

        assert stats.audio_cutoff == datetime(2025, 6, 1, 12, 0, 0)
        assert stats.newsletter_cutoff == date(2024, 6, 15)

    def test_sizes_in_mb(self):
        from daily_pulse.services.retention import CleanupStats

        stats = CleanupStats(audio_total_bytes=3 * 1024 * 1024 + 5000, audio_to_delete_bytes=1536 * 1024)
        assert stats.audio_total_mb == 3.0
        assert stats.audio_to_delete_mb == 1.5
