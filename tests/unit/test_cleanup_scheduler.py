# tests/unit/test_cleanup_scheduler.py
"""Tests for the daily cleanup scheduler."""

from datetime import UTC, datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest

from daily_pulse.services.scheduler import (
    CLEANUP_JOB_ID,
    SchedulerState,
    get_scheduler_status,
    next_fire_time,
    scheduled_cleanup,
    start_cleanup_scheduler,
    stop_cleanup_scheduler,
)


class TestNextFireTime:

    def test_before_two_am_is_same_day(self):
        now = datetime(2025, 6, 1, 1, 59, 59, tzinfo=UTC)
        assert next_fire_time(now) == datetime(2025, 6, 1, 2, 0, tzinfo=UTC)

    def test_exactly_two_am_is_next_day(self):
        now = datetime(2025, 6, 1, 2, 0, tzinfo=UTC)
        assert next_fire_time(now) == datetime(2025, 6, 2, 2, 0, tzinfo=UTC)

    def test_after_two_am_is_next_day(self):
        now = datetime(2025, 12, 31, 23, 0, tzinfo=UTC)
        assert next_fire_time(now) == datetime(2026, 1, 1, 2, 0, tzinfo=UTC)

    def test_naive_is_utc(self):
        assert next_fire_time(datetime(2025, 6, 1, 0, 30)) == datetime(2025, 6, 1, 2, 0, tzinfo=UTC)

    def test_other_timezone_converted(self):
        # 03:30 at UTC+5 is 22:30 UTC the previous day
        now = datetime(2025, 6, 2, 3, 30, tzinfo=timezone(timedelta(hours=5)))
        assert next_fire_time(now) == datetime(2025, 6, 2, 2, 0, tzinfo=UTC)


class TestSchedulerLifecycle:

    def test_idle_status(self):
        status = get_scheduler_status(SchedulerState())

        assert status == {
            "running": False,
            "schedule": "0 2 * * * (Daily at 02:00 UTC)",
            "next_run": None,
        }

    def test_stop_when_idle_is_noop(self):
        state = SchedulerState()
        stop_cleanup_scheduler(state)
        assert not state.running

    @pytest.mark.asyncio
    async def test_start_registers_daily_job(self):
        state = SchedulerState()
        job_func = MagicMock()

        job = start_cleanup_scheduler(state, job_func=job_func)
        try:
            assert state.running
            assert job.id == CLEANUP_JOB_ID
            registered = state.scheduler.get_job(CLEANUP_JOB_ID)
            assert registered.next_run_time.astimezone(UTC).hour == 2
            assert registered.next_run_time.astimezone(UTC).minute == 0

            now = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)
            status = get_scheduler_status(state, now=now)
            assert status["running"] is True
            assert status["next_run"] == datetime(2025, 6, 2, 2, 0, tzinfo=UTC)
        finally:
            stop_cleanup_scheduler(state)

        assert not state.running
        assert get_scheduler_status(state)["next_run"] is None
        job_func.assert_not_called()

    @pytest.mark.asyncio
    async def test_restart_replaces_scheduler(self):
        state = SchedulerState()

        start_cleanup_scheduler(state, job_func=MagicMock())
        first = state.scheduler
        start_cleanup_scheduler(state, job_func=MagicMock())
        try:
            assert state.scheduler is not first
            assert len(state.scheduler.get_jobs()) == 1
        finally:
            stop_cleanup_scheduler(state)


class TestScheduledCleanup:

    def test_runs_cleanup_with_store(self, audio_store):
        with patch("daily_pulse.services.retention.run_cleanup") as mock_run, \
                patch("daily_pulse.database.SessionLocal") as mock_session:
            mock_run.return_value = MagicMock(audio_files_deleted=1, newsletters_deleted=2)

            scheduled_cleanup()

        mock_run.assert_called_once_with(mock_session.return_value, audio_store)
        mock_session.return_value.close.assert_called_once()

    def test_swallows_errors(self, audio_store):
        with patch("daily_pulse.services.retention.run_cleanup", side_effect=RuntimeError("boom")), \
                patch("daily_pulse.database.SessionLocal") as mock_session:
            scheduled_cleanup()

        mock_session.return_value.close.assert_called_once()
