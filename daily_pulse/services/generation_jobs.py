# daily_pulse/services/generation_jobs.py
"""
Registry of background newsletter generations.

The generate endpoint answers 202 as soon as the placeholder row is written;
the rest of the pipeline runs in a detached asyncio task which pushes the
blocking SDK and database calls onto a worker thread. Tasks are keyed by
publish date so the API can report which dates are in flight.
"""

import asyncio
import logging
import uuid
from datetime import date
from typing import Callable

from sqlalchemy.orm import Session

from daily_pulse.services.newsletter_service import NewsletterService

logger = logging.getLogger(__name__)


class GenerationInProgressError(Exception):
    """A generation for this date is already running."""

    def __init__(self, publish_date: date):
        self.publish_date = publish_date
        super().__init__(f"Generation already in progress for {publish_date.isoformat()}")


class GenerationJobRegistry:
    """
    Tracks running generation tasks by publish date.

    Owned by the application (app.state.generation_jobs), one per process.
    Same-date submissions run side by side unless reject_concurrent is set.
    """

    def __init__(
        self,
        service_factory: Callable[[], NewsletterService],
        reject_concurrent: bool = False,
    ):
        self._service_factory = service_factory
        self._reject_concurrent = reject_concurrent
        self._tasks: dict[date, set[asyncio.Task]] = {}

    # Sync endpoints read these from the threadpool while the loop mutates
    # _tasks, so iterate over snapshots.

    def is_running(self, publish_date: date) -> bool:
        return any(not t.done() for t in tuple(self._tasks.get(publish_date, ())))

    def running_dates(self) -> list[date]:
        return sorted(d for d in list(self._tasks) if self.is_running(d))

    def running_count(self) -> int:
        return sum(1 for tasks in list(self._tasks.values()) for t in tuple(tasks) if not t.done())

    async def start(self, db: Session, publish_date: date) -> asyncio.Task:
        """
        Write the generating row, then detach the rest of the pipeline.

        Raises:
            GenerationInProgressError: reject_concurrent is set and the date is busy
        """
        if self._reject_concurrent and self.is_running(publish_date):
            raise GenerationInProgressError(publish_date)

        service = self._service_factory()
        service.mark_generating(db, publish_date)

        trace_id = str(uuid.uuid4())
        task = asyncio.create_task(
            self._execute(service, publish_date, trace_id),
            name=f"generate-{publish_date.isoformat()}",
        )
        self._tasks.setdefault(publish_date, set()).add(task)

        # Clean up task reference when done
        task.add_done_callback(lambda t: self._forget(publish_date, t))

        logger.info(
            f"Generation task started for {publish_date}",
            extra={"event": "job_started", "publish_date": str(publish_date)},
        )
        return task

    def _forget(self, publish_date: date, task: asyncio.Task) -> None:
        tasks = self._tasks.get(publish_date)
        if tasks is None:
            return
        tasks.discard(task)
        if not tasks:
            self._tasks.pop(publish_date, None)

    async def _execute(self, service: NewsletterService, publish_date: date, trace_id: str) -> None:
        """Run the pipeline off the event loop. Failures are already recorded on the row."""
        try:
            await asyncio.to_thread(service.run, publish_date, trace_id)
        except Exception as e:
            logger.error(
                f"Generation task for {publish_date} failed: {e}",
                extra={"event": "job_failed", "publish_date": str(publish_date)},
            )
            return

        logger.info(
            f"Generation task for {publish_date} finished",
            extra={"event": "job_completed", "publish_date": str(publish_date)},
        )

    async def shutdown(self, timeout: float = 5.0) -> None:
        """
        Wait briefly for in-flight generations.

        Worker threads can't be cancelled; anything still running keeps its
        generating row until the date is generated again.
        """
        pending = [t for tasks in self._tasks.values() for t in tasks if not t.done()]
        if not pending:
            return

        logger.warning(
            f"Shutting down with {len(pending)} generation(s) in flight: "
            f"{', '.join(d.isoformat() for d in self.running_dates())}"
        )
        await asyncio.wait(pending, timeout=timeout)
