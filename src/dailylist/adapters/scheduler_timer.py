"""APScheduler-backed deferred actions."""

import logging
from contextlib import AbstractContextManager
from datetime import datetime, timedelta
from typing import Callable

from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.date import DateTrigger

logger = logging.getLogger(__name__)


class SchedulerJobHandle:
    """Cancellable handle around a one-shot scheduler job."""

    def __init__(self, job: Job):
        self.job = job

    def cancel(self) -> None:
        try:
            self.job.remove()
        except JobLookupError:
            # Already ran
            pass


class SchedulerTimer:
    """
    Deferred actions on an APScheduler scheduler.

    Implements DeferredActions protocol. When a lock is given, callbacks run
    while holding it so they never interleave with foreground commands.
    """

    def __init__(self, scheduler: BaseScheduler, lock: AbstractContextManager | None = None):
        self.scheduler = scheduler
        self.lock = lock

    def schedule(self, delay: float, callback: Callable[[], None]) -> SchedulerJobHandle:
        run_date = datetime.now(self.scheduler.timezone) + timedelta(seconds=delay)
        job = self.scheduler.add_job(self._wrap(callback), DateTrigger(run_date=run_date))
        logger.debug(f"Scheduled {getattr(callback, '__name__', 'callback')} at {run_date}")
        return SchedulerJobHandle(job)

    def _wrap(self, callback: Callable[[], None]) -> Callable[[], None]:
        if self.lock is None:
            return callback

        def locked() -> None:
            with self.lock:
                callback()

        return locked
