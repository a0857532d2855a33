"""
APScheduler setup for long-running commands.

`fast watch` keeps two interval jobs going while it runs: a display refresh
of the running fast and the day-boundary check.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)

DISPLAY_JOB_ID = "display_refresh"
DAY_BOUNDARY_JOB_ID = "day_boundary_check"


class WatchScheduler:
    """
    Runs interval jobs on an APScheduler BackgroundScheduler.

    The calling thread blocks in `run_for` while the jobs fire on the
    scheduler's worker threads, so a Rich `Live` display can be updated
    from a job.
    """

    def __init__(self, scheduler: Optional[BackgroundScheduler] = None) -> None:
        self.scheduler = scheduler or BackgroundScheduler(
            job_defaults={
                "coalesce": True,  # Combine missed runs
                "max_instances": 1,
                "misfire_grace_time": 30,
            },
        )
        self._stop = threading.Event()

    def add_interval_job(
        self,
        job_id: str,
        name: str,
        seconds: float,
        func: Callable[[], Any],
    ) -> None:
        """Register func to run every `seconds` seconds.

        Raises:
            ValueError: If seconds is not positive
        """
        if seconds <= 0:
            raise ValueError(f"interval for '{job_id}' must be positive, got {seconds}")

        self.scheduler.add_job(
            func,
            trigger=IntervalTrigger(seconds=seconds),
            id=job_id,
            name=name,
            replace_existing=True,
        )
        logger.info("Job %s registered every %ss", job_id, seconds)

    def get_jobs(self) -> list[dict[str, Any]]:
        """Return id, name and interval of each registered job."""
        return [
            {
                "id": job.id,
                "name": job.name,
                "interval_seconds": job.trigger.interval.total_seconds(),
            }
            for job in self.scheduler.get_jobs()
        ]

    def run_for(self, duration: Optional[float] = None) -> None:
        """Start the jobs and block for duration seconds, or until stop().

        The scheduler is always shut down on the way out, including on
        KeyboardInterrupt, which is re-raised.
        """
        self.scheduler.start()
        logger.debug("Scheduler started with %d jobs", len(self.scheduler.get_jobs()))
        try:
            self._stop.wait(duration)
        finally:
            self.scheduler.shutdown(wait=True)
            logger.debug("Scheduler shut down")

    def stop(self) -> None:
        """Make a blocking run_for return early."""
        self._stop.set()


def schedule_fast_watch(
    watch: WatchScheduler,
    refresh: Callable[[], Any],
    check_day_boundary: Callable[[], Any],
    display_interval: float,
    day_check_interval: float,
) -> None:
    """Register the two `fast watch` jobs on watch."""
    watch.add_interval_job(DISPLAY_JOB_ID, "Fasting display refresh", display_interval, refresh)
    watch.add_interval_job(
        DAY_BOUNDARY_JOB_ID, "Day boundary check", day_check_interval, check_day_boundary
    )
