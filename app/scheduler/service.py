"""Scheduler service for periodic fetch runs."""

import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.logging import get_logger

logger = get_logger(__name__, component="scheduler")

JOB_ID = "warn-fetch"


class SchedulerService:
    """
    Runs the ingest pipeline on a fixed interval with APScheduler.

    The job runs on a BackgroundScheduler thread; the main thread stays free
    for signal handling. Overlapping runs are prevented twice: the scheduler
    allows one instance of the job, and the pipeline's own lock skips a run
    started while another is in progress.
    """

    def __init__(
        self,
        run_callable: Callable[[], object],
        interval_seconds: int,
        shutdown_event: Optional[threading.Event] = None,
    ):
        """
        Initialize the scheduler service.

        Args:
            run_callable: Called on each tick (e.g. pipeline.run_once)
            interval_seconds: Seconds between runs
            shutdown_event: Set on shutdown so the main thread can stop waiting
        """
        self.run_callable = run_callable
        self.interval_seconds = interval_seconds
        self.shutdown_event = shutdown_event
        self.scheduler = BackgroundScheduler(
            job_defaults={
                "max_instances": 1,
                "coalesce": True,
                "misfire_grace_time": interval_seconds,
            },
            timezone=timezone.utc,
        )

    def start(self) -> None:
        """Register the fetch job and start the scheduler; the first run fires immediately."""
        next_run = datetime.now(timezone.utc)
        self.scheduler.add_job(
            func=self._run_job,
            trigger=IntervalTrigger(seconds=self.interval_seconds, timezone=timezone.utc),
            id=JOB_ID,
            name="WARN notice fetch",
            replace_existing=True,
            next_run_time=next_run,
        )
        self.scheduler.start()

        logger.info(
            f"Scheduler started with interval: {self.interval_seconds} seconds",
            extra={
                "event": "scheduler.started",
                "interval_seconds": self.interval_seconds,
                "next_run_time": next_run.isoformat(),
            },
        )

    def _run_job(self) -> None:
        """Scheduled entry point; errors are logged so the next tick still runs."""
        try:
            self.run_callable()
        except Exception as e:
            logger.error(
                f"Scheduled run failed: {e}",
                extra={"event": "scheduler.job.failed", "error_type": type(e).__name__},
                exc_info=True,
            )

    def shutdown(self, wait: bool = False) -> None:
        """
        Stop the scheduler.

        Args:
            wait: Wait for a running fetch to finish before returning
        """
        logger.info(
            "Shutting down scheduler",
            extra={"event": "scheduler.stopping", "wait_for_jobs": wait},
        )
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)
        if self.shutdown_event:
            self.shutdown_event.set()
        logger.info("Scheduler shutdown complete", extra={"event": "scheduler.stopped"})

    def trigger_now(self) -> None:
        """Run the job synchronously in the calling thread."""
        logger.info("Triggering immediate fetch run", extra={"event": "scheduler.trigger_now"})
        self._run_job()

    def is_running(self) -> bool:
        return self.scheduler.running

    def get_next_run_time(self) -> Optional[datetime]:
        """Next scheduled run, or None if the job is not registered."""
        job = self.scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None
