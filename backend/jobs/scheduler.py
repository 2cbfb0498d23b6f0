"""APScheduler setup for the service's own background jobs.

The service scheduler is bound to the default registry, so its jobs show
up in the job snapshots next to the schedulers of the host application.
"""

import logging
from collections import Counter
from typing import Optional

from apscheduler.jobstores.sqlalchemy import SQLAlchemyJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from config import settings, SCHEDULING_AVAILABLE
from errors import ConfigurationError

logger = logging.getLogger(__name__)

SERVICE_SCHEDULER_NAME = "service"

# Global scheduler instance
scheduler: Optional[AsyncIOScheduler] = None


def log_job_snapshots_job():
    """Job: Poll job snapshots and log a summary.

    Must stay synchronous: the executor runs plain functions in a worker
    thread, off the event loop that serves the API.
    """
    from jobs.registry import default_registry
    from jobs.snapshots import build_all_snapshots

    snapshots = build_all_snapshots(default_registry, scheduling_available=SCHEDULING_AVAILABLE)

    by_group = Counter(s.group for s in snapshots)
    executing = sum(1 for s in snapshots if s.currently_executing)
    paused = sum(1 for s in snapshots if s.paused)

    logger.info(
        f"Job snapshot: {len(snapshots)} jobs, {executing} executing, {paused} paused "
        f"{dict(by_group) if by_group else ''}"
    )


def build_jobstores() -> dict:
    """Job stores for the service scheduler (in-memory unless JOBSTORE_URL is set)."""
    if not settings.jobstore_url:
        return {}
    return {"default": SQLAlchemyJobStore(url=settings.jobstore_url)}


async def start_scheduler():
    """Initialize, register and start the scheduler."""
    global scheduler
    from jobs.registry import default_registry

    interval = settings.snapshot_log_interval_minutes
    if interval <= 0:
        raise ConfigurationError(
            "Snapshot log interval must be positive",
            setting="snapshot_log_interval_minutes",
        )

    scheduler = AsyncIOScheduler(jobstores=build_jobstores())
    default_registry.bind(scheduler, name=SERVICE_SCHEDULER_NAME)

    # Snapshot logging job - runs every interval
    scheduler.add_job(
        log_job_snapshots_job,
        IntervalTrigger(minutes=interval),
        id="log_job_snapshots",
        name="Log job snapshot summary",
        replace_existing=True,
    )

    scheduler.start()
    logger.info(f"Scheduler started with {interval} minute snapshot interval")


async def stop_scheduler():
    """Stop the scheduler."""
    global scheduler
    if scheduler:
        from jobs.registry import default_registry
        from errors import SchedulerNotFoundError

        scheduler.shutdown(wait=False)
        try:
            default_registry.unbind(SERVICE_SCHEDULER_NAME)
        except SchedulerNotFoundError:
            logger.debug("Service scheduler was not bound")
        scheduler = None
        logger.info("Scheduler stopped")
