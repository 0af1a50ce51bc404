"""
Background Task Scheduler

Runs the location sync once at startup and then every hour, and carries the
delayed retries the sync queues after a failed pass.
"""
import logging
import os
from datetime import datetime, timezone, timedelta
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger

from ..core.config import settings
from .tasks import ScheduledTask, TaskScheduler, TaskFunc

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler(timezone=timezone.utc)
scheduler_started = False


class APSchedulerTask(ScheduledTask):
    def __init__(self, aps_scheduler: AsyncIOScheduler, job_id: str):
        self._scheduler = aps_scheduler
        self._job_id = job_id

    @property
    def id(self) -> str:
        return self._job_id

    def cancel(self) -> None:
        try:
            self._scheduler.remove_job(self._job_id)
        except JobLookupError:
            # Already ran or already cancelled
            logger.debug(f"Job {self._job_id} no longer scheduled")


class APSchedulerTaskScheduler(TaskScheduler):
    """TaskScheduler backed by a one-shot APScheduler DateTrigger"""

    def __init__(self, aps_scheduler: AsyncIOScheduler = scheduler):
        self.scheduler = aps_scheduler

    def schedule(self, delay_seconds: float, func: TaskFunc, name: str) -> ScheduledTask:
        run_date = datetime.now(timezone.utc) + timedelta(seconds=delay_seconds)
        job = self.scheduler.add_job(
            func,
            trigger=DateTrigger(run_date=run_date),
            id=name,
            name=name,
            replace_existing=True,
        )
        return APSchedulerTask(self.scheduler, job.id)


def start_scheduler(location_sync):
    """Start the background task scheduler - only in the main worker"""
    global scheduler_started

    # Only one worker may own the sync job, otherwise passes would overlap
    worker_id = os.environ.get('APP_WORKER_ID', '0')

    if worker_id != '0' or not settings.SCHEDULER_ENABLED:
        logger.info(f"Skipping scheduler start in worker {worker_id}")
        return

    if scheduler_started:
        logger.info("Scheduler already started, skipping")
        return

    logger.info("Starting background task scheduler")

    # Hourly, on the hour
    scheduler.add_job(
        location_sync.run,
        trigger=CronTrigger(minute=0),
        id="location_sync_hourly",
        name="Sync bitcoin locations from Overpass and btcmap.org",
        replace_existing=True,
        max_instances=1,  # Prevent overlapping runs
        coalesce=True,
    )

    if settings.SYNC_ON_STARTUP:
        scheduler.add_job(
            location_sync.run,
            id="location_sync_startup",
            name="Initial location sync",
            replace_existing=True,
        )

    try:
        scheduler.start()
        scheduler_started = True
        logger.info("Background scheduler started successfully")
    except Exception as e:
        logger.error(f"Failed to start scheduler: {e}")


def stop_scheduler():
    """Stop the background task scheduler"""
    global scheduler_started
    if not scheduler_started:
        return

    logger.info("Stopping background task scheduler")
    try:
        scheduler.shutdown(wait=False)
        scheduler_started = False
    except Exception as e:
        logger.error(f"Failed to stop scheduler: {e}")

