import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from core.config import settings
from features.tides.services.station_directory import StationDirectory

logger = logging.getLogger(__name__)

REFRESH_JOB_ID = "station_directory_refresh"

class Scheduler:
    """Owns the periodic station directory refresh."""

    def __init__(self, directory: StationDirectory, interval_hours: Optional[int] = None):
        self.scheduler = AsyncIOScheduler(timezone=timezone.utc)
        self.directory = directory
        self.interval_hours = interval_hours or settings.station_refresh_hours
        # AsyncIOScheduler.shutdown() only takes effect on the next loop tick
        self._started = False

    def start(self, run_immediately: bool = False):
        """Start the scheduler with the directory refresh job.

        Must be called from within a running event loop.
        """
        logger.info("Starting scheduler")

        now = datetime.now(timezone.utc)
        next_run = now if run_immediately else now + timedelta(hours=self.interval_hours)

        self.scheduler.add_job(
            self.directory.refresh,
            IntervalTrigger(hours=self.interval_hours),
            id=REFRESH_JOB_ID,
            name="station_directory_refresh",
            next_run_time=next_run,
            replace_existing=True,
            coalesce=True,
            max_instances=1
        )

        self.scheduler.start()
        self._started = True
        logger.info(f"Scheduler started, refreshing stations every {self.interval_hours}h")

    def get_next_run_time(self, job_id: str = REFRESH_JOB_ID) -> Optional[str]:
        """Get the next run time for a scheduled job."""
        job = self.scheduler.get_job(job_id)
        if job and job.next_run_time:
            return job.next_run_time.isoformat()
        return None

    def shutdown(self):
        """Shutdown the scheduler."""
        if not self._started:
            return

        self._started = False
        logger.info("Shutting down scheduler")
        self.scheduler.shutdown(wait=False)
        logger.info("Scheduler shutdown complete")
