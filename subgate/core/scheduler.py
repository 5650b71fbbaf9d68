"""Daily expiration sweep scheduling."""

import logging
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from subgate.core.config import settings
from subgate.services.expiration_service import run_expiration_sweep

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "daily_expiration_sweep"


class Scheduler:
    """Runs the expiration sweep once per day in a background thread."""

    def __init__(self):
        self.scheduler: Optional[BackgroundScheduler] = None

    def init(self):
        """Create the scheduler and register the sweep job."""
        if self.scheduler is not None:
            return

        self.scheduler = BackgroundScheduler(timezone=settings.scheduler_timezone)
        self.scheduler.add_job(
            run_expiration_sweep,
            trigger=CronTrigger(
                hour=settings.sweep_hour,
                minute=settings.sweep_minute,
                timezone=settings.scheduler_timezone
            ),
            id=SWEEP_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

    def start(self):
        """Start the scheduler."""
        self.init()
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info(
                f"start: Expiration sweep scheduled daily at "
                f"{settings.sweep_hour:02d}:{settings.sweep_minute:02d} {settings.scheduler_timezone}")

    def shutdown(self):
        """Shutdown the scheduler."""
        if self.scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    def get_jobs(self):
        """Get all scheduled jobs."""
        return self.scheduler.get_jobs() if self.scheduler else []


# Global scheduler instance
scheduler = Scheduler()
