"""Scheduler service - runs a batch of checks on a fixed interval (serve mode)."""
import logging
from datetime import datetime, timezone
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .config_loader import ConfigError
from .history import HistoryStoreError
from .monitor import MonitorService

logger = logging.getLogger(__name__)


class SchedulerService:
    """Service for scheduling periodic batch runs."""

    def __init__(self, monitor: MonitorService, interval_minutes: int = 10):
        self.monitor = monitor
        self.interval_minutes = interval_minutes
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self, run_immediately: bool = True):
        """Start the scheduler."""
        if self._running:
            return

        self.scheduler = AsyncIOScheduler()

        # next_run_time=None would add the job paused, so only pass it to fire now
        extra = {"next_run_time": datetime.now(timezone.utc)} if run_immediately else {}
        self.scheduler.add_job(
            self._run_batch,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id="run_checks",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            **extra,
        )
        self.scheduler.start()
        self._running = True
        logger.info(f"Scheduler started (interval={self.interval_minutes}m)")

    def stop(self):
        """Stop the scheduler."""
        if self.scheduler and self._running:
            self.scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Scheduler stopped")

    async def _run_batch(self):
        """Run one batch; a bad config or site write skips this tick only."""
        try:
            await self.monitor.run_once()
        except ConfigError as e:
            logger.error(f"Skipping run, invalid config: {e}")
        except (HistoryStoreError, OSError) as e:
            logger.error(f"Error writing status site: {e}")
