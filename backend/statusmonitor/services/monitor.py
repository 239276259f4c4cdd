"""Monitor service - wires one full run: load targets, check, record, render."""
import asyncio
import logging
from typing import Optional

from ..config import Settings, api_dir, resolve_config_path
from ..render.site import SiteGenerator
from .alerter import AlerterService
from .checker import CheckerService
from .config_loader import MonitorConfig, load_monitor_config
from .history import HistoryStore
from .runner import BatchResult, BatchRunner

logger = logging.getLogger(__name__)


class MonitorService:
    """Owns the collaborators of a run, all built from one Settings value."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.store = HistoryStore(api_dir(settings), cap=settings.history_cap)
        self.checker = CheckerService(
            max_attempts=settings.max_attempts,
            retry_delay=settings.retry_delay_seconds,
        )
        self.alerter = AlerterService(settings.webhook_url)
        self.runner = BatchRunner(
            self.checker,
            self.store,
            alerter=self.alerter,
            max_concurrent=settings.max_concurrent_checks,
        )
        self.site = SiteGenerator(self.store, settings.site_path)
        self.last_config: Optional[MonitorConfig] = None

    def load_config(self) -> MonitorConfig:
        """Read the target list; raises ConfigError before anything is checked."""
        config = load_monitor_config(resolve_config_path(self.settings))
        self.last_config = config
        return config

    async def run_once(self, render: bool = True) -> BatchResult:
        config = self.load_config()
        batch = await self.runner.run(config.targets)
        if render:
            await asyncio.to_thread(self.site.generate, config, batch.results, batch.finished_at)
        return batch
