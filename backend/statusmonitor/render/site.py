"""Writes the static status site for a finished batch."""
import logging
import os
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..schemas.outcome import CheckOutcome, TargetResult
from ..services.config_loader import MonitorConfig
from ..services.history import HistoryStore, HistoryStoreError
from ..services.metrics import PERIODS, bucket_history, summarize
from .graphics import render_badge
from .pages import SitePage, TargetView, render_index, render_service

logger = logging.getLogger(__name__)


class SiteGenerator:
    """Builds index.html, service/<id>.html and badge/<id>.svg from stored history."""

    def __init__(self, store: HistoryStore, site_path: str):
        self.store = store
        self.site_path = site_path

    def build_view(self, result: TargetResult, now: Optional[datetime] = None) -> TargetView:
        """Gather history and metrics for one target.

        A result that could not be persisted is shown on top of whatever
        history is on disk rather than dropped.
        """
        target_id = result.target.id
        try:
            history: List[CheckOutcome] = self.store.read_all(target_id)
            partitions = self.store.list_partitions(target_id)
        except HistoryStoreError as e:
            logger.error(f"Cannot read history for {target_id}: {e}")
            history, partitions = [], []

        if not history or history[-1] != result.outcome:
            history = history + [result.outcome]

        return TargetView(
            result=result,
            metrics=summarize(history, result.outcome),
            history=history,
            bars={period: bucket_history(history, period, now) for period in PERIODS},
            partitions=partitions,
        )

    def generate(
        self,
        config: MonitorConfig,
        results: Dict[str, TargetResult],
        now: Optional[datetime] = None,
    ) -> List[str]:
        """Render and write every page; returns the written paths."""
        now = now or datetime.now(timezone.utc)
        views = [self.build_view(results[target.id], now) for target in config.targets if target.id in results]
        page = SitePage(
            generated_at=now,
            targets=views,
            language=config.language,
            title=config.title,
            report=config.report,
        )

        written = [self._write("index.html", render_index(page))]
        for view in views:
            written.append(self._write(os.path.join("service", f"{view.id}.html"), render_service(page, view)))
            status = view.result.outcome.status.value
            written.append(self._write(
                os.path.join("badge", f"{view.id}.svg"),
                render_badge(view.result.target.name, status),
            ))
        logger.info(f"Generated {len(written)} files in {self.site_path}")
        return written

    def _write(self, relative_path: str, content: str) -> str:
        path = os.path.join(self.site_path, relative_path)
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        logger.debug(f"Generated {relative_path}")
        return path
