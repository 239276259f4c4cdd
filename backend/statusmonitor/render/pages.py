"""HTML status pages."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from markupsafe import Markup

from ..schemas.outcome import CheckOutcome, TargetResult
from ..schemas.status import HistoryBucket, TargetMetrics
from ..services.metrics import PERIODS
from .graphics import render_sparkline
from .lang import get_strings
from .templating import get_environment, time_ago

LATEST_CHECKS = 20


@dataclass
class TargetView:
    """Everything a page needs about one target."""
    result: TargetResult
    metrics: TargetMetrics
    history: List[CheckOutcome] = field(default_factory=list)
    bars: Dict[str, List[HistoryBucket]] = field(default_factory=dict)
    partitions: List[str] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.result.target.id


@dataclass
class SitePage:
    generated_at: datetime
    targets: List[TargetView]
    language: str = "en"
    title: Optional[str] = None
    report: Optional[str] = None


def report_link(report: Optional[str], text: str = "Report an issue") -> Markup:
    """Link for reporting problems: mailto for email addresses, external link otherwise."""
    if not report:
        return Markup("")
    if "@" in report and not report.startswith(("http://", "https://")):
        return Markup('<a href="mailto:{0}">{1}</a>').format(report, text)
    return Markup('<a href="{0}" target="_blank" rel="noopener">{1}</a>').format(report, text)


def _context(page: SitePage) -> dict:
    strings = get_strings(page.language)
    return {
        "page": page,
        "t": strings,
        "title": page.title or strings["statusMonitor"],
        "periods": list(PERIODS),
        "report_html": report_link(page.report, strings["reportIssue"]),
        "ago": lambda value: time_ago(value, strings, page.generated_at),
    }


def render_index(page: SitePage) -> str:
    """Dashboard listing every target."""
    context = _context(page)
    up = sum(1 for view in page.targets if view.result.outcome.status == "up")
    return get_environment().get_template("index.html").render(up=up, **context)


def render_service(page: SitePage, view: TargetView) -> str:
    """Detail page for one target."""
    context = _context(page)
    return get_environment().get_template("service.html").render(
        view=view,
        target=view.result.target,
        outcome=view.result.outcome,
        latest=list(reversed(view.history[-LATEST_CHECKS:])),
        sparkline=Markup(render_sparkline(view.history)),
        **context,
    )
