"""Jinja2 environment shared by the page and SVG renderers."""
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATE_DIR = Path(__file__).parent / "templates"


def format_date(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


def time_ago(value: datetime, strings: Dict[str, str], now: Optional[datetime] = None) -> str:
    """Short relative time, e.g. '5m ago' / 'hace 5m'."""
    now = now or datetime.now(timezone.utc)
    seconds = max(0, int((now - value).total_seconds()))
    if seconds < 60:
        value_unit = (seconds, "s")
    elif seconds < 3600:
        value_unit = (seconds // 60, "m")
    elif seconds < 86400:
        value_unit = (seconds // 3600, "h")
    else:
        value_unit = (seconds // 86400, "d")
    return strings["ago"].format(value=value_unit[0], unit=value_unit[1])


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(enabled_extensions=("html", "svg")),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["format_date"] = format_date
    return env
