"""Command line entry point.

Usage:
    statusmonitor check           # one batch: check, record, render, exit
    statusmonitor serve           # API + static site, batches on an interval
"""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .config import Settings
from .services.config_loader import ConfigError
from .services.monitor import MonitorService

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="statusmonitor", description="HTTP, TCP and DNS status monitor")
    parser.add_argument("--config", help="Path to the YAML or JSON target list")
    parser.add_argument("--data-path", help="Directory for api/<id>/ status and history files")
    parser.add_argument("--site-path", help="Directory for the generated HTML and badges")
    parser.add_argument("--log-level", help="Logging level (INFO, DEBUG, ...)")

    sub = parser.add_subparsers(dest="command", required=True)
    check = sub.add_parser("check", help="Run one batch of checks and exit")
    check.add_argument("--no-render", action="store_true", help="Skip generating HTML and badges")
    check.add_argument(
        "--fail-on-down",
        action="store_true",
        help="Exit with status 2 when any target is down",
    )

    serve = sub.add_parser("serve", help="Serve the site and API, checking on an interval")
    serve.add_argument("--port", type=int, help="Web server port")
    serve.add_argument("--host", default="0.0.0.0", help="Bind address")
    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    overrides = {
        "config_path": args.config,
        "data_path": args.data_path,
        "site_path": args.site_path,
        "log_level": args.log_level,
        "web_port": getattr(args, "port", None),
    }
    return Settings(**{k: v for k, v in overrides.items() if v is not None})


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def run_check(settings: Settings, render: bool = True, fail_on_down: bool = False) -> int:
    """Run one batch; returns the process exit code."""
    monitor = MonitorService(settings)
    try:
        batch = asyncio.run(monitor.run_once(render=render))
    except ConfigError as e:
        logger.error(f"Invalid configuration, nothing was checked: {e}")
        return 1

    down = sum(1 for r in batch.results.values() if r.outcome.status == "down")
    if fail_on_down and down:
        logger.warning(f"{down} targets down")
        return 2
    return 0


def run_server(settings: Settings, host: str) -> int:
    import uvicorn

    from .main import create_app

    app = create_app(settings)
    uvicorn.run(app, host=host, port=settings.web_port)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = _settings_from_args(args)
    _configure_logging(settings.log_level)

    if args.command == "check":
        return run_check(settings, render=not args.no_render, fail_on_down=args.fail_on_down)
    return run_server(settings, args.host)


if __name__ == "__main__":
    sys.exit(main())
