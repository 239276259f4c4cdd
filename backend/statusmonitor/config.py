"""Application configuration from environment variables."""
import os
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables.

    Constructed once at process start and handed to the runner, the history
    store, the renderers and the API.
    """

    model_config = SettingsConfigDict(env_prefix="STATUSMONITOR_", case_sensitive=False)

    # Target list (YAML or JSON)
    config_path: str = "config.yml"

    # Root for api/<id>/status.json and api/<id>/history/YYYY-MM.json. Shares the
    # site directory by default so the pages can link to the JSON files.
    data_path: str = "site"

    # Root for index.html, service/<id>.html and badge/<id>.svg
    site_path: str = "site"

    # Retry policy shared by every target kind
    max_attempts: int = Field(default=3, ge=1)
    retry_delay_seconds: float = Field(default=2.0, ge=1.0, le=2.0)

    # None = every target in the batch is checked at once
    max_concurrent_checks: Optional[int] = Field(default=None, ge=1)

    # Per-partition retention (30 days at a 10 minute cadence)
    history_cap: int = Field(default=4320, ge=1)

    # serve mode: minutes between batch runs
    check_interval_minutes: int = Field(default=10, ge=1)

    # Optional endpoint receiving up/down transitions
    webhook_url: Optional[str] = None

    log_level: str = "INFO"

    # Web server port (serve mode)
    web_port: int = 8000


def resolve_config_path(settings: Settings) -> str:
    """Get the target list path.

    Priority:
    1. The configured path if it exists
    2. config.json next to it (legacy JSON config)
    """
    path = settings.config_path
    if os.path.exists(path):
        return path

    fallback = os.path.join(os.path.dirname(path), "config.json")
    if os.path.exists(fallback):
        return fallback
    return path


def api_dir(settings: Settings) -> str:
    """Directory holding the per-target JSON files."""
    return os.path.join(settings.data_path, "api")
