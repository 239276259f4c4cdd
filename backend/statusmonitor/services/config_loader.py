"""Target list loading - turns config.yml / config.json into target descriptors."""
import json
import logging
import os
from typing import Any, Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, ValidationError

from ..schemas.target import DEFAULT_TIMEOUT_MS, TargetDescriptor, slugify, target_adapter

logger = logging.getLogger(__name__)

# config key -> descriptor field
_FIELD_ALIASES = {
    "type": "kind",
    "expectedStatus": "expected_status_code",
    "expectedStatusCode": "expected_status_code",
    "expected_status": "expected_status_code",
    "timeout": "timeout_ms",
    "timeoutMs": "timeout_ms",
    "followRedirects": "follow_redirects",
}


class ConfigError(Exception):
    """The target list is missing, unreadable, or invalid."""


class MonitorConfig(BaseModel):
    """Everything read from the target list file."""
    language: Literal["en", "es"] = "en"
    title: Optional[str] = None
    report: Optional[str] = None  # Issue-report URL or email shown on pages
    targets: List[TargetDescriptor] = []


def _parse(path: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    try:
        if path.endswith((".yml", ".yaml")):
            return yaml.safe_load(content)
        return json.loads(content)
    except (yaml.YAMLError, ValueError) as e:
        raise ConfigError(f"Cannot parse config file {path}: {e}") from e


def normalize_target(raw: Dict[str, Any], index: int) -> TargetDescriptor:
    """Normalize one config entry, filling in defaults.

    HTTP targets default to GET, expected status 200 and a 10000ms timeout.
    A missing id is derived from the name.
    """
    if not isinstance(raw, dict):
        raise ConfigError(f"Check #{index + 1} is not a mapping")

    data: Dict[str, Any] = {}
    for key, value in raw.items():
        data[_FIELD_ALIASES.get(key, key)] = value

    name = data.get("name")
    if not name or not isinstance(name, str):
        raise ConfigError(f"Check #{index + 1} has no name")

    data["kind"] = str(data.get("kind") or "http").lower()
    if not data.get("id"):
        data["id"] = slugify(name)
    if data.get("timeout_ms") is None:
        data["timeout_ms"] = DEFAULT_TIMEOUT_MS
    if data["kind"] == "http":
        data["method"] = str(data.get("method") or "GET").upper()
        if data.get("expected_status_code") is None:
            data["expected_status_code"] = 200
    if not data.get("maintenance"):
        data["maintenance"] = None

    try:
        return target_adapter.validate_python(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid check '{name}': {e}") from e


def build_config(raw: Any) -> MonitorConfig:
    """Validate a parsed config document."""
    if not isinstance(raw, dict):
        raise ConfigError("Config must be a mapping with a 'checks' or 'services' list")

    entries = raw.get("checks")
    if entries is None:
        entries = raw.get("services")
    if entries is None:
        entries = []
    if not isinstance(entries, list):
        raise ConfigError("'checks' must be a list")

    targets = [normalize_target(entry, i) for i, entry in enumerate(entries)]

    seen = set()
    for target in targets:
        if target.id in seen:
            raise ConfigError(f"Duplicate check id: {target.id}")
        seen.add(target.id)

    if not targets:
        logger.warning("No checks configured")

    try:
        return MonitorConfig(
            language=raw.get("language") or "en",
            title=raw.get("title"),
            report=raw.get("report"),
            targets=targets,
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid config: {e}") from e


def load_monitor_config(path: str) -> MonitorConfig:
    """Load and validate the target list from a YAML or JSON file.

    Raises:
        ConfigError: If the file is missing or any check is invalid
    """
    if not os.path.exists(path):
        raise ConfigError(f"Config file not found: {path}")
    config = build_config(_parse(path))
    logger.info(f"Loaded {len(config.targets)} checks from {path}")
    return config
