"""Services for checking, recording, alerting and scheduling."""
from .checker import CheckerService
from .history import HistoryStore, HistoryStoreError
from .runner import BatchRunner, BatchResult
from .alerter import AlerterService, Transition, detect_transition
from .config_loader import ConfigError, MonitorConfig, load_monitor_config

__all__ = [
    "CheckerService",
    "HistoryStore",
    "HistoryStoreError",
    "BatchRunner",
    "BatchResult",
    "AlerterService",
    "Transition",
    "detect_transition",
    "ConfigError",
    "MonitorConfig",
    "load_monitor_config",
]
