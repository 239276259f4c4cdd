"""Status Monitor - HTTP, TCP and DNS checks with history, uptime and badges."""

__version__ = "1.0.0"
