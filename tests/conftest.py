"""Shared pytest configuration and fixtures."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from statusmonitor.schemas.outcome import CheckOutcome, CheckStatus

BASE_TIME = datetime(2026, 10, 18, 12, 30, 15, 123456, tzinfo=timezone.utc)


@pytest.fixture
def make_outcome() -> Callable[..., CheckOutcome]:
    """Build outcomes with sensible defaults for the given status."""

    def _make(
        status: str = "up",
        response_time_ms: int = 100,
        timestamp: datetime | None = None,
        target_id: str = "example",
        **kwargs: Any,
    ) -> CheckOutcome:
        status = CheckStatus(status)
        if status == CheckStatus.MAINTENANCE:
            response_time_ms = 0
        if status == CheckStatus.DOWN:
            kwargs.setdefault("error", "Connection refused")
        return CheckOutcome(
            target_id=target_id,
            status=status,
            response_time_ms=response_time_ms,
            timestamp=timestamp or BASE_TIME,
            **kwargs,
        )

    return _make


@pytest.fixture
def series(make_outcome: Callable[..., CheckOutcome]) -> Callable[..., list[CheckOutcome]]:
    """Build a chronological series from status strings, one minute apart."""

    def _series(*statuses: str, response_time_ms: int = 100, start: datetime | None = None) -> list[CheckOutcome]:
        start = start or BASE_TIME - timedelta(minutes=len(statuses))
        return [
            make_outcome(status, response_time_ms=response_time_ms, timestamp=start + timedelta(minutes=i))
            for i, status in enumerate(statuses)
        ]

    return _series
