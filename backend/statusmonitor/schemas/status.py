"""Status overview and metrics schemas for pages and the JSON API."""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from .outcome import CheckOutcome


class Trend(str, Enum):
    """Direction of recent latency change."""
    BETTER = "better"  # faster
    WORSE = "worse"  # slower
    FLAT = "flat"

    @property
    def arrow(self) -> str:
        return {"better": "↓", "worse": "↑", "flat": "→"}[self.value]


class BucketState(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    MAINTENANCE = "maintenance"
    UNKNOWN = "unknown"  # No data in the bucket


class HistoryBucket(BaseModel):
    """One bar of a history strip (one hour or one day)."""
    start: datetime
    label: str
    state: BucketState
    checks: int = 0
    uptime_percent: Optional[float] = None  # None for maintenance-only or empty buckets


class TargetMetrics(BaseModel):
    """Aggregates derived from one target's history."""
    uptime_percent: float
    checks: int  # Non-maintenance entries
    up_checks: int
    average_response_time_ms: int
    incident_count: int
    last_incident: Optional[CheckOutcome] = None
    recent_incidents: List[CheckOutcome] = []
    trend: Trend = Trend.FLAT


class TargetSummary(BaseModel):
    """Summary of a target for the overview."""
    id: str
    name: str
    kind: str
    endpoint: str
    status: str  # up, down, maintenance, unknown
    response_time_ms: Optional[int] = None
    maintenance: Optional[str] = None
    last_check: Optional[str] = None


class StatusOverview(BaseModel):
    """Overview data for every configured target."""
    total_targets: int
    targets_up: int
    targets_down: int
    targets_maintenance: int
    targets_unknown: int
    targets: List[TargetSummary]
