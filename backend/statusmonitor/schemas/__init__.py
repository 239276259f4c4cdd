"""Pydantic schemas for targets, outcomes and status views."""
from .target import (
    DnsTarget,
    HttpTarget,
    TargetDescriptor,
    TcpTarget,
    slugify,
)
from .outcome import (
    CheckOutcome,
    CheckStatus,
    HistoryEntry,
    StatusSnapshot,
    TargetResult,
)
from .status import (
    BucketState,
    HistoryBucket,
    StatusOverview,
    TargetMetrics,
    TargetSummary,
    Trend,
)

__all__ = [
    "DnsTarget",
    "HttpTarget",
    "TargetDescriptor",
    "TcpTarget",
    "slugify",
    "CheckOutcome",
    "CheckStatus",
    "HistoryEntry",
    "StatusSnapshot",
    "TargetResult",
    "BucketState",
    "HistoryBucket",
    "StatusOverview",
    "TargetMetrics",
    "TargetSummary",
    "Trend",
]
