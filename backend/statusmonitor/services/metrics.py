"""Metrics derived from a target's check history.

Every function here is pure: it takes a chronologically ordered series of
outcomes and returns a value. Maintenance entries never count towards uptime
or latency.
"""
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from ..schemas.outcome import CheckOutcome, CheckStatus
from ..schemas.status import BucketState, HistoryBucket, TargetMetrics, Trend

UPTIME_PRECISION = 2

TREND_WINDOW = 10
TREND_MIN_SAMPLES = 5
TREND_THRESHOLD = 0.15

HEALTHY_BUCKET_UPTIME = 95.0

RECENT_INCIDENTS_LIMIT = 10

# period -> (number of buckets, bucket unit)
PERIODS: Dict[str, Tuple[int, str]] = {
    "24h": (24, "hour"),
    "72h": (72, "hour"),
    "30d": (30, "day"),
    "60d": (60, "day"),
}


def _active(series: Sequence[CheckOutcome]) -> List[CheckOutcome]:
    return [o for o in series if o.status != CheckStatus.MAINTENANCE]


def uptime_percent(series: Sequence[CheckOutcome], precision: int = UPTIME_PRECISION) -> float:
    """Share of non-maintenance checks that were up; 100 when there are none."""
    active = _active(series)
    if not active:
        return 100.0
    up = sum(1 for o in active if o.status == CheckStatus.UP)
    return round(up / len(active) * 100, precision)


def average_response_time(series: Sequence[CheckOutcome]) -> int:
    active = _active(series)
    if not active:
        return 0
    return int(round(sum(o.response_time_ms for o in active) / len(active)))


def incident_count(series: Sequence[CheckOutcome]) -> int:
    return sum(1 for o in series if o.status == CheckStatus.DOWN)


def last_incident(series: Sequence[CheckOutcome]) -> Optional[CheckOutcome]:
    for outcome in reversed(series):
        if outcome.status == CheckStatus.DOWN:
            return outcome
    return None


def recent_incidents(series: Sequence[CheckOutcome], limit: int = RECENT_INCIDENTS_LIMIT) -> List[CheckOutcome]:
    """Most recent down checks, newest first."""
    incidents: List[CheckOutcome] = []
    for outcome in reversed(series):
        if len(incidents) >= limit:
            break
        if outcome.status == CheckStatus.DOWN:
            incidents.append(outcome)
    return incidents


def calculate_trend(series: Sequence[CheckOutcome], current_ms: float) -> Trend:
    """Compare a current latency against the mean of the last up checks.

    Takes up to the last 10 up checks; with fewer than 5 there is not enough
    signal and the trend is flat. Otherwise a deviation of more than 15% from
    their mean is worse (slower) or better (faster). This is a relative
    deviation heuristic, not a statistical test.
    """
    recent = [o for o in series if o.status == CheckStatus.UP][-TREND_WINDOW:]
    if len(recent) < TREND_MIN_SAMPLES:
        return Trend.FLAT

    avg_recent = sum(o.response_time_ms for o in recent) / len(recent)
    if current_ms > avg_recent * (1 + TREND_THRESHOLD):
        return Trend.WORSE
    if current_ms < avg_recent * (1 - TREND_THRESHOLD):
        return Trend.BETTER
    return Trend.FLAT


def _bucket_state(entries: List[CheckOutcome]) -> Tuple[BucketState, Optional[float]]:
    if not entries:
        return BucketState.UNKNOWN, None
    active = _active(entries)
    if not active:
        return BucketState.MAINTENANCE, None
    uptime = sum(1 for o in active if o.status == CheckStatus.UP) / len(active) * 100
    state = BucketState.HEALTHY if uptime >= HEALTHY_BUCKET_UPTIME else BucketState.UNHEALTHY
    return state, round(uptime, UPTIME_PRECISION)


def bucket_history(
    series: Sequence[CheckOutcome],
    period: str = "60d",
    now: Optional[datetime] = None,
) -> List[HistoryBucket]:
    """Split the series into hourly or daily buckets ending at now, oldest first.

    Periods 24h and 72h use one bucket per hour; 30d and 60d one per day.
    Bucket boundaries are in UTC.
    """
    if period not in PERIODS:
        raise ValueError(f"Unknown period: {period}")
    units, unit = PERIODS[period]

    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    if unit == "hour":
        anchor = now.replace(minute=0, second=0, microsecond=0)
        step = timedelta(hours=1)
    else:
        anchor = now.replace(hour=0, minute=0, second=0, microsecond=0)
        step = timedelta(days=1)

    first = anchor - step * (units - 1)
    end = anchor + step
    grouped: List[List[CheckOutcome]] = [[] for _ in range(units)]
    for outcome in series:
        ts = outcome.timestamp.astimezone(timezone.utc)
        if first <= ts < end:
            grouped[(ts - first) // step].append(outcome)

    buckets = []
    for index, entries in enumerate(grouped):
        start = first + step * index
        state, uptime = _bucket_state(entries)
        buckets.append(HistoryBucket(
            start=start,
            label=start.strftime("%H:00") if unit == "hour" else start.strftime("%Y-%m-%d"),
            state=state,
            checks=len(entries),
            uptime_percent=uptime,
        ))
    return buckets


def summarize(series: Sequence[CheckOutcome], current: Optional[CheckOutcome] = None) -> TargetMetrics:
    """All aggregates for one target.

    The trend compares the current check against the history before it, and
    is flat unless the current check is up.
    """
    baseline = series
    if current is not None and series and series[-1] == current:
        baseline = series[:-1]

    trend = Trend.FLAT
    if current is not None and current.status == CheckStatus.UP:
        trend = calculate_trend(baseline, current.response_time_ms)

    active = _active(series)
    return TargetMetrics(
        uptime_percent=uptime_percent(series),
        checks=len(active),
        up_checks=sum(1 for o in active if o.status == CheckStatus.UP),
        average_response_time_ms=average_response_time(series),
        incident_count=incident_count(series),
        last_incident=last_incident(series),
        recent_incidents=recent_incidents(series),
        trend=trend,
    )
