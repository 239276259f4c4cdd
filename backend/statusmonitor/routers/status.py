"""Status API - read-only JSON views of the recorded checks."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response

from ..render.graphics import render_badge
from ..schemas.outcome import CheckStatus, HistoryEntry, StatusSnapshot
from ..schemas.status import StatusOverview, TargetMetrics, TargetSummary
from ..schemas.target import TargetDescriptor
from ..services.config_loader import ConfigError, MonitorConfig
from ..services.history import HistoryStoreError
from ..services.metrics import summarize
from ..services.monitor import MonitorService

router = APIRouter(tags=["status"])


def get_monitor(request: Request) -> MonitorService:
    """Dependency to get the monitor service attached to the app."""
    return request.app.state.monitor


def _config(monitor: MonitorService) -> MonitorConfig:
    if monitor.last_config is not None:
        return monitor.last_config
    try:
        return monitor.load_config()
    except ConfigError as e:
        raise HTTPException(status_code=503, detail=str(e))


def _target(monitor: MonitorService, target_id: str) -> TargetDescriptor:
    for target in _config(monitor).targets:
        if target.id == target_id:
            return target
    raise HTTPException(status_code=404, detail=f"Unknown target: {target_id}")


def _storage_error(e: HistoryStoreError) -> HTTPException:
    return HTTPException(status_code=500, detail=str(e))


@router.get("/api/status", response_model=StatusOverview)
async def get_status_overview(monitor: MonitorService = Depends(get_monitor)):
    """Current status of every configured target."""
    summaries = []
    counts = {"up": 0, "down": 0, "maintenance": 0, "unknown": 0}

    for target in _config(monitor).targets:
        try:
            snapshot = monitor.store.read_snapshot(target.id)
        except HistoryStoreError:
            snapshot = None
        status = snapshot.status.value if snapshot else "unknown"
        counts[status] += 1

        summaries.append(TargetSummary(
            id=target.id,
            name=target.name,
            kind=target.kind,
            endpoint=target.endpoint,
            status=status,
            response_time_ms=snapshot.responseTime if snapshot else None,
            maintenance=target.maintenance,
            last_check=snapshot.lastCheck.isoformat() if snapshot else None,
        ))

    return StatusOverview(
        total_targets=len(summaries),
        targets_up=counts["up"],
        targets_down=counts["down"],
        targets_maintenance=counts["maintenance"],
        targets_unknown=counts["unknown"],
        targets=summaries,
    )


@router.get("/api/targets/{target_id}/status", response_model=StatusSnapshot)
async def get_target_status(target_id: str, monitor: MonitorService = Depends(get_monitor)):
    _target(monitor, target_id)
    try:
        snapshot = monitor.store.read_snapshot(target_id)
    except HistoryStoreError as e:
        raise _storage_error(e)
    if snapshot is None:
        raise HTTPException(status_code=404, detail=f"No checks recorded for {target_id}")
    return snapshot


@router.get("/api/targets/{target_id}/history", response_model=List[HistoryEntry])
async def get_target_history(target_id: str, monitor: MonitorService = Depends(get_monitor)):
    """Every recorded check, oldest first."""
    _target(monitor, target_id)
    try:
        series = monitor.store.read_all(target_id)
    except HistoryStoreError as e:
        raise _storage_error(e)
    return [o.to_history_entry() for o in series]


@router.get("/api/targets/{target_id}/history/{month}", response_model=List[HistoryEntry])
async def get_target_history_month(target_id: str, month: str, monitor: MonitorService = Depends(get_monitor)):
    """Checks from one calendar month (YYYY-MM)."""
    _target(monitor, target_id)
    if month not in monitor.store.list_partitions(target_id):
        raise HTTPException(status_code=404, detail=f"No history for {target_id} in {month}")
    try:
        series = monitor.store.read_partition(target_id, month)
    except HistoryStoreError as e:
        raise _storage_error(e)
    return [o.to_history_entry() for o in series]


@router.get("/api/targets/{target_id}/metrics", response_model=TargetMetrics)
async def get_target_metrics(target_id: str, monitor: MonitorService = Depends(get_monitor)):
    """Uptime, latency, incidents and trend for one target."""
    _target(monitor, target_id)
    try:
        series = monitor.store.read_all(target_id)
    except HistoryStoreError as e:
        raise _storage_error(e)
    return summarize(series, series[-1] if series else None)


@router.get("/badge/{target_id}.svg")
async def get_badge(target_id: str, monitor: MonitorService = Depends(get_monitor)):
    target = _target(monitor, target_id)
    try:
        snapshot = monitor.store.read_snapshot(target_id)
    except HistoryStoreError:
        snapshot = None
    status = snapshot.status.value if snapshot else "unknown"
    if target.maintenance:
        status = CheckStatus.MAINTENANCE.value
    return Response(content=render_badge(target.name, status), media_type="image/svg+xml")
