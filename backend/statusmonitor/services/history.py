"""History store - per-target status snapshots and month-partitioned check history.

Layout under the api directory:

    <id>/status.json              current status of the target
    <id>/history/YYYY-MM.json     checks completed in that calendar month (UTC)

Partitions only ever grow by appending the newest outcome; once one holds
more than `cap` entries the oldest are dropped.
"""
import json
import logging
import os
import re
import tempfile
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import ValidationError

from ..schemas.outcome import CheckOutcome, HistoryEntry, StatusSnapshot

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_CAP = 4320

_MONTH_RE = re.compile(r"^\d{4}-\d{2}$")


class HistoryStoreError(Exception):
    """A history or snapshot file could not be read or written."""


def month_key(outcome: CheckOutcome) -> str:
    """UTC calendar month of the outcome, e.g. "2026-10"."""
    return outcome.timestamp.astimezone(timezone.utc).strftime("%Y-%m")


class HistoryStore:
    """File-backed store for check history and status snapshots."""

    def __init__(self, root: str, cap: int = DEFAULT_HISTORY_CAP):
        self.root = root
        self.cap = cap

    def target_dir(self, target_id: str) -> str:
        return os.path.join(self.root, target_id)

    def history_dir(self, target_id: str) -> str:
        return os.path.join(self.target_dir(target_id), "history")

    def partition_path(self, target_id: str, month: str) -> str:
        return os.path.join(self.history_dir(target_id), f"{month}.json")

    def snapshot_path(self, target_id: str) -> str:
        return os.path.join(self.target_dir(target_id), "status.json")

    # Reads

    def list_partitions(self, target_id: str) -> List[str]:
        """Month keys (YYYY-MM) with a history file, oldest first."""
        directory = self.history_dir(target_id)
        if not os.path.isdir(directory):
            return []
        months = [
            name[:-5] for name in os.listdir(directory)
            if name.endswith(".json") and _MONTH_RE.match(name[:-5])
        ]
        return sorted(months)

    def read_partition(self, target_id: str, month: str) -> List[CheckOutcome]:
        path = self.partition_path(target_id, month)
        raw = self._load_json(path, default=[])
        if not isinstance(raw, list):
            raise HistoryStoreError(f"History file is not a list: {path}")
        try:
            return [HistoryEntry.model_validate(item).to_outcome(target_id) for item in raw]
        except ValidationError as e:
            raise HistoryStoreError(f"Invalid history entry in {path}: {e}") from e

    def read_all(self, target_id: str) -> List[CheckOutcome]:
        """All recorded outcomes for a target in chronological order."""
        series: List[CheckOutcome] = []
        for month in self.list_partitions(target_id):
            series.extend(self.read_partition(target_id, month))
        return series

    def read_snapshot(self, target_id: str) -> Optional[StatusSnapshot]:
        path = self.snapshot_path(target_id)
        raw = self._load_json(path, default=None)
        if raw is None:
            return None
        try:
            return StatusSnapshot.model_validate(raw)
        except ValidationError as e:
            raise HistoryStoreError(f"Invalid status file {path}: {e}") from e

    # Writes

    def append(self, target_id: str, outcome: CheckOutcome) -> None:
        """Append an outcome to the partition for its calendar month.

        Raises:
            HistoryStoreError: If the outcome is older than the newest entry
                already in that partition
        """
        path = self.partition_path(target_id, month_key(outcome))
        entries = self._appended_entries(path, outcome)
        self._write_json(path, entries)

    def write_snapshot(self, target_id: str, outcome: CheckOutcome) -> None:
        snapshot = StatusSnapshot.from_outcome(outcome)
        self._write_json(self.snapshot_path(target_id), snapshot.model_dump(mode="json"))

    def record(self, target_id: str, outcome: CheckOutcome) -> None:
        """Append to history and overwrite the snapshot as one unit.

        If the snapshot cannot be written the partition is restored to its
        previous contents, so the current status never disagrees with the
        latest history entry.
        """
        path = self.partition_path(target_id, month_key(outcome))
        previous = self._read_bytes(path)
        self.append(target_id, outcome)
        try:
            self.write_snapshot(target_id, outcome)
        except HistoryStoreError:
            self._restore(path, previous)
            raise

    # Helpers

    def _appended_entries(self, path: str, outcome: CheckOutcome) -> list:
        entries = self._load_json(path, default=[])
        if not isinstance(entries, list):
            raise HistoryStoreError(f"History file is not a list: {path}")
        if entries:
            newest = self._entry_timestamp(path, entries[-1])
            if outcome.timestamp < newest:
                raise HistoryStoreError(
                    f"Outcome at {outcome.timestamp.isoformat()} is older than the newest entry "
                    f"({newest.isoformat()}) in {path}"
                )
        entries.append(outcome.to_history_entry())
        if len(entries) > self.cap:
            entries = entries[-self.cap:]
        return entries

    def _entry_timestamp(self, path: str, raw) -> datetime:
        try:
            timestamp = HistoryEntry.model_validate(raw).timestamp
        except ValidationError as e:
            raise HistoryStoreError(f"Invalid history entry in {path}: {e}") from e
        # Hand-edited files may carry naive timestamps; those are UTC
        if timestamp.tzinfo is None:
            return timestamp.replace(tzinfo=timezone.utc)
        return timestamp

    def _load_json(self, path: str, default):
        if not os.path.exists(path):
            return default
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise HistoryStoreError(f"Cannot read {path}: {e}") from e

    def _read_bytes(self, path: str) -> Optional[bytes]:
        if not os.path.exists(path):
            return None
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            raise HistoryStoreError(f"Cannot read {path}: {e}") from e

    def _write_json(self, path: str, data) -> None:
        """Write JSON atomically (temp file in the same directory, then rename)."""
        directory = os.path.dirname(path)
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise HistoryStoreError(f"Cannot write {path}: {e}") from e

    def _restore(self, path: str, previous: Optional[bytes]) -> None:
        try:
            if previous is None:
                if os.path.exists(path):
                    os.unlink(path)
            else:
                with open(path, "wb") as f:
                    f.write(previous)
        except OSError as e:
            logger.error(f"Failed to roll back {path}: {e}")
