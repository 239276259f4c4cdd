"""Batch runner - checks every target concurrently and records the results.

A run either returns a result for every target or raises; it never hands
back a partial batch. Expected check failures are already folded into down
outcomes by the checker, so one target going down has no effect on the
others. Storage failures are logged per target and the in-memory result is
still returned.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from ..schemas.outcome import CheckOutcome, CheckStatus, StatusSnapshot, TargetResult
from ..schemas.target import TargetDescriptor
from .alerter import AlerterService, Transition, detect_transition
from .checker import CheckerService
from .history import HistoryStore, HistoryStoreError

logger = logging.getLogger(__name__)

_SYMBOLS = {CheckStatus.UP: "✓", CheckStatus.DOWN: "✗", CheckStatus.MAINTENANCE: "⚠"}


@dataclass
class BatchResult:
    """Everything one run produced, keyed by target id in config order."""
    started_at: datetime
    finished_at: datetime
    results: Dict[str, TargetResult] = field(default_factory=dict)
    transitions: List[Transition] = field(default_factory=list)

    @property
    def up_count(self) -> int:
        return sum(1 for r in self.results.values() if r.outcome.status == CheckStatus.UP)


class BatchRunner:
    """Runs one batch of checks."""

    def __init__(
        self,
        checker: CheckerService,
        store: HistoryStore,
        alerter: Optional[AlerterService] = None,
        max_concurrent: Optional[int] = None,
    ):
        self.checker = checker
        self.store = store
        self.alerter = alerter
        self.max_concurrent = max_concurrent

    async def check_all(self, targets: Sequence[TargetDescriptor]) -> Dict[str, CheckOutcome]:
        """Check every target concurrently."""
        ids = [t.id for t in targets]
        if len(set(ids)) != len(ids):
            raise ValueError("Target ids must be unique within a batch")

        semaphore = asyncio.Semaphore(self.max_concurrent) if self.max_concurrent else None

        async def check_with_limit(target: TargetDescriptor) -> CheckOutcome:
            if semaphore is None:
                return await self.checker.check(target)
            async with semaphore:
                return await self.checker.check(target)

        outcomes = await asyncio.gather(*[check_with_limit(t) for t in targets])
        return dict(zip(ids, outcomes))

    def persist(
        self,
        targets: Sequence[TargetDescriptor],
        outcomes: Dict[str, CheckOutcome],
    ) -> tuple:
        """Record each outcome and collect up/down transitions.

        Returns (results, transitions). A target whose files cannot be
        written keeps its result with persisted=False and yields no
        transition, so the next run still sees the old snapshot.
        """
        results: Dict[str, TargetResult] = {}
        transitions: List[Transition] = []
        for target in targets:
            outcome = outcomes[target.id]
            previous = self._previous_snapshot(target.id)
            persisted = True
            try:
                self.store.record(target.id, outcome)
            except HistoryStoreError as e:
                logger.error(f"Failed to record result for {target.id}: {e}")
                persisted = False

            results[target.id] = TargetResult(target=target, outcome=outcome, persisted=persisted)

            if persisted:
                transition = detect_transition(previous, outcome)
                if transition is not None:
                    transitions.append(transition)
        return results, transitions

    async def run(self, targets: Sequence[TargetDescriptor]) -> BatchResult:
        """Check, persist and notify for one batch."""
        started_at = datetime.now(timezone.utc)
        logger.info(f"Starting status checks for {len(targets)} targets...")

        outcomes = await self.check_all(targets)
        # File I/O runs off the event loop so a serving API stays responsive
        results, transitions = await asyncio.to_thread(self.persist, targets, outcomes)

        if self.alerter is not None and transitions:
            names = {t.id: (t.name, t.endpoint) for t in targets}
            await self.alerter.notify(transitions, names)

        batch = BatchResult(
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
            results=results,
            transitions=transitions,
        )
        self._log_summary(batch)
        return batch

    def _previous_snapshot(self, target_id: str) -> Optional[StatusSnapshot]:
        try:
            return self.store.read_snapshot(target_id)
        except HistoryStoreError as e:
            logger.warning(f"Ignoring unreadable status for {target_id}: {e}")
            return None

    def _log_summary(self, batch: BatchResult) -> None:
        for result in batch.results.values():
            outcome = result.outcome
            logger.debug(
                f"{_SYMBOLS[outcome.status]} {result.target.name}: {outcome.status.value} "
                f"({outcome.response_time_ms}ms)"
                + (f" - {outcome.error}" if outcome.error else "")
            )
        logger.info(
            f"Checks complete: {batch.up_count}/{len(batch.results)} up, "
            f"{len(batch.transitions)} transitions"
        )
