"""Tests for the batch runner."""

import asyncio
import threading
from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest

from statusmonitor.config import Settings
from statusmonitor.schemas.outcome import CheckOutcome, CheckStatus
from statusmonitor.schemas.target import HttpTarget, TcpTarget
from statusmonitor.services.alerter import AlerterService
from statusmonitor.services.checker import CheckerService
from statusmonitor.services.history import HistoryStore, HistoryStoreError
from statusmonitor.services.monitor import MonitorService
from statusmonitor.services.runner import BatchRunner

BASE_TIME = datetime(2026, 10, 18, 12, 30, tzinfo=timezone.utc)


def _targets(*ids: str) -> list[HttpTarget]:
    return [HttpTarget(id=i, name=i.title(), url=f"https://{i}.test") for i in ids]


class _FakeChecker(CheckerService):
    """Returns scripted statuses and tracks how many checks run at once."""

    def __init__(self, statuses: dict[str, str], delay: float = 0.0) -> None:
        super().__init__()
        self.statuses = statuses
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0

    async def check(self, target: Any) -> CheckOutcome:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        status = CheckStatus(self.statuses.get(target.id, "up"))
        return CheckOutcome(
            target_id=target.id,
            status=status,
            status_code=200 if status == CheckStatus.UP else None,
            response_time_ms=0 if status == CheckStatus.MAINTENANCE else 42,
            timestamp=BASE_TIME,
            error="Connection refused" if status == CheckStatus.DOWN else None,
        )


class TestBatchRunner:
    @pytest.mark.asyncio
    async def test_every_target_gets_a_result(self, tmp_path: Any) -> None:
        store = HistoryStore(str(tmp_path))
        runner = BatchRunner(_FakeChecker({"b": "down", "c": "maintenance"}), store)

        batch = await runner.run(_targets("a", "b", "c"))

        assert list(batch.results) == ["a", "b", "c"]
        assert batch.results["a"].outcome.status == CheckStatus.UP
        assert batch.results["b"].outcome.status == CheckStatus.DOWN
        assert batch.results["c"].outcome.status == CheckStatus.MAINTENANCE
        assert batch.up_count == 1
        for target_id in ("a", "b", "c"):
            assert len(store.read_all(target_id)) == 1
            assert store.read_snapshot(target_id) is not None

    @pytest.mark.asyncio
    async def test_checks_run_concurrently(self, tmp_path: Any) -> None:
        checker = _FakeChecker({}, delay=0.05)
        runner = BatchRunner(checker, HistoryStore(str(tmp_path)))

        await runner.run(_targets("a", "b", "c", "d"))

        assert checker.max_in_flight == 4

    @pytest.mark.asyncio
    async def test_concurrency_limit(self, tmp_path: Any) -> None:
        checker = _FakeChecker({}, delay=0.02)
        runner = BatchRunner(checker, HistoryStore(str(tmp_path)), max_concurrent=2)

        batch = await runner.run(_targets("a", "b", "c", "d", "e"))

        assert checker.max_in_flight == 2
        assert len(batch.results) == 5

    @pytest.mark.asyncio
    async def test_duplicate_ids_rejected(self, tmp_path: Any) -> None:
        runner = BatchRunner(_FakeChecker({}), HistoryStore(str(tmp_path)))
        targets = _targets("a") + [TcpTarget(id="a", name="A", host="a.test", port=80)]

        with pytest.raises(ValueError):
            await runner.run(targets)

    @pytest.mark.asyncio
    async def test_unexpected_error_aborts_without_writes(self, tmp_path: Any) -> None:
        store = HistoryStore(str(tmp_path))

        class _Broken(_FakeChecker):
            async def check(self, target: Any) -> CheckOutcome:
                if target.id == "b":
                    raise RuntimeError("bug")
                return await super().check(target)

        runner = BatchRunner(_Broken({}), store)

        with pytest.raises(RuntimeError):
            await runner.run(_targets("a", "b"))

        assert store.read_all("a") == []
        assert store.read_snapshot("a") is None

    @pytest.mark.asyncio
    async def test_storage_failure_keeps_result(self, tmp_path: Any) -> None:
        store = HistoryStore(str(tmp_path))
        original_record = store.record

        def record(target_id: str, outcome: CheckOutcome) -> None:
            if target_id == "b":
                raise HistoryStoreError("disk full")
            original_record(target_id, outcome)

        runner = BatchRunner(_FakeChecker({"b": "down"}), store)
        with patch.object(store, "record", side_effect=record):
            batch = await runner.run(_targets("a", "b"))

        assert batch.results["a"].persisted is True
        assert batch.results["b"].persisted is False
        assert batch.results["b"].outcome.status == CheckStatus.DOWN
        assert store.read_all("b") == []

    @pytest.mark.asyncio
    async def test_transitions_reported_to_alerter(self, tmp_path: Any, make_outcome: Any) -> None:
        store = HistoryStore(str(tmp_path))
        earlier = BASE_TIME - timedelta(minutes=10)
        store.record("a", make_outcome("up", target_id="a", timestamp=earlier))
        store.record("b", make_outcome("down", target_id="b", timestamp=earlier))
        store.record("c", make_outcome("up", target_id="c", timestamp=earlier))

        alerter = AlerterService()
        alerter.notify = AsyncMock(return_value=0)  # type: ignore[method-assign]
        runner = BatchRunner(_FakeChecker({"a": "down", "b": "up", "c": "up"}), store, alerter=alerter)

        batch = await runner.run(_targets("a", "b", "c"))

        events = {t.target_id: t.event for t in batch.transitions}
        assert events == {"a": "down", "b": "restored"}
        alerter.notify.assert_awaited_once()
        names = alerter.notify.await_args.args[1]
        assert names["a"] == ("A", "https://a.test")

    @pytest.mark.asyncio
    async def test_unpersisted_result_has_no_transition(self, tmp_path: Any, make_outcome: Any) -> None:
        store = HistoryStore(str(tmp_path))
        store.record("a", make_outcome("up", target_id="a", timestamp=BASE_TIME - timedelta(minutes=10)))
        runner = BatchRunner(_FakeChecker({"a": "down"}), store)

        with patch.object(store, "record", side_effect=HistoryStoreError("disk full")):
            batch = await runner.run(_targets("a"))

        assert batch.transitions == []
        snapshot = store.read_snapshot("a")
        assert snapshot is not None
        assert snapshot.status == CheckStatus.UP

    @pytest.mark.asyncio
    async def test_corrupt_snapshot_treated_as_first_check(self, tmp_path: Any) -> None:
        store = HistoryStore(str(tmp_path))
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "status.json").write_text("{broken")
        runner = BatchRunner(_FakeChecker({"a": "down"}), store)

        batch = await runner.run(_targets("a"))

        assert batch.transitions == []
        assert batch.results["a"].persisted is True

    @pytest.mark.asyncio
    async def test_empty_batch(self, tmp_path: Any) -> None:
        batch = await BatchRunner(_FakeChecker({}), HistoryStore(str(tmp_path))).run([])
        assert batch.results == {}

    @pytest.mark.asyncio
    async def test_files_written_off_the_event_loop(self, tmp_path: Any) -> None:
        store = HistoryStore(str(tmp_path))
        loop_thread = threading.get_ident()
        writer_threads: list[int] = []
        record = store.record

        def _record(target_id: str, outcome: CheckOutcome) -> None:
            writer_threads.append(threading.get_ident())
            record(target_id, outcome)

        with patch.object(store, "record", side_effect=_record):
            batch = await BatchRunner(_FakeChecker({}), store).run(_targets("a", "b"))

        assert batch.results["a"].persisted is True
        assert len(writer_threads) == 2
        assert loop_thread not in writer_threads

    @pytest.mark.asyncio
    async def test_outcome_older_than_history_not_persisted(self, tmp_path: Any, make_outcome: Any) -> None:
        store = HistoryStore(str(tmp_path))
        store.record("a", make_outcome("down", target_id="a", timestamp=BASE_TIME + timedelta(hours=1)))

        batch = await BatchRunner(_FakeChecker({}), store).run(_targets("a"))

        assert batch.results["a"].persisted is False
        assert batch.transitions == []
        assert [o.status for o in store.read_all("a")] == [CheckStatus.DOWN]


class TestMonitorService:
    @pytest.mark.asyncio
    async def test_site_rendered_off_the_event_loop(self, tmp_path: Any) -> None:
        (tmp_path / "config.yml").write_text("checks:\n  - name: A\n    url: https://a.test\n")
        settings = Settings(
            config_path=str(tmp_path / "config.yml"),
            data_path=str(tmp_path / "data"),
            site_path=str(tmp_path / "site"),
        )
        monitor = MonitorService(settings)
        monitor.checker = _FakeChecker({})
        monitor.runner.checker = monitor.checker
        loop_thread = threading.get_ident()
        render_threads: list[int] = []

        def _generate(*args: Any, **kwargs: Any) -> list[str]:
            render_threads.append(threading.get_ident())
            return []

        with patch.object(monitor.site, "generate", side_effect=_generate):
            batch = await monitor.run_once()

        assert list(batch.results) == ["a"]
        assert len(render_threads) == 1
        assert render_threads[0] != loop_thread
