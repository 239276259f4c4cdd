"""Tests for the bounded retry helper."""

import pytest

from statusmonitor.utils.retry import retry_async


class _Attempts:
    def __init__(self, results: list[bool]) -> None:
        self.results = list(results)
        self.calls = 0

    async def __call__(self) -> bool:
        self.calls += 1
        return self.results.pop(0)


class TestRetryAsync:
    @pytest.mark.asyncio
    async def test_stops_at_first_success(self) -> None:
        attempts = _Attempts([False, True, True])
        delays: list[float] = []

        async def sleep(delay: float) -> None:
            delays.append(delay)

        result = await retry_async(attempts, is_retryable=lambda ok: not ok, max_attempts=3, delay=1.0, sleep=sleep)

        assert result is True
        assert attempts.calls == 2
        assert delays == [1.0]

    @pytest.mark.asyncio
    async def test_returns_last_result_when_exhausted(self) -> None:
        attempts = _Attempts([False, False, False])

        async def sleep(delay: float) -> None:
            pass

        result = await retry_async(attempts, is_retryable=lambda ok: not ok, max_attempts=3, delay=2.0, sleep=sleep)

        assert result is False
        assert attempts.calls == 3

    @pytest.mark.asyncio
    async def test_single_attempt_never_sleeps(self) -> None:
        attempts = _Attempts([False])

        async def sleep(delay: float) -> None:
            raise AssertionError("should not sleep")

        result = await retry_async(attempts, is_retryable=lambda ok: not ok, max_attempts=1, sleep=sleep)

        assert result is False

    @pytest.mark.asyncio
    async def test_rejects_zero_attempts(self) -> None:
        with pytest.raises(ValueError):
            await retry_async(_Attempts([True]), is_retryable=lambda ok: not ok, max_attempts=0)
