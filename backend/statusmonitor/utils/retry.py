"""Retry helpers for check attempts."""
import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


async def retry_async(
    attempt_func: Callable[[], Awaitable[T]],
    is_retryable: Callable[[T], bool],
    max_attempts: int = 3,
    delay: float = 2.0,
    label: Optional[str] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run an attempt up to max_attempts times with a fixed delay between attempts.

    Attempts report failure through their return value rather than by raising,
    so the last attempt's result is always returned to the caller. Only the
    intermediate failures are logged.

    Args:
        attempt_func: Async function performing a single attempt
        is_retryable: Predicate deciding whether a result warrants another attempt
        max_attempts: Total number of attempts, including the first
        delay: Seconds to wait between attempts
        label: Name used in log messages
        sleep: Awaitable used for the delay

    Returns:
        The result of the first non-retryable attempt, or of the final attempt
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    result = await attempt_func()
    for attempt in range(1, max_attempts):
        if not is_retryable(result):
            break
        logger.warning(f"Retry {attempt}/{max_attempts - 1} for {label or 'check'} after {delay}s: {result}")
        await sleep(delay)
        result = await attempt_func()
    return result
