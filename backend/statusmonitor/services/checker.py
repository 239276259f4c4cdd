"""Checker service - performs HTTP, TCP, and DNS checks with retries."""
import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Optional, Type

import dns.asyncresolver
import dns.exception
import httpx

from ..schemas.outcome import CheckOutcome, CheckStatus
from ..schemas.target import DnsTarget, HttpTarget, TargetDescriptor, TcpTarget
from ..utils.retry import retry_async

logger = logging.getLogger(__name__)

USER_AGENT = "Status-Monitor/1.0"

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_SECONDS = 2.0


@dataclass
class AttemptResult:
    """Result of a single check attempt."""
    ok: bool
    status_code: Optional[int] = None
    error: Optional[str] = None

    def __str__(self) -> str:
        if self.ok:
            return "ok"
        if self.error:
            return self.error
        return f"HTTP {self.status_code}"


def _describe(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


class CheckerService:
    """Runs one check per target and normalizes every expected failure into a down outcome."""

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self._sleep = sleep
        self._checks: Dict[Type, Callable[..., Awaitable[AttemptResult]]] = {
            HttpTarget: self._attempt_http,
            TcpTarget: self._attempt_tcp,
            DnsTarget: self._attempt_dns,
        }

    async def check(self, target: TargetDescriptor) -> CheckOutcome:
        """Produce exactly one outcome for a target.

        Targets under maintenance are never checked. For everything else the
        response time spans the first attempt through the last one, retry
        delays included.
        """
        if target.maintenance:
            logger.debug(f"Skipping {target.id}: under maintenance ({target.maintenance})")
            return self.maintenance_outcome(target)

        attempt = self._checks.get(type(target))
        if attempt is None:
            raise TypeError(f"No check for target kind: {type(target).__name__}")

        logger.debug(f"Checking {target.kind.upper()} {target.endpoint}...")

        start = time.monotonic()
        result = await retry_async(
            lambda: attempt(target),
            is_retryable=lambda r: not r.ok,
            max_attempts=self.max_attempts,
            delay=self.retry_delay,
            label=target.name,
            sleep=self._sleep,
        )
        response_time = int((time.monotonic() - start) * 1000)

        if result.ok:
            return CheckOutcome(
                target_id=target.id,
                status=CheckStatus.UP,
                status_code=result.status_code,
                response_time_ms=response_time,
                timestamp=datetime.now(timezone.utc),
            )
        return CheckOutcome(
            target_id=target.id,
            status=CheckStatus.DOWN,
            status_code=result.status_code,
            response_time_ms=response_time,
            timestamp=datetime.now(timezone.utc),
            error=result.error,
        )

    @staticmethod
    def maintenance_outcome(target: TargetDescriptor) -> CheckOutcome:
        return CheckOutcome(
            target_id=target.id,
            status=CheckStatus.MAINTENANCE,
            timestamp=datetime.now(timezone.utc),
        )

    async def _attempt_http(self, target: HttpTarget) -> AttemptResult:
        """Perform one HTTP request.

        A response whose status differs from the expected one is a failed
        attempt that still records the status code, with no error message.
        """
        timeout = target.timeout_ms / 1000
        try:
            async with httpx.AsyncClient(timeout=timeout, follow_redirects=target.follow_redirects) as client:
                response = await asyncio.wait_for(
                    client.request(target.method, target.url, headers={"User-Agent": USER_AGENT}),
                    timeout=timeout,
                )
        except (httpx.TimeoutException, asyncio.TimeoutError):
            return AttemptResult(ok=False, error=f"Request timeout after {target.timeout_ms}ms")
        except httpx.HTTPError as e:
            return AttemptResult(ok=False, error=_describe(e))

        if response.status_code != target.expected_status_code:
            return AttemptResult(ok=False, status_code=response.status_code)
        return AttemptResult(ok=True, status_code=response.status_code)

    async def _attempt_tcp(self, target: TcpTarget) -> AttemptResult:
        """Open a TCP connection and close it straight away."""
        timeout = target.timeout_ms / 1000
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(target.host, target.port),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            return AttemptResult(ok=False, error="Connection timeout")
        except OSError as e:
            return AttemptResult(ok=False, error=_describe(e))

        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            # The connection was established; a failed close does not change that.
            logger.debug(f"Error closing connection to {target.endpoint}: {e}")
        return AttemptResult(ok=True)

    async def _attempt_dns(self, target: DnsTarget) -> AttemptResult:
        """Resolve the domain; any answer counts as up."""
        timeout = target.timeout_ms / 1000
        try:
            await self._resolve(target.domain, timeout)
        except dns.exception.Timeout:
            return AttemptResult(ok=False, error=f"DNS timeout resolving {target.domain}")
        except dns.exception.DNSException as e:
            return AttemptResult(ok=False, error=_describe(e))
        return AttemptResult(ok=True)

    async def _resolve(self, domain: str, timeout: float):
        resolver = dns.asyncresolver.Resolver()
        resolver.lifetime = timeout
        return await resolver.resolve(domain, "A")
