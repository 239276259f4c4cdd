"""Alerter service - detects up/down transitions and hands them to a webhook."""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

import httpx

from ..schemas.outcome import CheckOutcome, CheckStatus, StatusSnapshot

logger = logging.getLogger(__name__)

WEBHOOK_TIMEOUT_SECONDS = 10


@dataclass(frozen=True)
class Transition:
    """A target went from up to down or from down to up."""
    target_id: str
    previous: CheckStatus
    current: CheckStatus
    timestamp: datetime
    error: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def event(self) -> str:
        return "down" if self.current == CheckStatus.DOWN else "restored"

    def to_payload(self, name: Optional[str] = None, endpoint: Optional[str] = None) -> dict:
        return {
            "target": self.target_id,
            "name": name or self.target_id,
            "endpoint": endpoint,
            "event": self.event,
            "previous": self.previous.value,
            "status": self.current.value,
            "error": self.error,
            "statusCode": self.status_code,
            "timestamp": self.timestamp.isoformat(),
        }


def detect_transition(previous: Optional[StatusSnapshot], outcome: CheckOutcome) -> Optional[Transition]:
    """Diff the previous snapshot against the new outcome.

    Only up->down and down->up count. A first check, or maintenance on either
    side, never produces a transition.
    """
    if previous is None:
        return None
    pair = (previous.status, outcome.status)
    if pair not in ((CheckStatus.UP, CheckStatus.DOWN), (CheckStatus.DOWN, CheckStatus.UP)):
        return None
    return Transition(
        target_id=outcome.target_id,
        previous=previous.status,
        current=outcome.status,
        timestamp=outcome.timestamp,
        error=outcome.error,
        status_code=outcome.status_code,
    )


class AlerterService:
    """Posts transitions to an external notifier."""

    def __init__(self, webhook_url: Optional[str] = None):
        self.webhook_url = webhook_url

    async def notify(self, transitions: Iterable[Transition], names: Optional[dict] = None) -> int:
        """Send each transition; returns how many were delivered."""
        names = names or {}
        delivered = 0
        for transition in transitions:
            logger.info(
                f"{transition.target_id}: {transition.previous.value} -> {transition.current.value}"
                + (f" ({transition.error})" if transition.error else "")
            )
            if not self.webhook_url:
                continue
            name, endpoint = names.get(transition.target_id, (None, None))
            if await self._send_webhook(self.webhook_url, transition.to_payload(name, endpoint)):
                delivered += 1
        return delivered

    async def _send_webhook(self, url: str, payload: dict) -> bool:
        """Send a webhook POST request."""
        try:
            async with httpx.AsyncClient(timeout=WEBHOOK_TIMEOUT_SECONDS) as client:
                response = await client.post(
                    url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
        except httpx.HTTPError as e:
            logger.error(f"Failed to send webhook: {e}")
            return False

        if response.status_code < 400:
            logger.info(f"Webhook sent: {payload['event']} for {payload['name']}")
            return True
        logger.warning(f"Webhook returned {response.status_code}")
        return False
