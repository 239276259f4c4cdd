"""Check outcome schemas - check results and their on-disk forms."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .target import TargetDescriptor


class CheckStatus(str, Enum):
    UP = "up"
    DOWN = "down"
    MAINTENANCE = "maintenance"


class CheckOutcome(BaseModel):
    """Result of one attempt sequence (after retries) for one target."""

    model_config = ConfigDict(frozen=True)

    target_id: str
    status: CheckStatus
    status_code: Optional[int] = None  # HTTP only
    response_time_ms: int = Field(default=0, ge=0)
    timestamp: datetime  # Completion instant, timezone-aware
    error: Optional[str] = None

    @field_validator("timestamp")
    @classmethod
    def _require_timezone(cls, value: datetime) -> datetime:
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("timestamp must be timezone-aware")
        return value

    @model_validator(mode="after")
    def _check_status_fields(self) -> "CheckOutcome":
        if self.status == CheckStatus.MAINTENANCE:
            if self.status_code is not None or self.error is not None or self.response_time_ms != 0:
                raise ValueError(
                    "maintenance outcomes carry no status code, error or response time"
                )
        if self.status == CheckStatus.UP and self.error is not None:
            raise ValueError("up outcomes carry no error")
        return self

    def to_history_entry(self) -> dict:
        """Serialize for a monthly history file (the file is already scoped to one target)."""
        return HistoryEntry(
            timestamp=self.timestamp,
            status=self.status,
            statusCode=self.status_code,
            responseTime=self.response_time_ms,
            error=self.error,
        ).model_dump(mode="json")


class HistoryEntry(BaseModel):
    """One element of api/<id>/history/YYYY-MM.json."""

    timestamp: datetime
    status: CheckStatus
    statusCode: Optional[int] = None
    responseTime: int = 0
    error: Optional[str] = None

    def to_outcome(self, target_id: str) -> CheckOutcome:
        return CheckOutcome(
            target_id=target_id,
            status=self.status,
            status_code=self.statusCode,
            response_time_ms=self.responseTime,
            timestamp=self.timestamp,
            error=self.error,
        )


class StatusSnapshot(BaseModel):
    """Contents of api/<id>/status.json - the current status of one target."""

    lastCheck: datetime
    status: CheckStatus
    statusCode: Optional[int] = None
    responseTime: int = 0
    timestamp: datetime
    error: Optional[str] = None

    @classmethod
    def from_outcome(cls, outcome: CheckOutcome, last_check: Optional[datetime] = None) -> "StatusSnapshot":
        return cls(
            lastCheck=last_check or outcome.timestamp,
            status=outcome.status,
            statusCode=outcome.status_code,
            responseTime=outcome.response_time_ms,
            timestamp=outcome.timestamp,
            error=outcome.error,
        )

    def to_outcome(self, target_id: str) -> CheckOutcome:
        return CheckOutcome(
            target_id=target_id,
            status=self.status,
            status_code=self.statusCode,
            response_time_ms=self.responseTime,
            timestamp=self.timestamp,
            error=self.error,
        )


class TargetResult(BaseModel):
    """A target's outcome for the current run, as handed to renderers."""

    model_config = ConfigDict(frozen=True)

    target: TargetDescriptor
    outcome: CheckOutcome
    persisted: bool = True  # False when the history store rejected the write

    @property
    def maintenance_reason(self) -> Optional[str]:
        return self.target.maintenance if self.outcome.status == CheckStatus.MAINTENANCE else None
