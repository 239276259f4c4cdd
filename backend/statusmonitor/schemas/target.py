"""Target descriptor schemas - one normalized monitored endpoint."""
import re
from typing import Annotated, Literal, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

DEFAULT_TIMEOUT_MS = 10000

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """Derive a stable target id from a display name.

    Lowercases and collapses every run of non-alphanumeric characters into a
    single hyphen, e.g. "My API (prod)" -> "my-api-prod".
    """
    return _SLUG_RE.sub("-", name.lower()).strip("-")


class _TargetBase(BaseModel):
    """Fields shared by every target kind."""

    model_config = ConfigDict(frozen=True)

    # Join key between config, api/<id>/ files and page links
    id: str = Field(..., min_length=1, pattern=r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
    name: str = Field(..., min_length=1)
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)
    maintenance: Optional[str] = None  # Reason shown on status pages

    @property
    def endpoint(self) -> str:
        raise NotImplementedError


class HttpTarget(_TargetBase):
    """HTTP(S) endpoint; up iff the response status equals expected_status_code."""

    kind: Literal["http"] = "http"
    url: str = Field(..., min_length=1)
    method: str = "GET"
    expected_status_code: int = Field(default=200, ge=100, le=599)
    follow_redirects: bool = True

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        """Reject URLs the HTTP client could not request."""
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as e:
            raise ValueError(f"invalid URL: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError("URL must be absolute http:// or https://")
        return value

    @property
    def endpoint(self) -> str:
        return self.url


class TcpTarget(_TargetBase):
    """Raw TCP endpoint; up iff a connection can be established."""

    kind: Literal["tcp"] = "tcp"
    host: str = Field(..., min_length=1)
    port: int = Field(..., ge=1, le=65535)

    @property
    def endpoint(self) -> str:
        return f"{self.host}:{self.port}"


class DnsTarget(_TargetBase):
    """DNS name; up iff it resolves."""

    kind: Literal["dns"] = "dns"
    domain: str = Field(..., min_length=1)

    @property
    def endpoint(self) -> str:
        return self.domain


TargetDescriptor = Annotated[
    Union[HttpTarget, TcpTarget, DnsTarget],
    Field(discriminator="kind"),
]

target_adapter: TypeAdapter[TargetDescriptor] = TypeAdapter(TargetDescriptor)
