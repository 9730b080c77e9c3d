"""
Pydantic models for the Amplitude ingestion transport.

Wire fields are snake_case and map one-to-one onto the attribute names
below, so no aliases are needed for the response bodies.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, Literal, Mapping

from pydantic import BaseModel, Field, field_validator, model_validator


# ============================================================
#  Endpoints
# ============================================================


API_URL = "https://api2.amplitude.com/2/httpapi"
BATCH_API_URL = "https://api2.amplitude.com/batch"

# Applied to both the connect and the read phase of every call.
NETWORK_TIMEOUT_SECONDS = 10.0

# Reported when no HTTP response could be obtained at all.
TRANSPORT_FAILURE_CODE = 408


class HttpCallMode(str, Enum):
    """Which ingestion endpoint a call targets."""

    REGULAR = "regular"
    BATCH = "batch"


def endpoint_for(mode: HttpCallMode) -> str:
    """Return the fixed absolute URL for an endpoint mode."""
    if mode is HttpCallMode.BATCH:
        return BATCH_API_URL
    return API_URL


# ============================================================
#  Configuration
# ============================================================


def _freeze_headers(headers: Mapping[str, str]) -> Mapping[str, str]:
    """Check that headers can go on the wire and return a read-only view."""
    for name, value in headers.items():
        for part in (name, value):
            if not part.isascii() or "\r" in part or "\n" in part:
                raise ValueError(f"Header {name!r} must be single-line ASCII")
    return MappingProxyType(dict(headers))


class Options(BaseModel):
    """Per-client request options."""

    headers: Mapping[str, str] = Field(default_factory=dict, validate_default=True)
    min_id_length: int | None = Field(None, gt=0)

    model_config = {"frozen": True}

    @field_validator("headers")
    @classmethod
    def _check_headers(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return _freeze_headers(value)

    def add_header(self, name: str, value: str) -> Options:
        """Return a copy with one more extra header."""
        return Options(headers={**self.headers, name: value}, min_id_length=self.min_id_length)

    def payload_options(self) -> dict[str, Any]:
        """The ``options`` object sent alongside the events, if any."""
        if self.min_id_length is None:
            return {}
        return {"min_id_length": self.min_id_length}


class Proxy(BaseModel):
    """A network proxy. Use ``None`` wherever a direct connection is wanted."""

    host: str
    port: int = Field(gt=0, lt=65536)
    scheme: Literal["http", "https"] = "http"

    model_config = {"frozen": True}

    @property
    def url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"


class ConnectionOptions(BaseModel):
    """Everything a connector needs to open one outbound connection."""

    url: str
    method: str = "POST"
    headers: Mapping[str, str]
    connect_timeout: float = NETWORK_TIMEOUT_SECONDS
    read_timeout: float = NETWORK_TIMEOUT_SECONDS
    proxy: Proxy | None = None

    model_config = {"frozen": True}

    @field_validator("headers")
    @classmethod
    def _check_headers(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return _freeze_headers(value)

    @property
    def using_proxy(self) -> bool:
        return self.proxy is not None


# ============================================================
#  Response
# ============================================================


class Status(str, Enum):
    """Outcome of a single ingestion request."""

    SUCCESS = "success"
    INVALID = "invalid"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    RATELIMIT = "ratelimit"
    TIMEOUT = "timeout"


class SuccessBody(BaseModel):
    """Body of a 200 response."""

    events_ingested: int
    payload_size_bytes: int
    # Epoch milliseconds.
    server_upload_time: int

    model_config = {"frozen": True, "strict": True}


def _null_as_empty(value: Any, empty: type) -> Any:
    return empty() if value is None else value


class InvalidRequestBody(BaseModel):
    """Body of a 400 response that is not an invalid API key."""

    missing_field: str | None = None
    events_with_invalid_fields: dict[str, list[int]] = Field(default_factory=dict)
    events_with_missing_fields: dict[str, list[int]] = Field(default_factory=dict)

    model_config = {"frozen": True, "strict": True}

    @field_validator("events_with_invalid_fields", "events_with_missing_fields", mode="before")
    @classmethod
    def _null_fields(cls, value: Any) -> Any:
        return _null_as_empty(value, dict)


class RateLimitBody(BaseModel):
    """Body of a 429 response."""

    eps_threshold: int | None = None
    throttled_devices: dict[str, int] = Field(default_factory=dict)
    throttled_users: dict[str, int] = Field(default_factory=dict)
    # Indices into the submitted batch, in server order.
    throttled_events: list[int] = Field(default_factory=list)

    model_config = {"frozen": True, "strict": True}

    @field_validator("throttled_devices", "throttled_users", mode="before")
    @classmethod
    def _null_maps(cls, value: Any) -> Any:
        return _null_as_empty(value, dict)

    @field_validator("throttled_events", mode="before")
    @classmethod
    def _null_events(cls, value: Any) -> Any:
        return _null_as_empty(value, list)


_BODY_FOR_STATUS = {
    Status.SUCCESS: "success_body",
    Status.INVALID: "invalid_request_body",
    Status.RATELIMIT: "rate_limit_body",
}


class Response(BaseModel):
    """Classified result of one request.

    At most one of the three bodies is set, and only the one that
    belongs to ``status``. ``PAYLOAD_TOO_LARGE`` and ``TIMEOUT`` carry
    no body.
    """

    code: int
    status: Status
    success_body: SuccessBody | None = None
    invalid_request_body: InvalidRequestBody | None = None
    rate_limit_body: RateLimitBody | None = None
    error: str | None = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_body_matches_status(self) -> Response:
        expected = _BODY_FOR_STATUS.get(self.status)
        for name in ("success_body", "invalid_request_body", "rate_limit_body"):
            present = getattr(self, name) is not None
            if present != (name == expected):
                raise ValueError(f"{name} does not match status {self.status.value}")
        return self

    @classmethod
    def timeout(cls, code: int = TRANSPORT_FAILURE_CODE, error: str | None = None) -> Response:
        return cls(code=code, status=Status.TIMEOUT, error=error)
