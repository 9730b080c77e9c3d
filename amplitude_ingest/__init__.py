"""
Amplitude ingestion transport for Python.

Serializes a batch of analytics events, POSTs it to the HTTP API and
classifies the server's reply into a typed :class:`Response`.

Example::

    from amplitude_ingest import Event, HttpCall, HttpCallMode, Options, Status

    call = HttpCall.for_mode(
        "your_api_key",
        HttpCallMode.BATCH,
        options=Options(headers={"X-Client": "my-app"}),
    )

    response = call.make_request([
        Event(event_type="signup", user_id="user@example.com"),
    ])
    if response.status is Status.SUCCESS:
        print(response.success_body.events_ingested)

Transport failures never raise: they come back as ``Status.TIMEOUT``.
An API key the server rejects raises :class:`InvalidAPIKeyError`.
"""

from amplitude_ingest.client import HttpCall
from amplitude_ingest.classifier import classify, is_invalid_api_key
from amplitude_ingest.connection import Connector, HttpxConnector
from amplitude_ingest.events import Event, encode_events
from amplitude_ingest.exceptions import AmplitudeError, InvalidAPIKeyError
from amplitude_ingest.types import (
    API_URL,
    BATCH_API_URL,
    NETWORK_TIMEOUT_SECONDS,
    ConnectionOptions,
    HttpCallMode,
    InvalidRequestBody,
    Options,
    Proxy,
    RateLimitBody,
    Response,
    Status,
    SuccessBody,
    endpoint_for,
)

__all__ = [
    "HttpCall",
    "HttpCallMode",
    "Connector",
    "HttpxConnector",
    "ConnectionOptions",
    "Event",
    "encode_events",
    "classify",
    "is_invalid_api_key",
    "Options",
    "Proxy",
    "Response",
    "Status",
    "SuccessBody",
    "InvalidRequestBody",
    "RateLimitBody",
    "AmplitudeError",
    "InvalidAPIKeyError",
    "API_URL",
    "BATCH_API_URL",
    "NETWORK_TIMEOUT_SECONDS",
    "endpoint_for",
]

__version__ = "0.1.0"
