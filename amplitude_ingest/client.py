"""
Protocol handler for the Amplitude ingestion API.

Sends one batch of events per call to the HTTP API and returns a
classified :class:`~amplitude_ingest.types.Response`. Batching, retry
scheduling and storage of unsent events are left to the caller.

Usage::

    from amplitude_ingest import Event, HttpCall, HttpCallMode, Status

    call = HttpCall.for_mode("your_api_key", HttpCallMode.BATCH)
    response = call.make_request([Event(event_type="page_view", user_id="u1")])
    if response.status is Status.RATELIMIT:
        retry_later = response.rate_limit_body.throttled_events
"""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

import httpx

from amplitude_ingest.classifier import classify, read_body
from amplitude_ingest.connection import Connector, HttpxConnector
from amplitude_ingest.events import EventLike, encode_events
from amplitude_ingest.types import (
    NETWORK_TIMEOUT_SECONDS,
    ConnectionOptions,
    HttpCallMode,
    Options,
    Proxy,
    Response,
    endpoint_for,
)

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"

# Anything that keeps us from getting a well-formed response. ValueError
# covers undecodable JSON and bodies that fail model validation.
_TRANSPORT_ERRORS = (
    httpx.HTTPError,
    httpx.InvalidURL,
    httpx.StreamError,
    OSError,
    ValueError,
)


def _request_headers(extra: Mapping[str, str]) -> dict[str, str]:
    headers = {"Content-Type": JSON_CONTENT_TYPE}
    for name, value in extra.items():
        if name.lower() == "content-type":
            logger.warning("Ignoring extra Content-Type header %r", value)
            continue
        headers[name] = value
    return headers


class HttpCall:
    """
    Protocol handler for one ingestion endpoint.

    Holds only immutable configuration, so a single instance can be
    shared between threads and tasks; every call opens its own
    connection through the connector.
    """

    def __init__(
        self,
        api_key: str,
        server_url: str,
        options: Options | None = None,
        proxy: Proxy | None = None,
        connector: Connector | None = None,
        timeout: float = NETWORK_TIMEOUT_SECONDS,
    ) -> None:
        if not api_key:
            raise ValueError("api_key must be a non-empty string")
        self._api_key = api_key
        self._options = options or Options()
        self._connector = connector or HttpxConnector()
        self._connection_options = ConnectionOptions(
            url=server_url,
            headers=_request_headers(self._options.headers),
            connect_timeout=timeout,
            read_timeout=timeout,
            proxy=proxy,
        )

    @classmethod
    def for_mode(
        cls,
        api_key: str,
        mode: HttpCallMode,
        options: Options | None = None,
        proxy: Proxy | None = None,
        connector: Connector | None = None,
        timeout: float = NETWORK_TIMEOUT_SECONDS,
    ) -> HttpCall:
        """Build a handler for the regular or the batch endpoint."""
        return cls(
            api_key,
            endpoint_for(mode),
            options=options,
            proxy=proxy,
            connector=connector,
            timeout=timeout,
        )

    @property
    def server_url(self) -> str:
        return self._connection_options.url

    @property
    def connection_options(self) -> ConnectionOptions:
        """Connection setup applied to every request."""
        return self._connection_options

    @property
    def using_proxy(self) -> bool:
        return self._connection_options.using_proxy

    def __repr__(self) -> str:
        return f"HttpCall(server_url={self.server_url!r}, using_proxy={self.using_proxy})"

    def _transport_failure(self, exc: Exception) -> Response:
        logger.warning(
            "Request to %s failed (%s): %s",
            self.server_url,
            type(exc).__name__,
            exc,
        )
        return Response.timeout()

    def make_request(self, events: Sequence[EventLike]) -> Response:
        """Send ``events`` in a single POST and classify the reply.

        Transport failures of any kind come back as a ``TIMEOUT``
        response with code 408 rather than being raised.

        Raises:
            InvalidAPIKeyError: If the server rejects the configured key.
        """
        payload = encode_events(self._api_key, events, self._options)
        options = self._connection_options
        try:
            with self._connector.open(options) as client:
                http_response = client.request(options.method, options.url, content=payload)
                code = http_response.status_code
                body = read_body(code, http_response.content)
            return classify(code, body, self._api_key)
        except _TRANSPORT_ERRORS as exc:
            return self._transport_failure(exc)

    async def make_request_async(self, events: Sequence[EventLike]) -> Response:
        """Async variant of :meth:`make_request` with the same contract."""
        payload = encode_events(self._api_key, events, self._options)
        options = self._connection_options
        try:
            async with self._connector.open_async(options) as client:
                http_response = await client.request(options.method, options.url, content=payload)
                code = http_response.status_code
                body = read_body(code, http_response.content)
            return classify(code, body, self._api_key)
        except _TRANSPORT_ERRORS as exc:
            return self._transport_failure(exc)
