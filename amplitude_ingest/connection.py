"""
Opening outbound connections.

:class:`HttpCall` never builds an httpx client itself; it asks a
:class:`Connector` for one, configured from a
:class:`~amplitude_ingest.types.ConnectionOptions`. Tests swap in a
connector backed by ``httpx.MockTransport``.
"""

from __future__ import annotations

import logging

import httpx

from amplitude_ingest.types import ConnectionOptions

logger = logging.getLogger(__name__)


class Connector:
    """Opens a fresh client for every request."""

    def open(self, options: ConnectionOptions) -> httpx.Client:
        raise NotImplementedError

    def open_async(self, options: ConnectionOptions) -> httpx.AsyncClient:
        raise NotImplementedError


def _timeout(options: ConnectionOptions) -> httpx.Timeout:
    return httpx.Timeout(options.read_timeout, connect=options.connect_timeout)


class HttpxConnector(Connector):
    """Default connector: a direct or proxied httpx client per call.

    Environment proxy variables are ignored, so a missing proxy always
    means a direct connection.
    """

    def open(self, options: ConnectionOptions) -> httpx.Client:
        if options.using_proxy:
            logger.debug("Opening connection to %s via %s", options.url, options.proxy.url)
        return httpx.Client(
            headers=options.headers,
            timeout=_timeout(options),
            proxy=options.proxy.url if options.proxy else None,
            trust_env=False,
        )

    def open_async(self, options: ConnectionOptions) -> httpx.AsyncClient:
        if options.using_proxy:
            logger.debug("Opening async connection to %s via %s", options.url, options.proxy.url)
        return httpx.AsyncClient(
            headers=options.headers,
            timeout=_timeout(options),
            proxy=options.proxy.url if options.proxy else None,
            trust_env=False,
        )
