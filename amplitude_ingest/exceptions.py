"""Exceptions raised by the ingestion transport."""

from __future__ import annotations


class AmplitudeError(Exception):
    """Base class for errors raised by this package."""


class InvalidAPIKeyError(AmplitudeError):
    """The server rejected the configured API key.

    Retrying cannot fix this, so it is raised instead of being returned
    as a :class:`~amplitude_ingest.types.Response`.
    """

    def __init__(self, error: str) -> None:
        super().__init__(error)
        self.error = error
