"""
Event model and batch encoding for the ingestion API.

The transport treats events as opaque records: it only serializes them.
Field-level validation belongs to whoever builds the batch.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Mapping, Union

from pydantic import BaseModel

from amplitude_ingest.types import Options

logger = logging.getLogger(__name__)

# Anything the encoder accepts as a single event
EventLike = Union["Event", Mapping[str, Any]]


class Event(BaseModel):
    """An analytics event, already validated by the caller."""

    event_type: str
    user_id: str | None = None
    device_id: str | None = None
    time: int | None = None
    insert_id: str | None = None
    session_id: int | None = None
    event_properties: dict[str, Any] | None = None
    user_properties: dict[str, Any] | None = None
    groups: dict[str, Any] | None = None
    app_version: str | None = None
    platform: str | None = None
    os_name: str | None = None
    country: str | None = None
    language: str | None = None
    ip: str | None = None

    # Unknown ingestion fields are passed through untouched.
    model_config = {"extra": "allow"}

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict with unset fields left out."""
        return self.model_dump(mode="json", exclude_none=True)


def _event_to_wire(event: EventLike) -> dict[str, Any]:
    if isinstance(event, Event):
        return event.to_wire()
    return dict(event)


def encode_events(
    api_key: str,
    events: Iterable[EventLike],
    options: Options | None = None,
) -> str:
    """Encode a batch as the JSON request body.

    Args:
        api_key: Project API key, embedded in the payload.
        events: :class:`Event` instances or plain mappings. An empty
            batch is encoded as-is.
        options: When it carries payload options (``min_id_length``),
            they are sent under ``"options"``.

    Returns:
        The payload as a JSON string.
    """
    payload: dict[str, Any] = {
        "api_key": api_key,
        "events": [_event_to_wire(e) for e in events],
    }
    if options is not None:
        extra = options.payload_options()
        if extra:
            payload["options"] = extra

    body = json.dumps(payload, separators=(",", ":"))
    logger.debug("Encoded %d events (%d chars)", len(payload["events"]), len(body))
    return body
