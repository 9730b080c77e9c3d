"""
Classification of ingestion responses.

Each status code the server documents has its own small parse function
producing a typed :class:`~amplitude_ingest.types.Response`. Codes the
server does not document are reported as ``TIMEOUT`` so callers retry
them like any other transient failure.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable

from amplitude_ingest.exceptions import InvalidAPIKeyError
from amplitude_ingest.types import (
    InvalidRequestBody,
    RateLimitBody,
    Response,
    Status,
    SuccessBody,
)

logger = logging.getLogger(__name__)

# The server names the offending key inside the message text.
_INVALID_API_KEY_RE = re.compile(r"^Invalid API key: (?P<key>.+) is invalid$")


def is_invalid_api_key(error: str | None, api_key: str) -> bool:
    """Whether a 400 error message rejects ``api_key`` itself."""
    if not error:
        return False
    match = _INVALID_API_KEY_RE.match(error.strip())
    return match is not None and match.group("key") == api_key


def _error_text(body: dict[str, Any]) -> str | None:
    error = body.get("error")
    if error is None:
        return None
    return error if isinstance(error, str) else str(error)


# ============================================================
#  Per-status parsers
# ============================================================


def _parse_success(code: int, body: dict[str, Any], api_key: str) -> Response:
    return Response(code=code, status=Status.SUCCESS, success_body=SuccessBody.model_validate(body))


def _parse_payload_too_large(code: int, body: dict[str, Any], api_key: str) -> Response:
    return Response(code=code, status=Status.PAYLOAD_TOO_LARGE, error=_error_text(body))


def _parse_invalid(code: int, body: dict[str, Any], api_key: str) -> Response:
    error = _error_text(body)
    if is_invalid_api_key(error, api_key):
        raise InvalidAPIKeyError(error or "")
    return Response(
        code=code,
        status=Status.INVALID,
        invalid_request_body=InvalidRequestBody.model_validate(body),
        error=error,
    )


def _parse_rate_limit(code: int, body: dict[str, Any], api_key: str) -> Response:
    return Response(
        code=code,
        status=Status.RATELIMIT,
        rate_limit_body=RateLimitBody.model_validate(body),
        error=_error_text(body),
    )


_PARSERS: dict[int, Callable[[int, dict[str, Any], str], Response]] = {
    200: _parse_success,
    400: _parse_invalid,
    413: _parse_payload_too_large,
    429: _parse_rate_limit,
}


# Codes whose classification depends on fields in the body.
_BODY_REQUIRED = frozenset({200, 400, 429})


def read_body(code: int, raw: bytes) -> dict[str, Any]:
    """Decode a response body into a JSON object.

    Codes in ``_BODY_REQUIRED`` must carry a JSON object; anything else
    raises ``ValueError``. For the other codes an unreadable body is
    replaced by ``{}`` because at most ``error`` is taken from it.
    """
    try:
        data = json.loads(raw) if raw.strip() else {}
    except RecursionError as exc:
        if code in _BODY_REQUIRED:
            raise ValueError(f"The {code} response body is nested too deeply") from exc
        return {}
    except ValueError:
        if code in _BODY_REQUIRED:
            raise
        return {}
    if not isinstance(data, dict):
        if code in _BODY_REQUIRED:
            raise ValueError(f"Expected a JSON object in the {code} response body")
        return {}
    return data


def classify(code: int, body: dict[str, Any], api_key: str) -> Response:
    """Turn a status code and decoded body into a :class:`Response`.

    Raises:
        InvalidAPIKeyError: On a 400 that rejects ``api_key``.
        pydantic.ValidationError: If a documented body has the wrong shape.
    """
    parser = _PARSERS.get(code)
    if parser is None:
        logger.info("Unexpected status %d from ingestion endpoint", code)
        return Response.timeout(code=code, error=_error_text(body))

    response = parser(code, body, api_key)
    if response.status is not Status.SUCCESS:
        logger.debug("Request classified as %s (%d): %s", response.status.value, code, response.error)
    return response
