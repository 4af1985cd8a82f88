"""Translate non-successful HTTP responses into typed client exceptions."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Any, Mapping, Optional

from xsoar_client.domain.exceptions import (
    APIError,
    AuthenticationError,
    NotFoundError,
    RateLimitError,
    ServerError,
    ValidationError,
)


def parse_retry_after(value: Optional[str], now: Optional[datetime] = None) -> Optional[float]:
    """Return the ``Retry-After`` delay in seconds.

    Accepts both delta-seconds and HTTP-date forms.  Dates in the past and
    unparseable values yield ``None``.
    """
    if not value:
        return None
    value = value.strip()
    if value.isdigit():
        return float(value)
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    delay = (when - (now or datetime.now(UTC))).total_seconds()
    return delay if delay > 0 else None


def _decode_body(body: bytes) -> Optional[dict[str, Any]]:
    try:
        payload = json.loads(body)
    except (UnicodeDecodeError, ValueError):
        return None
    return payload if isinstance(payload, dict) else None


def parse_error(status_code: int, body: bytes, headers: Mapping[str, str]) -> APIError:
    """Build the exception matching *status_code* from an error response.

    Structured JSON bodies provide ``message``, ``detail``, ``requestId`` and,
    for 400s, per-field ``fields``; otherwise the raw body text becomes the
    message.
    """
    request_id = headers.get("X-Request-ID", "") or ""
    payload = _decode_body(body)

    if payload is not None:
        message = str(payload.get("message") or "")
        detail = str(payload.get("detail") or "")
        request_id = str(payload.get("requestId") or request_id)
    else:
        message = body.decode("utf-8", errors="replace")
        detail = ""

    common: dict[str, Any] = {
        "status_code": status_code,
        "request_id": request_id,
        "detail": detail,
    }

    if status_code in (401, 403):
        return AuthenticationError(message, **common)
    if status_code == 404:
        return NotFoundError(message, **common)
    if status_code == 400:
        fields = payload.get("fields") if payload is not None else None
        if not isinstance(fields, dict):
            fields = None
        return ValidationError(
            message,
            fields={str(k): str(v) for k, v in fields.items()} if fields else None,
            **common,
        )
    if status_code == 429:
        return RateLimitError(
            message, retry_after=parse_retry_after(headers.get("Retry-After")), **common
        )
    if status_code >= 500:
        return ServerError(message, **common)
    return APIError(message, **common)
