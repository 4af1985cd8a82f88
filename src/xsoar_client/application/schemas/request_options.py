"""Per-request options shared by every service call."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

REQUEST_ID_HEADER = "X-Request-ID"


@dataclass(frozen=True)
class RequestOptions:
    """Extra headers applied on top of the transport defaults.

    ``request_id`` is a shortcut for the ``X-Request-ID`` tracing header and
    wins over a value passed in ``headers``.
    """

    headers: Mapping[str, str] = field(default_factory=dict)
    request_id: str = ""

    def to_headers(self) -> dict[str, str]:
        merged = dict(self.headers)
        if self.request_id:
            merged[REQUEST_ID_HEADER] = self.request_id
        return merged
