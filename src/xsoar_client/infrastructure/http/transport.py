"""
Low-level HTTP transport for XSOAR API calls.

Wraps an ``httpx.AsyncClient`` and is responsible for URL building, default
and authentication headers, JSON encoding of request bodies, bounding the
size of response bodies, and request logging / metrics.  Status codes are not
interpreted here; services map them to exceptions.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import httpx

from xsoar_client.domain.exceptions import ResponseTooLargeError, TransportError
from xsoar_client.infrastructure.auth.credentials import Credentials
from xsoar_client.infrastructure.observability.logging_config import get_logger
from xsoar_client.infrastructure.observability.metrics import record_request

logger = get_logger(__name__)

DEFAULT_TIMEOUT: float = 30.0
DEFAULT_USER_AGENT: str = "xsoar-client/1.0"
DEFAULT_MAX_BODY_SIZE: int = 10 * 1024 * 1024


# ======================================================================
# Request / response containers
# ======================================================================


@dataclass(frozen=True)
class ApiRequest:
    method: str
    path: str
    body: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ApiResponse:
    status_code: int
    body: bytes = b""
    headers: httpx.Headers = field(default_factory=httpx.Headers)

    @property
    def is_error(self) -> bool:
        return self.status_code >= 400


# ======================================================================
# Transport
# ======================================================================


class Transport:
    """Sends authenticated JSON requests relative to a base URL."""

    def __init__(
        self,
        base_url: str,
        credentials: Credentials,
        http_client: Optional[httpx.AsyncClient] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        max_body_size: int = DEFAULT_MAX_BODY_SIZE,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        try:
            parsed = httpx.URL(self._base_url)
        except httpx.InvalidURL as exc:
            raise TransportError(f"invalid base URL: {exc}") from exc
        if not parsed.scheme or not parsed.host:
            raise TransportError(f"invalid base URL: {base_url!r}")
        self._credentials = credentials
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)
        self.user_agent = user_agent
        self.max_body_size = max_body_size

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._http.aclose()

    # -- request execution -----------------------------------------------

    async def do(self, request: ApiRequest) -> ApiResponse:
        """Execute *request* and return the raw response."""
        url = f"{self._base_url}{request.path}"
        content = None
        if request.body is not None:
            try:
                content = json.dumps(request.body).encode("utf-8")
            except (TypeError, ValueError) as exc:
                raise TransportError(f"marshaling request body: {exc}") from exc

        started = time.perf_counter()
        try:
            async with self._http.stream(
                request.method,
                url,
                content=content,
                headers=self._build_headers(request),
            ) as resp:
                body = await self._read_limited(resp)
                status_code = resp.status_code
                headers = resp.headers
        except ResponseTooLargeError as exc:
            self._record_failure(request, started, exc)
            raise
        except httpx.HTTPError as exc:
            self._record_failure(request, started, exc)
            raise TransportError(f"request failed: {exc}") from exc

        elapsed = time.perf_counter() - started
        record_request(request.method, request.path, str(status_code), elapsed)
        logger.debug(
            "xsoar.request",
            method=request.method,
            path=request.path,
            status_code=status_code,
            elapsed_ms=round(elapsed * 1000, 2),
        )
        return ApiResponse(status_code=status_code, body=body, headers=headers)

    async def do_json(self, request: ApiRequest) -> tuple[ApiResponse, Any]:
        """Execute *request* and decode the JSON body of a successful response.

        The decoded payload is ``None`` for error statuses and empty bodies.
        """
        resp = await self.do(request)
        if resp.is_error or not resp.body:
            return resp, None
        try:
            return resp, json.loads(resp.body)
        except ValueError as exc:
            raise TransportError(f"unmarshaling response: {exc}") from exc

    # -- helpers ---------------------------------------------------------

    def _record_failure(self, request: ApiRequest, started: float, exc: Exception) -> None:
        record_request(request.method, request.path, "error", time.perf_counter() - started)
        logger.warning(
            "xsoar.request_failed",
            method=request.method,
            path=request.path,
            error=str(exc),
        )

    def _build_headers(self, request: ApiRequest) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }
        if request.body is not None:
            headers["Content-Type"] = "application/json"
        self._credentials.apply(headers)
        headers.update(request.headers)
        return headers

    async def _read_limited(self, resp: httpx.Response) -> bytes:
        chunks: list[bytes] = []
        size = 0
        async for chunk in resp.aiter_bytes():
            size += len(chunk)
            if size > self.max_body_size:
                raise ResponseTooLargeError(self.max_body_size)
            chunks.append(chunk)
        return b"".join(chunks)
