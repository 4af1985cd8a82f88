"""Application service for XSOAR incident operations.

``IncidentService`` turns typed requests into API calls on the transport
port and maps every error status to the exception taxonomy in
``xsoar_client.domain.exceptions``.  Searching is exposed two ways: a lazy
stream over all matching incidents (``search``) and single-page access for
manual pagination (``search_page``).
"""

from __future__ import annotations

import asyncio
from functools import partial
from typing import Any, AsyncIterator, Optional, Protocol
from urllib.parse import quote

from xsoar_client.application.cancellation import CancellationToken
from xsoar_client.application.schemas.pagination import DEFAULT_PAGE_SIZE, Page, PageOptions
from xsoar_client.application.schemas.request_options import RequestOptions
from xsoar_client.application.services.paginator import paginate
from xsoar_client.domain.exceptions import (
    DeadlineExceededError,
    NotFoundError,
    TransportError,
    ValidationError,
)
from xsoar_client.domain.models.incident import (
    CloseIncidentRequest,
    CreateIncidentRequest,
    Incident,
    IncidentFilter,
    UpdateIncidentRequest,
)
from xsoar_client.infrastructure.http.error_mapping import parse_error
from xsoar_client.infrastructure.http.transport import ApiRequest, ApiResponse


# ---------------------------------------------------------------------------
# Transport port
# ---------------------------------------------------------------------------

class ApiTransport(Protocol):
    """Port: authenticated JSON request execution."""

    async def do_json(self, request: ApiRequest) -> tuple[ApiResponse, Any]: ...


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _validate_id(incident_id: str) -> None:
    if not incident_id:
        raise ValidationError("incident ID cannot be empty")


def _incident_path(incident_id: str) -> str:
    return f"/incident/{quote(incident_id, safe='')}"


def _not_found(incident_id: str) -> NotFoundError:
    return NotFoundError(
        "incident not found",
        resource_type="incident",
        resource_id=incident_id,
    )


def _raise_for_status(resp: ApiResponse, incident_id: Optional[str] = None) -> None:
    if resp.status_code == 404 and incident_id is not None:
        raise _not_found(incident_id)
    if resp.is_error:
        raise parse_error(resp.status_code, resp.body, resp.headers)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class IncidentService:
    """Search and CRUD operations on incidents."""

    def __init__(self, transport: ApiTransport, default_page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self._transport = transport
        self._default_page_size = default_page_size

    async def _send(
        self,
        method: str,
        path: str,
        body: Any = None,
        options: Optional[RequestOptions] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> tuple[ApiResponse, Any]:
        request = ApiRequest(
            method=method,
            path=path,
            body=body,
            headers=options.to_headers() if options else {},
        )
        remaining = None
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
            remaining = cancel_token.remaining()
        if remaining is None:
            return await self._transport.do_json(request)

        # Abort the in-flight request once the caller's deadline passes.
        scope = asyncio.timeout(remaining)
        try:
            async with scope:
                return await self._transport.do_json(request)
        except TimeoutError:
            if scope.expired():
                raise DeadlineExceededError() from None
            raise

    # -- search ----------------------------------------------------------

    def search(
        self,
        filter: Optional[IncidentFilter] = None,
        *,
        page_size: Optional[int] = None,
        options: Optional[RequestOptions] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> AsyncIterator[Incident]:
        """Stream every incident matching *filter*.

        Pages are fetched lazily as the stream is consumed.  Each call returns
        a new one-shot stream.
        """
        fetch = partial(
            self.search_page, filter, options=options, cancel_token=cancel_token
        )
        return paginate(
            fetch,
            page_size=page_size or self._default_page_size,
            cancel_token=cancel_token,
        )

    async def search_page(
        self,
        filter: Optional[IncidentFilter] = None,
        page: Optional[PageOptions] = None,
        *,
        options: Optional[RequestOptions] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Page[Incident]:
        """Fetch a single page of incidents for manual pagination."""
        page = page or PageOptions(limit=self._default_page_size)
        body: dict[str, Any] = dict(page.to_wire())
        if filter is not None:
            body["filter"] = filter.to_wire()

        resp, payload = await self._send(
            "POST", "/incidents/search", body, options, cancel_token
        )
        _raise_for_status(resp)
        if payload is not None and not isinstance(payload, dict):
            raise TransportError("unexpected search response shape")
        return Page.from_wire(payload or {}, Incident.from_wire, offset=page.offset)

    # -- CRUD ------------------------------------------------------------

    async def get(
        self,
        incident_id: str,
        *,
        options: Optional[RequestOptions] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Incident:
        _validate_id(incident_id)
        resp, payload = await self._send(
            "GET", _incident_path(incident_id), None, options, cancel_token
        )
        _raise_for_status(resp, incident_id)
        return Incident.from_wire(payload or {})

    async def create(
        self,
        request: CreateIncidentRequest,
        *,
        options: Optional[RequestOptions] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Incident:
        if request is None:
            raise ValidationError("create request cannot be empty")
        request.validate()
        resp, payload = await self._send(
            "POST", "/incident", request.to_wire(), options, cancel_token
        )
        _raise_for_status(resp)
        return Incident.from_wire(payload or {})

    async def update(
        self,
        incident_id: str,
        request: UpdateIncidentRequest,
        *,
        options: Optional[RequestOptions] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        _validate_id(incident_id)
        resp, _ = await self._send(
            "POST", "/incident/update", request.to_wire(incident_id), options, cancel_token
        )
        _raise_for_status(resp, incident_id)

    async def close(
        self,
        incident_id: str,
        request: Optional[CloseIncidentRequest] = None,
        *,
        options: Optional[RequestOptions] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        _validate_id(incident_id)
        request = request or CloseIncidentRequest()
        resp, _ = await self._send(
            "POST", "/incident/close", request.to_wire(incident_id), options, cancel_token
        )
        _raise_for_status(resp, incident_id)

    async def delete(
        self,
        incident_id: str,
        *,
        options: Optional[RequestOptions] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        _validate_id(incident_id)
        resp, _ = await self._send(
            "POST", "/incident/batchDelete", {"ids": [incident_id]}, options, cancel_token
        )
        _raise_for_status(resp, incident_id)
