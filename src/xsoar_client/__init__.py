"""Async Python client for the Cortex XSOAR 8.x / XSIAM incident API.

Searching returns a lazy stream that fetches pages as it is consumed::

    async with Client.from_settings() as client:
        async for incident in client.incidents.search(flt):
            ...

        items, err = await collect(client.incidents.search(flt))

Failures are raised as subclasses of :class:`XsoarError`; every HTTP error
status maps to a subclass of :class:`APIError`.
"""

from xsoar_client.application.cancellation import CancellationToken
from xsoar_client.application.schemas.pagination import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    Page,
    PageOptions,
)
from xsoar_client.application.schemas.request_options import RequestOptions
from xsoar_client.application.services.incident_service import IncidentService
from xsoar_client.application.services.paginator import paginate
from xsoar_client.application.streams import (
    Collected,
    collect,
    collect_n,
    filter_items,
    first,
    map_items,
    take,
)
from xsoar_client.client import Client
from xsoar_client.domain.exceptions import (
    APIError,
    AuthenticationError,
    CancellationError,
    ConfigurationError,
    DeadlineExceededError,
    EmptyIteratorError,
    MissingBaseURLError,
    MissingCredentialsError,
    NotFoundError,
    OperationCancelledError,
    RateLimitError,
    ResponseTooLargeError,
    ServerError,
    TransportError,
    ValidationError,
    XsoarError,
)
from xsoar_client.domain.models import (
    CloseIncidentRequest,
    CreateIncidentRequest,
    Incident,
    IncidentFilter,
    IncidentStatus,
    Label,
    Severity,
    UpdateIncidentRequest,
)
from xsoar_client.infrastructure.settings import ClientSettings

__version__ = "1.0.0"

__all__ = [
    "APIError",
    "AuthenticationError",
    "CancellationError",
    "CancellationToken",
    "Client",
    "ClientSettings",
    "CloseIncidentRequest",
    "Collected",
    "ConfigurationError",
    "CreateIncidentRequest",
    "DEFAULT_PAGE_SIZE",
    "DeadlineExceededError",
    "EmptyIteratorError",
    "Incident",
    "IncidentFilter",
    "IncidentService",
    "IncidentStatus",
    "Label",
    "MAX_PAGE_SIZE",
    "MissingBaseURLError",
    "MissingCredentialsError",
    "NotFoundError",
    "OperationCancelledError",
    "Page",
    "PageOptions",
    "RateLimitError",
    "RequestOptions",
    "ResponseTooLargeError",
    "ServerError",
    "Severity",
    "TransportError",
    "UpdateIncidentRequest",
    "ValidationError",
    "XsoarError",
    "collect",
    "collect_n",
    "filter_items",
    "first",
    "map_items",
    "paginate",
    "take",
]
