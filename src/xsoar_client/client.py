"""Client facade wiring credentials, transport and services together."""

from __future__ import annotations

from types import TracebackType
from typing import Optional

import httpx

from xsoar_client.application.schemas.pagination import DEFAULT_PAGE_SIZE
from xsoar_client.application.services.incident_service import IncidentService
from xsoar_client.domain.exceptions import MissingBaseURLError, MissingCredentialsError
from xsoar_client.infrastructure.auth.credentials import Credentials
from xsoar_client.infrastructure.http.transport import (
    DEFAULT_MAX_BODY_SIZE,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    Transport,
)
from xsoar_client.infrastructure.settings import ClientSettings, get_settings


class Client:
    """Async client for the Cortex XSOAR 8.x / XSIAM API.

    Usage::

        async with Client("https://api-tenant.example.com", key_id="12", api_key="...") as client:
            async for incident in client.incidents.search(IncidentFilter(query="status:Active")):
                print(incident.name)

    ``timeout`` applies only to the HTTP client created here; configure a
    caller-supplied ``http_client`` directly instead.  A supplied client is
    never closed by :meth:`aclose`.
    """

    def __init__(
        self,
        base_url: str,
        *,
        key_id: str,
        api_key: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: Optional[str] = None,
        max_response_bytes: int = DEFAULT_MAX_BODY_SIZE,
        default_page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        if not base_url:
            raise MissingBaseURLError()
        credentials = Credentials(key_id=key_id, api_key=api_key)
        if not credentials.valid:
            raise MissingCredentialsError()

        self._transport = Transport(
            base_url,
            credentials,
            http_client,
            timeout=timeout,
            user_agent=user_agent or DEFAULT_USER_AGENT,
            max_body_size=max_response_bytes,
        )
        self.incidents = IncidentService(self._transport, default_page_size=default_page_size)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[ClientSettings] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> Client:
        """Build a client from ``XSOAR_*`` environment settings."""
        settings = settings or get_settings()
        return cls(
            settings.base_url,
            key_id=settings.api_key_id,
            api_key=settings.api_key,
            http_client=http_client,
            timeout=settings.timeout_seconds,
            user_agent=settings.user_agent,
            max_response_bytes=settings.max_response_bytes,
            default_page_size=settings.default_page_size,
        )

    @property
    def base_url(self) -> str:
        return self._transport.base_url

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()
