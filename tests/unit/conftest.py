"""Shared fixtures for unit tests."""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Iterable, Optional

import pytest

# Ensure src is importable
sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from xsoar_client.application.schemas.pagination import Page, PageOptions
from xsoar_client.domain.models.incident import Incident, IncidentStatus, Severity
from xsoar_client.infrastructure.auth.credentials import Credentials

NOW = datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(key_id="42", api_key="s3cr3t")


@pytest.fixture
def sample_incident() -> Incident:
    return Incident(
        id="inc-123",
        name="Security Alert",
        type="Phishing",
        status=IncidentStatus.ACTIVE,
        severity=Severity.MEDIUM,
        owner="analyst@example.com",
        created=NOW,
    )


@pytest.fixture
def stream_of() -> Callable[..., AsyncIterator[Any]]:
    """Build a one-shot async stream over *values*.

    ``pulled`` records every value as it is handed out, ``error`` is raised
    after the values, and ``closed`` records whether the stream was closed.
    """

    def factory(
        values: Iterable[Any],
        *,
        error: Optional[Exception] = None,
        pulled: Optional[list[Any]] = None,
        closed: Optional[list[bool]] = None,
    ) -> AsyncIterator[Any]:
        async def gen() -> AsyncIterator[Any]:
            try:
                for value in values:
                    if pulled is not None:
                        pulled.append(value)
                    yield value
                if error is not None:
                    raise error
            finally:
                if closed is not None:
                    closed.append(True)

        return gen()

    return factory


@pytest.fixture
def paged_fetcher() -> Callable[..., Callable[[PageOptions], Any]]:
    """Serve ``ids`` as incident pages of ``server_page_size`` regardless of the limit asked for."""

    def factory(ids: list[str], server_page_size: int) -> Callable[[PageOptions], Page[Incident]]:
        def fetch(options: PageOptions) -> Page[Incident]:
            chunk = ids[options.offset : options.offset + server_page_size]
            return Page(
                items=[Incident(id=i) for i in chunk],
                total=len(ids),
                offset=options.offset,
                page_size=options.limit,
            )

        return fetch

    return factory
