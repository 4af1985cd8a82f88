"""Integration test fixtures: a Client wired to an in-process fake XSOAR API."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest
import pytest_asyncio

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from xsoar_client import Client

BASE_URL = "https://api-tenant.xdr.example.com"


class FakeXsoar:
    """Records requests and answers them with a pluggable handler."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.handler: Callable[[httpx.Request], Any] = lambda request: httpx.Response(200, json={})

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.handler(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response

    def search_calls(self) -> list[dict[str, Any]]:
        return [
            json.loads(r.content)
            for r in self.requests
            if r.url.path.endswith("/incidents/search")
        ]


@pytest.fixture
def fake_api() -> FakeXsoar:
    return FakeXsoar()


@pytest_asyncio.fixture
async def client(fake_api: FakeXsoar):
    http = httpx.AsyncClient(transport=httpx.MockTransport(fake_api))
    async with Client(BASE_URL, key_id="42", api_key="s3cr3t", http_client=http) as c:
        yield c
    await http.aclose()
