"""Unit tests for IncidentService against a mocked transport port."""

from __future__ import annotations

import asyncio
import json
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest

from xsoar_client.application.cancellation import CancellationToken
from xsoar_client.application.schemas.pagination import PageOptions
from xsoar_client.application.schemas.request_options import RequestOptions
from xsoar_client.application.services.incident_service import IncidentService
from xsoar_client.application.streams import collect
from xsoar_client.domain.exceptions import (
    AuthenticationError,
    DeadlineExceededError,
    NotFoundError,
    OperationCancelledError,
    ServerError,
    ValidationError,
)
from xsoar_client.domain.models.incident import (
    CloseIncidentRequest,
    CreateIncidentRequest,
    IncidentFilter,
    IncidentStatus,
    Severity,
    UpdateIncidentRequest,
)
from xsoar_client.infrastructure.http.transport import ApiRequest, ApiResponse


def _ok(payload: Any = None, status: int = 200) -> tuple[ApiResponse, Any]:
    body = json.dumps(payload).encode() if payload is not None else b""
    return ApiResponse(status_code=status, body=body), payload


def _error(status: int, payload: Any = None, headers: dict[str, str] | None = None) -> tuple[ApiResponse, Any]:
    body = json.dumps(payload).encode() if payload is not None else b""
    return ApiResponse(status_code=status, body=body, headers=httpx.Headers(headers or {})), None


def _page(ids: list[str], total: int, offset: int) -> dict[str, Any]:
    return {"data": [{"id": i} for i in ids], "total": total, "fromIndex": offset}


def _sent(transport: AsyncMock, index: int = -1) -> ApiRequest:
    return transport.do_json.await_args_list[index].args[0]


@pytest.fixture
def transport() -> AsyncMock:
    t = AsyncMock()
    t.do_json = AsyncMock(return_value=_ok({}))
    return t


@pytest.fixture
def svc(transport: AsyncMock) -> IncidentService:
    return IncidentService(transport)


# ------------------------------------------------------------------
# search_page
# ------------------------------------------------------------------


@pytest.mark.asyncio
class TestSearchPage:
    async def test_success(self, svc, transport) -> None:
        transport.do_json.return_value = _ok(
            {"data": [{"id": "inc-1", "name": "A"}], "total": 1, "fromIndex": 0, "size": 100}
        )
        page = await svc.search_page()
        assert [i.id for i in page.items] == ["inc-1"]
        assert page.total == 1

        request = _sent(transport)
        assert request.method == "POST"
        assert request.path == "/incidents/search"
        assert request.body == {"fromIndex": 0, "size": 100}

    async def test_default_page_uses_configured_size(self, transport) -> None:
        transport.do_json.return_value = _ok(_page([], 0, 0))
        svc = IncidentService(transport, default_page_size=40)
        await svc.search_page()
        assert _sent(transport).body == {"fromIndex": 0, "size": 40}

    async def test_with_filter_and_page(self, svc, transport) -> None:
        transport.do_json.return_value = _ok(_page([], 0, 0))
        flt = IncidentFilter(query="type:Phishing", status=[IncidentStatus.ACTIVE], severity=[Severity.HIGH])
        await svc.search_page(flt, PageOptions(offset=20, limit=5000))

        body = _sent(transport).body
        assert body["filter"] == {"query": "type:Phishing", "status": ["Active"], "severity": [4]}
        assert body["fromIndex"] == 20
        assert body["size"] == 1000

    async def test_authentication_error(self, svc, transport) -> None:
        transport.do_json.return_value = _error(401, {"message": "bad key"})
        with pytest.raises(AuthenticationError):
            await svc.search_page()

    async def test_server_error(self, svc, transport) -> None:
        transport.do_json.return_value = _error(500, {"message": "oops"})
        with pytest.raises(ServerError) as exc_info:
            await svc.search_page()
        assert exc_info.value.status_code == 500

    async def test_request_options_become_headers(self, svc, transport) -> None:
        transport.do_json.return_value = _ok(_page([], 0, 0))
        await svc.search_page(options=RequestOptions(headers={"X-Custom": "v"}, request_id="req-9"))
        assert _sent(transport).headers == {"X-Custom": "v", "X-Request-ID": "req-9"}

    async def test_cancelled_token_skips_request(self, svc, transport) -> None:
        token = CancellationToken()
        token.cancel()
        with pytest.raises(OperationCancelledError):
            await svc.search_page(cancel_token=token)
        transport.do_json.assert_not_awaited()

    async def test_deadline_aborts_in_flight_request(self, svc, transport) -> None:
        async def slow(request: ApiRequest) -> tuple[ApiResponse, Any]:
            await asyncio.sleep(5)
            return _ok(_page([], 0, 0))

        transport.do_json.side_effect = slow
        with pytest.raises(DeadlineExceededError):
            await svc.search_page(cancel_token=CancellationToken.with_timeout(0.05))


# ------------------------------------------------------------------
# search
# ------------------------------------------------------------------


@pytest.mark.asyncio
class TestSearch:
    async def test_iterates_all_pages(self, svc, transport) -> None:
        transport.do_json.side_effect = [
            _ok(_page(["inc-1", "inc-2"], 5, 0)),
            _ok(_page(["inc-3", "inc-4"], 5, 2)),
            _ok(_page(["inc-5"], 5, 4)),
        ]
        items, error = await collect(svc.search())
        assert error is None
        assert [i.id for i in items] == ["inc-1", "inc-2", "inc-3", "inc-4", "inc-5"]
        assert [r.args[0].body["fromIndex"] for r in transport.do_json.await_args_list] == [0, 2, 4]

    async def test_stops_on_error(self, svc, transport) -> None:
        transport.do_json.side_effect = [
            _ok(_page(["inc-1"], 10, 0)),
            _error(500),
            _ok(_page(["never"], 10, 2)),
        ]
        items, error = await collect(svc.search())
        assert [i.id for i in items] == ["inc-1"]
        assert isinstance(error, ServerError)
        assert transport.do_json.await_count == 2

    async def test_null_offset_in_response_uses_requested(self, svc, transport) -> None:
        def page(ids: list[str]) -> tuple[ApiResponse, Any]:
            return _ok({"data": [{"id": i} for i in ids], "total": 5, "fromIndex": None})

        transport.do_json.side_effect = [
            page(["inc-1", "inc-2"]),
            page(["inc-3", "inc-4"]),
            page(["inc-5"]),
        ]
        items, error = await collect(svc.search(page_size=2))
        assert error is None
        assert [i.id for i in items] == ["inc-1", "inc-2", "inc-3", "inc-4", "inc-5"]
        assert [r.args[0].body["fromIndex"] for r in transport.do_json.await_args_list] == [0, 2, 4]

    async def test_page_size_passed_through(self, svc, transport) -> None:
        transport.do_json.return_value = _ok(_page([], 0, 0))
        await collect(svc.search(page_size=25))
        assert _sent(transport).body["size"] == 25

    async def test_default_page_size_from_service(self, transport) -> None:
        transport.do_json.return_value = _ok(_page([], 0, 0))
        svc = IncidentService(transport, default_page_size=250)
        await collect(svc.search())
        assert _sent(transport).body["size"] == 250

    async def test_filter_sent_on_every_page(self, svc, transport) -> None:
        transport.do_json.side_effect = [
            _ok(_page(["inc-1"], 2, 0)),
            _ok(_page(["inc-2"], 2, 1)),
        ]
        await collect(svc.search(IncidentFilter(owner=["bob"])))
        for call in transport.do_json.await_args_list:
            assert call.args[0].body["filter"] == {"owner": ["bob"]}

    async def test_cancellation_between_items(self, svc, transport) -> None:
        transport.do_json.return_value = _ok(_page(["inc-1", "inc-2", "inc-3"], 3, 0))
        token = CancellationToken()
        received: list[str] = []

        with pytest.raises(OperationCancelledError):
            async for incident in svc.search(cancel_token=token):
                received.append(incident.id)
                if len(received) == 1:
                    token.cancel()

        assert received == ["inc-1"]


# ------------------------------------------------------------------
# get / create / update / close / delete
# ------------------------------------------------------------------


@pytest.mark.asyncio
class TestGet:
    async def test_success(self, svc, transport) -> None:
        transport.do_json.return_value = _ok({"id": "inc-123", "name": "Test Incident"})
        incident = await svc.get("inc-123")
        assert incident.name == "Test Incident"
        request = _sent(transport)
        assert request.method == "GET"
        assert request.path == "/incident/inc-123"

    async def test_not_found(self, svc, transport) -> None:
        transport.do_json.return_value = _error(404)
        with pytest.raises(NotFoundError) as exc_info:
            await svc.get("missing")
        assert exc_info.value.resource_type == "incident"
        assert exc_info.value.resource_id == "missing"
        assert str(exc_info.value) == "xsoar: incident not found: missing"

    async def test_empty_id(self, svc, transport) -> None:
        with pytest.raises(ValidationError):
            await svc.get("")
        transport.do_json.assert_not_awaited()

    async def test_id_is_path_escaped(self, svc, transport) -> None:
        transport.do_json.return_value = _ok({"id": "a/b c"})
        await svc.get("a/b c")
        assert _sent(transport).path == "/incident/a%2Fb%20c"


@pytest.mark.asyncio
class TestCreate:
    async def test_success(self, svc, transport) -> None:
        transport.do_json.return_value = _ok({"id": "inc-new", "name": "New", "type": "Malware", "severity": 4})
        req = CreateIncidentRequest(name="New", type="Malware", severity=Severity.HIGH)
        incident = await svc.create(req)
        assert incident.id == "inc-new"
        assert incident.severity is Severity.HIGH
        request = _sent(transport)
        assert request.path == "/incident"
        assert request.body == {"name": "New", "type": "Malware", "severity": 4}

    async def test_server_validation_error(self, svc, transport) -> None:
        transport.do_json.return_value = _error(400, {"message": "invalid", "fields": {"name": "too long"}})
        with pytest.raises(ValidationError) as exc_info:
            await svc.create(CreateIncidentRequest(name="x", type="y"))
        assert exc_info.value.fields == {"name": "too long"}

    async def test_none_request(self, svc, transport) -> None:
        with pytest.raises(ValidationError):
            await svc.create(None)  # type: ignore[arg-type]
        transport.do_json.assert_not_awaited()

    @pytest.mark.parametrize(
        "req",
        [CreateIncidentRequest(type="Malware"), CreateIncidentRequest(name="No type")],
    )
    async def test_missing_required_field(self, svc, transport, req) -> None:
        with pytest.raises(ValidationError):
            await svc.create(req)
        transport.do_json.assert_not_awaited()


@pytest.mark.asyncio
class TestUpdate:
    async def test_sends_only_set_fields(self, svc, transport) -> None:
        transport.do_json.return_value = _ok()
        await svc.update("inc-1", UpdateIncidentRequest(owner="alice", severity=Severity.LOW))
        request = _sent(transport)
        assert request.path == "/incident/update"
        assert request.body == {"id": "inc-1", "owner": "alice", "severity": 2}

    async def test_not_found(self, svc, transport) -> None:
        transport.do_json.return_value = _error(404)
        with pytest.raises(NotFoundError):
            await svc.update("gone", UpdateIncidentRequest(owner="x"))

    async def test_empty_id(self, svc, transport) -> None:
        with pytest.raises(ValidationError):
            await svc.update("", UpdateIncidentRequest())


@pytest.mark.asyncio
class TestClose:
    async def test_success(self, svc, transport) -> None:
        transport.do_json.return_value = _ok()
        await svc.close("inc-1", CloseIncidentRequest(reason="Resolved", notes="fixed"))
        request = _sent(transport)
        assert request.path == "/incident/close"
        assert request.body == {
            "id": "inc-1",
            "status": "Done",
            "closeReason": "Resolved",
            "closeNotes": "fixed",
        }

    async def test_without_request(self, svc, transport) -> None:
        transport.do_json.return_value = _ok()
        await svc.close("inc-1")
        assert _sent(transport).body == {"id": "inc-1", "status": "Done", "closeReason": ""}

    async def test_empty_id(self, svc, transport) -> None:
        with pytest.raises(ValidationError):
            await svc.close("")


@pytest.mark.asyncio
class TestDelete:
    async def test_success(self, svc, transport) -> None:
        transport.do_json.return_value = _ok()
        await svc.delete("inc-1")
        request = _sent(transport)
        assert request.path == "/incident/batchDelete"
        assert request.body == {"ids": ["inc-1"]}

    async def test_not_found(self, svc, transport) -> None:
        transport.do_json.return_value = _error(404)
        with pytest.raises(NotFoundError):
            await svc.delete("gone")

    async def test_empty_id(self, svc, transport) -> None:
        with pytest.raises(ValidationError):
            await svc.delete("")
