from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from clientsync.core.contracts.exceptions import ServerResponseError, TransportError
from clientsync.core.server import HttpClientServer

BASE_URL = "https://api.test/api"


def _server(handler: Callable[[httpx.Request], httpx.Response]) -> HttpClientServer:
    return HttpClientServer(BASE_URL, max_retries=0, transport=httpx.MockTransport(handler))


def _client(record_id: str, **extra: object) -> dict[str, object]:
    return {
        "_id": record_id,
        "givenName": "Marie",
        "familyName": "Tremblay",
        "addressLine1": "4500 boul. Samson",
        "coordinates": {"lat": 45.55, "lng": -73.8},
        "city": "Laval",
        **extra,
    }


class TestRequests:
    @pytest.mark.asyncio
    async def test_fetch_by_city_sends_filter_only_when_enabled(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"success": True, "data": {}, "totalClients": 0})

        async with _server(handler) as server:
            await server.fetch_by_city()
            await server.fetch_by_city(frequent_only=True)

        assert seen[0].url.path == "/api/clients/by-city"
        assert "frequentOnly" not in seen[0].url.params
        assert seen[1].url.params["frequentOnly"] == "true"

    @pytest.mark.asyncio
    async def test_fetch_changes_parses_upserts(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/clients/by-city-changes"
            assert request.url.params["since"] == "2024-05-01T10:00:01.000Z"
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "hasChanges": True,
                    "lastUpdate": "2024-05-01T10:00:02.000Z",
                    "clientsForByCity": [_client("1", district="Sainte-Dorothée", sector="Laval")],
                },
            )

        async with _server(handler) as server:
            changes = await server.fetch_changes("2024-05-01T10:00:01.000Z")

        assert changes.has_changes
        assert changes.last_update == "2024-05-01T10:00:02.000Z"
        assert changes.clients_for_by_city is not None
        (record,) = changes.clients_for_by_city
        assert record.id == "1"
        assert record.address_line == "4500 boul. Samson"
        assert record.district == "Sainte-Dorothée"

    @pytest.mark.asyncio
    async def test_fetch_for_map_accepts_flattened_records(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "clients": [{"_id": "7", "name": "Chez Marie", "address": "1 rue A", "coordinates": None}],
                    "totalWithCoordinates": 0,
                    "withoutCoordinates": 1,
                    "missingClients": [{"_id": "8", "name": "X", "address": "", "reason": "hors carte"}],
                },
            )

        async with _server(handler) as server:
            payload = await server.fetch_for_map()

        (record,) = payload.clients
        assert record.display_name == "Chez Marie"
        assert record.address_line == "1 rue A"
        assert payload.missing_clients[0].id == "8"

    @pytest.mark.asyncio
    async def test_fetch_last_update(self) -> None:
        paths: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return httpx.Response(200, json={"success": True, "lastUpdate": "2024-05-01T11:00:00.000Z"})

        async with _server(handler) as server:
            last = await server.fetch_last_update()

        assert paths == ["/api/clients/last-update"]
        assert last.last_update == "2024-05-01T11:00:00.000Z"

    @pytest.mark.asyncio
    async def test_update_single_client_posts_body(self) -> None:
        bodies: list[dict[str, object]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "POST"
            assert request.url.path == "/api/clients/update-single-client"
            bodies.append(json.loads(request.content))
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "client": _client("1", district="Sainte-Dorothée"),
                    "location": {"sector": "Laval", "city": "Laval", "district": "Sainte-Dorothée"},
                },
            )

        async with _server(handler) as server:
            response = await server.update_single_client("1", "4500 boul. Samson")

        assert bodies == [{"clientId": "1", "newAddress": "4500 boul. Samson"}]
        assert response.location is not None
        assert response.location.district == "Sainte-Dorothée"


class TestErrors:
    @pytest.mark.asyncio
    async def test_http_error_status_raises_with_status_code(self) -> None:
        async with _server(lambda request: httpx.Response(404, json={"success": False})) as server:
            with pytest.raises(ServerResponseError) as exc_info:
                await server.fetch_last_update()

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_success_false_raises(self) -> None:
        payload = {"success": False, "error": "Client not found"}
        async with _server(lambda request: httpx.Response(200, json=payload)) as server:
            with pytest.raises(ServerResponseError, match="Client not found"):
                await server.update_single_client("404", "nowhere")

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self) -> None:
        async with _server(lambda request: httpx.Response(200, content=b"<html>")) as server:
            with pytest.raises(ServerResponseError, match="invalid JSON"):
                await server.fetch_by_city()

    @pytest.mark.asyncio
    async def test_schema_mismatch_raises(self) -> None:
        async with _server(lambda request: httpx.Response(200, json={"success": True, "clients": "nope"})) as server:
            with pytest.raises(ServerResponseError, match="unexpected payload"):
                await server.fetch_for_map()

    @pytest.mark.asyncio
    async def test_network_failure_raises_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _server(handler) as server:
            with pytest.raises(TransportError):
                await server.fetch_changes("2024-05-01T10:00:01.000Z")

    @pytest.mark.asyncio
    async def test_use_outside_context_is_an_error(self) -> None:
        with pytest.raises(RuntimeError):
            await HttpClientServer(BASE_URL).fetch_last_update()
