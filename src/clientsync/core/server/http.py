"""HTTP adapter for the client API."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError

from clientsync.core.contracts.exceptions import ServerResponseError, TransportError
from clientsync.core.contracts.server import (
    ByCityResponse,
    ChangesResponse,
    ClientServer,
    CorrectionResponse,
    ForMapResponse,
    LastUpdateResponse,
)
from clientsync.core.server._retrying_transport import RetryingTransport

_LOG = logging.getLogger(__name__)

_PayloadT = TypeVar(
    "_PayloadT",
    ByCityResponse,
    ChangesResponse,
    CorrectionResponse,
    ForMapResponse,
    LastUpdateResponse,
)


class HttpClientServer(ClientServer):
    """:class:`ClientServer` over ``httpx``.

    Usage::

        async with HttpClientServer("https://api.example.com/api") as server:
            changes = await server.fetch_changes(watermark)
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_retries = max_retries
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> HttpClientServer:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=RetryingTransport(transport=self._transport, max_retries=self._max_retries),
            headers={"Accept": "application/json"},
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_by_city(self, *, frequent_only: bool = False) -> ByCityResponse:
        return await self._get("/clients/by-city", ByCityResponse, params=_filter_params(frequent_only))

    async def fetch_for_map(self, *, frequent_only: bool = False) -> ForMapResponse:
        return await self._get("/clients/for-map", ForMapResponse, params=_filter_params(frequent_only))

    async def fetch_changes(self, since: str) -> ChangesResponse:
        return await self._get("/clients/by-city-changes", ChangesResponse, params={"since": since})

    async def fetch_last_update(self) -> LastUpdateResponse:
        return await self._get("/clients/last-update", LastUpdateResponse)

    async def update_single_client(self, client_id: str, new_address: str) -> CorrectionResponse:
        body = {"clientId": client_id, "newAddress": new_address}
        return await self._request("POST", "/clients/update-single-client", CorrectionResponse, json=body)

    async def _get(
        self, path: str, model: type[_PayloadT], *, params: dict[str, str] | None = None
    ) -> _PayloadT:
        return await self._request("GET", path, model, params=params)

    async def _request(
        self,
        method: str,
        path: str,
        model: type[_PayloadT],
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> _PayloadT:
        if self._client is None:
            raise RuntimeError("HttpClientServer used outside of 'async with'")

        _LOG.debug("%s %s params=%s", method, path, params)
        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {path} failed: {exc}") from exc

        if response.is_error:
            raise ServerResponseError(
                f"{method} {path} returned HTTP {response.status_code}", status_code=response.status_code
            )
        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise ServerResponseError(
                f"{method} {path} returned invalid JSON", status_code=response.status_code
            ) from exc
        if not isinstance(payload, dict):
            raise ServerResponseError(
                f"{method} {path} returned a non-object payload", status_code=response.status_code
            )
        if payload.get("success") is False:
            message = payload.get("error") or payload.get("message") or "success=false"
            raise ServerResponseError(f"{method} {path} failed: {message}", status_code=response.status_code)
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise ServerResponseError(
                f"{method} {path} returned an unexpected payload: {exc}", status_code=response.status_code
            ) from exc


def _filter_params(frequent_only: bool) -> dict[str, str] | None:
    return {"frequentOnly": "true"} if frequent_only else None
