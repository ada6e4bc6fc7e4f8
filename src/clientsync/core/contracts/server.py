"""Server boundary contract and response payloads."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from clientsync.core.contracts.record import MissingClient, Record, RecordLocation


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    success: bool
    error: str | None = None


class ByCityResponse(_Payload):
    data: dict[str, Any] = Field(default_factory=dict)
    total_clients: int = Field(default=0, alias="totalClients")


class ChangesResponse(_Payload):
    has_changes: bool = Field(default=False, alias="hasChanges")
    last_update: str | None = Field(default=None, alias="lastUpdate")
    clients_for_by_city: list[Record] | None = Field(default=None, alias="clientsForByCity")


class ForMapResponse(_Payload):
    clients: list[Record] = Field(default_factory=list)
    total_with_coordinates: int = Field(default=0, alias="totalWithCoordinates")
    without_coordinates: int = Field(default=0, alias="withoutCoordinates")
    missing_clients: list[MissingClient] = Field(default_factory=list, alias="missingClients")


class LastUpdateResponse(_Payload):
    last_update: str | None = Field(default=None, alias="lastUpdate")


class CorrectionResponse(_Payload):
    client: Record | None = None
    location: RecordLocation | None = None


class ClientServer(ABC):
    @abstractmethod
    async def __aenter__(self) -> ClientServer: ...  # pragma: no cover

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...  # pragma: no cover

    @abstractmethod
    async def fetch_by_city(self, *, frequent_only: bool = False) -> ByCityResponse: ...  # pragma: no cover

    @abstractmethod
    async def fetch_for_map(self, *, frequent_only: bool = False) -> ForMapResponse: ...  # pragma: no cover

    @abstractmethod
    async def fetch_changes(self, since: str) -> ChangesResponse: ...  # pragma: no cover

    @abstractmethod
    async def fetch_last_update(self) -> LastUpdateResponse: ...  # pragma: no cover

    @abstractmethod
    async def update_single_client(
        self, client_id: str, new_address: str
    ) -> CorrectionResponse: ...  # pragma: no cover
