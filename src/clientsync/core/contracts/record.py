"""Client record contracts."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class SectorTag(StrEnum):
    MONTREAL = "Montréal"
    LAVAL = "Laval"
    RIVE_NORD = "Rive Nord"
    RIVE_SUD = "Rive Sud"
    OTHER = "Autres"
    UNASSIGNED = "Non assignés"


# Sectors whose cities are a single metropolitan entity: indexed by district, no city level.
DISTRICT_SECTORS = frozenset({SectorTag.MONTREAL.value, SectorTag.LAVAL.value})


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


class Record(BaseModel):
    """A single address-bearing client, as the server last reported it.

    Field aliases follow the server's JSON naming so that payloads and persisted
    cache entries validate directly. The map endpoint's flattened shape
    (``name``/``address``) is accepted as well.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    given_name: str = Field(default="", alias="givenName")
    family_name: str = Field(default="", alias="familyName")
    phone_number: str | None = Field(default=None, alias="phoneNumber")
    address_line: str = Field(
        default="",
        validation_alias=AliasChoices("addressLine1", "address", "address_line"),
        serialization_alias="addressLine1",
    )
    coordinates: Coordinates | None = None
    city: str = ""
    district: str | None = None
    sector: str | None = None
    is_frequent: bool | None = Field(default=None, alias="isFrequent")

    @model_validator(mode="before")
    @classmethod
    def _accept_map_shape(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if "name" in data and "givenName" not in data and "given_name" not in data:
            data = {**data, "givenName": data["name"] or ""}
            data.pop("name")
        for key in ("givenName", "familyName", "addressLine1", "address", "city"):
            if key in data and data[key] is None:
                data = {**data, key: ""}
        if not data.get("district"):
            data = {**data, "district": None}
        return data

    @property
    def display_name(self) -> str:
        return f"{self.given_name} {self.family_name}".strip()

    @property
    def has_coordinates(self) -> bool:
        return self.coordinates is not None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class RecordLocation(BaseModel):
    """Server-resolved placement returned by the address correction endpoint."""

    sector: str
    city: str | None = None
    district: str | None = None


class MissingClient(BaseModel):
    """Map diagnostics: a client with coordinates the server could not place on the map."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    name: str = ""
    address: str = ""
    reason: str = ""
