"""Flatten the server's hierarchical by-city payload into records."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import ValidationError

from clientsync.core.contracts.exceptions import ServerResponseError
from clientsync.core.contracts.record import DISTRICT_SECTORS, Record

_LOG = logging.getLogger(__name__)


def _bucket_records(raw: Any) -> Iterator[dict[str, Any]]:
    if not isinstance(raw, list):
        return
    for entry in raw:
        if isinstance(entry, dict):
            yield entry


def _placed(entry: dict[str, Any], **placement: str | None) -> Record:
    try:
        return Record.model_validate({**entry, **{k: v for k, v in placement.items() if v is not None}})
    except ValidationError as exc:
        raise ServerResponseError(f"invalid record in by-city snapshot: {exc}") from exc


def _city_records(sector: str, city: str, node: Mapping[str, Any]) -> Iterator[Record]:
    for entry in _bucket_records(node.get("clients")):
        yield _placed(entry, sector=sector, city=city)
    districts = node.get("districts") or {}
    if isinstance(districts, dict):
        for district, bucket in districts.items():
            for entry in _bucket_records(bucket):
                yield _placed(entry, sector=sector, city=city, district=district)


def records_from_snapshot(data: Mapping[str, Any]) -> list[Record]:
    """Records from ``{sector: ...}`` with sector/city/district taken from their position.

    Montréal and Laval nodes are ``{districts, clients}``; every other sector
    maps city names to ``{clients, districts?}``. Position wins over the
    record's own fields so a record's leaf is exactly where the server put it.
    """
    seen: dict[str, Record] = {}
    for sector, node in data.items():
        if not isinstance(node, dict):
            continue
        if sector in DISTRICT_SECTORS and ("districts" in node or "clients" in node):
            records = _district_sector_records(sector, node)
        else:
            records = (
                record
                for city, city_node in node.items()
                if isinstance(city_node, dict)
                for record in _city_records(sector, city, city_node)
            )
        for record in records:
            if record.id in seen:
                _LOG.warning("Record %s appears twice in by-city snapshot; keeping first", record.id)
                continue
            seen[record.id] = record
    return list(seen.values())


def _district_sector_records(sector: str, node: Mapping[str, Any]) -> Iterator[Record]:
    for entry in _bucket_records(node.get("clients")):
        record = _placed(entry, sector=sector)
        yield record.model_copy(update={"district": None})
    districts = node.get("districts") or {}
    if isinstance(districts, dict):
        for district, bucket in districts.items():
            for entry in _bucket_records(bucket):
                yield _placed(entry, sector=sector, district=district)
