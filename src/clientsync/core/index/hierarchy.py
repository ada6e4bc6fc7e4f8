"""Sector → city → district index over record ids."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field

from clientsync.core.classify.sector import sector_for
from clientsync.core.contracts.record import DISTRICT_SECTORS, Record, SectorTag
from clientsync.core.index.base import IndexProjection

_LOG = logging.getLogger(__name__)

UNKNOWN_CITY = "Ville inconnue"
_LAST_SECTOR = SectorTag.UNASSIGNED.value


@dataclass(frozen=True)
class LeafPath:
    """Where a record lives in the tree.

    District sectors (Montréal, Laval) carry no city; ``district=None`` there
    means the sector-level unassigned bucket. Elsewhere ``district=None`` means
    the city's own record list.
    """

    sector: str
    city: str | None = None
    district: str | None = None


def path_for(record: Record) -> LeafPath:
    sector = sector_for(record)
    if sector in DISTRICT_SECTORS:
        return LeafPath(sector=sector, district=record.district or None)
    return LeafPath(sector=sector, city=record.city.strip() or UNKNOWN_CITY, district=record.district or None)


@dataclass
class CityNode:
    name: str
    records: list[str] = field(default_factory=list)
    districts: dict[str, list[str]] = field(default_factory=dict)
    count: int = 0

    def recount(self) -> None:
        self.count = len(self.records) + sum(len(ids) for ids in self.districts.values())


@dataclass
class SectorNode:
    name: str
    unassigned: list[str] = field(default_factory=list)
    districts: dict[str, list[str]] = field(default_factory=dict)
    cities: dict[str, CityNode] = field(default_factory=dict)
    count: int = 0

    @property
    def by_district(self) -> bool:
        return self.name in DISTRICT_SECTORS

    def recount(self) -> None:
        direct = len(self.unassigned) + sum(len(ids) for ids in self.districts.values())
        self.count = direct + sum(city.count for city in self.cities.values())

    def is_empty(self) -> bool:
        return not (self.unassigned or self.districts or self.cities)


@dataclass(frozen=True)
class BucketView:
    name: str
    count: int
    record_ids: list[str]


@dataclass(frozen=True)
class CityView:
    name: str
    count: int
    record_ids: list[str]
    districts: list[BucketView]


@dataclass(frozen=True)
class SectorView:
    name: str
    count: int
    unassigned: list[str]
    districts: list[BucketView]
    cities: list[CityView]


def _by_count(name: str, count: int) -> tuple[int, str]:
    return (-count, name)


def _sector_order(view: SectorView) -> tuple[bool, int, str]:
    return (view.name == _LAST_SECTOR, -view.count, view.name)


class HierarchicalIndex(IndexProjection):
    """Tree of record ids keyed by (sector, city?, district?).

    Every id lives in exactly one leaf. An id→path map makes relocation a
    constant-time lookup followed by remove-then-insert.
    """

    def __init__(self) -> None:
        self._sectors: dict[str, SectorNode] = {}
        self._locations: dict[str, LeafPath] = {}

    def __len__(self) -> int:
        return len(self._locations)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._locations

    # -- IndexProjection ---------------------------------------------------

    def rebuild(self, records: Iterable[Record]) -> None:
        self._sectors = {}
        self._locations = {}
        for record in records:
            if record.id in self._locations:
                _LOG.warning("Duplicate record id %s in rebuild input; keeping first placement", record.id)
                continue
            self._insert(record.id, path_for(record))
        for sector in self._sectors.values():
            for city in sector.cities.values():
                city.recount()
            sector.recount()

    def upsert(self, records: Sequence[Record]) -> None:
        touched: set[tuple[str, str | None]] = set()
        for record in records:
            previous = self._detach(record.id)
            if previous is not None:
                touched.add((previous.sector, previous.city))
            path = path_for(record)
            self._insert(record.id, path)
            touched.add((path.sector, path.city))
        self._refresh(touched)

    def remove(self, record_ids: Iterable[str]) -> None:
        touched: set[tuple[str, str | None]] = set()
        for record_id in record_ids:
            previous = self._detach(record_id)
            if previous is not None:
                touched.add((previous.sector, previous.city))
        self._refresh(touched)

    # -- queries -----------------------------------------------------------

    def location_of(self, record_id: str) -> LeafPath | None:
        return self._locations.get(record_id)

    def sector(self, name: str) -> SectorNode | None:
        return self._sectors.get(name)

    def leaves(self) -> Iterator[tuple[LeafPath, list[str]]]:
        for sector in self._sectors.values():
            if sector.unassigned:
                yield LeafPath(sector=sector.name), sector.unassigned
            for district, ids in sector.districts.items():
                yield LeafPath(sector=sector.name, district=district), ids
            for city in sector.cities.values():
                if city.records:
                    yield LeafPath(sector=sector.name, city=city.name), city.records
                for district, ids in city.districts.items():
                    yield LeafPath(sector=sector.name, city=city.name, district=district), ids

    def leaf(self, path: LeafPath) -> list[str]:
        bucket = self._bucket(path, create=False)
        return list(bucket) if bucket is not None else []

    def total(self) -> int:
        return sum(sector.count for sector in self._sectors.values())

    def sector_counts(self) -> dict[str, int]:
        return {name: sector.count for name, sector in self._sectors.items()}

    def project(self) -> dict[str, list[str]]:
        """City → ids, sector level dropped. District sectors collapse under the sector name."""
        flat: dict[str, list[str]] = {}
        for path, ids in self.leaves():
            city = path.city if path.city is not None else path.sector
            flat.setdefault(city, []).extend(ids)
        return flat

    def ordered(self) -> list[SectorView]:
        views: list[SectorView] = []
        for sector in self._sectors.values():
            districts = sorted(
                (BucketView(name, len(ids), list(ids)) for name, ids in sector.districts.items()),
                key=lambda bucket: _by_count(bucket.name, bucket.count),
            )
            cities = sorted(
                (
                    CityView(
                        name=city.name,
                        count=city.count,
                        record_ids=list(city.records),
                        districts=sorted(
                            (BucketView(name, len(ids), list(ids)) for name, ids in city.districts.items()),
                            key=lambda bucket: _by_count(bucket.name, bucket.count),
                        ),
                    )
                    for city in sector.cities.values()
                ),
                key=lambda city: _by_count(city.name, city.count),
            )
            views.append(
                SectorView(
                    name=sector.name,
                    count=sector.count,
                    unassigned=list(sector.unassigned),
                    districts=districts,
                    cities=cities,
                )
            )
        return sorted(views, key=_sector_order)

    # -- internals ---------------------------------------------------------

    def _bucket(self, path: LeafPath, *, create: bool) -> list[str] | None:
        sector = self._sectors.get(path.sector)
        if sector is None:
            if not create:
                return None
            sector = self._sectors[path.sector] = SectorNode(name=path.sector)

        if path.city is None:
            if path.district is None:
                return sector.unassigned
            if create:
                return sector.districts.setdefault(path.district, [])
            return sector.districts.get(path.district)

        city = sector.cities.get(path.city)
        if city is None:
            if not create:
                return None
            city = sector.cities[path.city] = CityNode(name=path.city)
        if path.district is None:
            return city.records
        if create:
            return city.districts.setdefault(path.district, [])
        return city.districts.get(path.district)

    def _insert(self, record_id: str, path: LeafPath) -> None:
        bucket = self._bucket(path, create=True)
        assert bucket is not None
        bucket.append(record_id)
        self._locations[record_id] = path

    def _detach(self, record_id: str) -> LeafPath | None:
        path = self._locations.pop(record_id, None)
        if path is None:
            return None
        bucket = self._bucket(path, create=False)
        if bucket is not None and record_id in bucket:
            bucket.remove(record_id)
        self._prune(path)
        return path

    def _prune(self, path: LeafPath) -> None:
        sector = self._sectors.get(path.sector)
        if sector is None:
            return
        if path.city is None:
            if path.district is not None and not sector.districts.get(path.district, True):
                del sector.districts[path.district]
        else:
            city = sector.cities.get(path.city)
            if city is not None:
                if path.district is not None and not city.districts.get(path.district, True):
                    del city.districts[path.district]
                if not city.records and not city.districts:
                    del sector.cities[path.city]
        if sector.is_empty():
            del self._sectors[path.sector]

    def _refresh(self, touched: set[tuple[str, str | None]]) -> None:
        for sector_name, city_name in touched:
            sector = self._sectors.get(sector_name)
            if sector is None:
                continue
            if city_name is not None:
                city = sector.cities.get(city_name)
                if city is not None:
                    city.recount()
        for sector_name in {sector_name for sector_name, _ in touched}:
            sector = self._sectors.get(sector_name)
            if sector is not None:
                sector.recount()
