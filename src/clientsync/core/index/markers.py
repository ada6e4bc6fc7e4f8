"""Identity-preserving marker projection for the map view."""

from __future__ import annotations

import hashlib
import json
import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from clientsync.core.classify.sector import sector_for
from clientsync.core.contracts.record import Record, SectorTag
from clientsync.core.index.base import IndexProjection

_LOG = logging.getLogger(__name__)


class MarkerLayer(Protocol):
    """Rendering boundary. Implementations own the visual marker objects."""

    def create(self, record: Record) -> Any: ...

    def move(self, handle: Any, lat: float, lng: float) -> None: ...

    def refresh(self, handle: Any, record: Record) -> None: ...

    def remove(self, handle: Any) -> None: ...


class NullMarkerLayer:
    """No-op layer used when nothing renders the markers."""

    def create(self, record: Record) -> Any:
        return None

    def move(self, handle: Any, lat: float, lng: float) -> None:
        pass

    def refresh(self, handle: Any, record: Record) -> None:
        pass

    def remove(self, handle: Any) -> None:
        pass


@dataclass
class MarkerHandle:
    record_id: str
    lat: float
    lng: float
    record: Record
    handle: Any = None


@dataclass
class ReconcileStats:
    created: int = 0
    moved: int = 0
    refreshed: int = 0
    removed: int = 0
    unchanged: int = 0
    unmapped: int = 0

    @property
    def destructive(self) -> int:
        return self.created + self.removed


def unchanged_fingerprint(records: Iterable[Record]) -> str:
    """Order-independent digest over (id, lat, lng, name, address) of the visible set.

    A repeated id counts once, last occurrence wins, as it would on the map.
    """
    latest = {record.id: record for record in records}
    rows = [
        [
            record.id,
            record.coordinates.lat if record.coordinates else None,
            record.coordinates.lng if record.coordinates else None,
            record.display_name,
            record.address_line,
        ]
        for _, record in sorted(latest.items())
    ]
    norm = json.dumps(rows, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(norm.encode("utf-8")).hexdigest()


class MarkerIndex(IndexProjection):
    """One marker handle per record with coordinates.

    Records without coordinates are kept in :attr:`unmapped` for diagnostics
    and never get a marker.
    """

    unchanged_fingerprint = staticmethod(unchanged_fingerprint)

    def __init__(self, layer: MarkerLayer | None = None) -> None:
        self._layer: MarkerLayer = layer or NullMarkerLayer()
        self._markers: dict[str, MarkerHandle] = {}
        self.unmapped: dict[str, Record] = {}
        self._fingerprint: str | None = None
        self._rendered_fingerprint: str | None = None

    def __len__(self) -> int:
        return len(self._markers)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._markers

    def get(self, record_id: str) -> MarkerHandle | None:
        return self._markers.get(record_id)

    @property
    def fingerprint(self) -> str | None:
        return self._fingerprint

    def reconcile(self, records: Sequence[Record]) -> ReconcileStats:
        """Bring the marker set in line with *records*, the full visible set."""
        fingerprint = unchanged_fingerprint(records)
        if fingerprint == self._fingerprint and self._content_matches(records):
            return ReconcileStats(unchanged=len(self._markers), unmapped=len(self.unmapped))

        stats = ReconcileStats()
        incoming: set[str] = set()
        self.unmapped = {}
        for record in records:
            incoming.add(record.id)
            self._place(record, stats)
        for record_id in [record_id for record_id in self._markers if record_id not in incoming]:
            self._drop(record_id)
            stats.removed += 1
        stats.unmapped = len(self.unmapped)
        self._fingerprint = fingerprint
        if stats.destructive or stats.moved:
            _LOG.debug(
                "Markers reconciled: %d created, %d moved, %d removed", stats.created, stats.moved, stats.removed
            )
        return stats

    # -- IndexProjection ---------------------------------------------------

    def rebuild(self, records: Iterable[Record]) -> None:
        self.reconcile(list(records))

    def upsert(self, records: Sequence[Record]) -> None:
        stats = ReconcileStats()
        for record in records:
            self._place(record, stats)
        self._fingerprint = None

    def remove(self, record_ids: Iterable[str]) -> None:
        for record_id in record_ids:
            self.unmapped.pop(record_id, None)
            if record_id in self._markers:
                self._drop(record_id)
        self._fingerprint = None

    # -- render bookkeeping ------------------------------------------------

    def needs_full_render(self, records: Iterable[Record]) -> bool:
        """False when *records* match what was last rendered; the layer may skip recentering."""
        return unchanged_fingerprint(records) != self._rendered_fingerprint

    def mark_rendered(self, records: Iterable[Record]) -> None:
        self._rendered_fingerprint = unchanged_fingerprint(records)

    def sector_stats(self) -> dict[str, int]:
        counts = Counter(
            sector_for(marker.record) if marker.record.sector or marker.record.city else SectorTag.UNASSIGNED.value
            for marker in self._markers.values()
        )
        return dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))

    # -- internals ---------------------------------------------------------

    def _content_matches(self, records: Sequence[Record]) -> bool:
        for record in records:
            marker = self._markers.get(record.id)
            current = marker.record if marker is not None else self.unmapped.get(record.id)
            if current != record:
                return False
        return True

    def _place(self, record: Record, stats: ReconcileStats) -> None:
        coordinates = record.coordinates
        if coordinates is None:
            self.unmapped[record.id] = record
            if record.id in self._markers:
                self._drop(record.id)
                stats.removed += 1
            return
        self.unmapped.pop(record.id, None)

        marker = self._markers.get(record.id)
        if marker is None:
            handle = self._layer.create(record)
            self._markers[record.id] = MarkerHandle(record.id, coordinates.lat, coordinates.lng, record, handle)
            stats.created += 1
            return

        if (marker.lat, marker.lng) != (coordinates.lat, coordinates.lng):
            self._layer.move(marker.handle, coordinates.lat, coordinates.lng)
            marker.lat, marker.lng = coordinates.lat, coordinates.lng
            stats.moved += 1
        elif marker.record == record:
            stats.unchanged += 1
            return
        if marker.record.model_copy(update={"coordinates": record.coordinates}) != record:
            self._layer.refresh(marker.handle, record)
            stats.refreshed += 1
        marker.record = record

    def _drop(self, record_id: str) -> None:
        marker = self._markers.pop(record_id)
        self._layer.remove(marker.handle)
