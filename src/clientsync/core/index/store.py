"""In-memory record snapshot plus synchronization watermark."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

from clientsync.core.contracts.record import Record
from clientsync.core.index.base import IndexProjection
from clientsync.core.index.hierarchy import HierarchicalIndex

_LOG = logging.getLogger(__name__)


@dataclass
class UpsertResult:
    added: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)

    @property
    def applied(self) -> list[str]:
        return [*self.added, *self.updated]


class RecordStore:
    """Authoritative local copy of one view's dataset.

    Mutations go through :meth:`bootstrap`, :meth:`apply_upserts` and
    :meth:`prune_deleted`; each is pushed into every attached projection. The
    watermark is only ever set to a value handed in by the caller, which in
    turn only passes values the server returned.
    """

    def __init__(self, projections: Sequence[IndexProjection] | None = None) -> None:
        self._records: dict[str, Record] = {}
        self._watermark: str | None = None
        self._projections: list[IndexProjection] = list(projections or [])

    def attach(self, projection: IndexProjection) -> None:
        projection.rebuild(self._records.values())
        self._projections.append(projection)

    @property
    def watermark(self) -> str | None:
        return self._watermark

    @property
    def hierarchy(self) -> HierarchicalIndex | None:
        for projection in self._projections:
            if isinstance(projection, HierarchicalIndex):
                return projection
        return None

    def size(self) -> int:
        return len(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def get(self, record_id: str) -> Record | None:
        return self._records.get(record_id)

    def ids(self) -> set[str]:
        return set(self._records)

    def records(self) -> list[Record]:
        return list(self._records.values())

    def bootstrap(self, records: Iterable[Record], watermark: str | None) -> None:
        snapshot: dict[str, Record] = {}
        for record in records:
            snapshot.setdefault(record.id, record)
        self._records = snapshot
        self._watermark = watermark
        for projection in self._projections:
            projection.rebuild(self._records.values())
        _LOG.debug("Bootstrapped store with %d records (watermark=%s)", len(snapshot), watermark)

    def apply_upserts(
        self, records: Sequence[Record], *, on_item: Callable[[str], None] | None = None
    ) -> UpsertResult:
        """Insert or relocate *records*; *on_item* is called once per input record."""
        result = UpsertResult()
        changed: dict[str, Record] = {}
        for record in records:
            current = changed.get(record.id) or self._records.get(record.id)
            if current is None:
                result.added.append(record.id)
                changed[record.id] = record
            elif current == record:
                result.unchanged.append(record.id)
            else:
                if record.id not in changed:
                    result.updated.append(record.id)
                changed[record.id] = record
            if on_item is not None:
                on_item(record.id)

        if not changed:
            return result
        self._records.update(changed)
        batch = list(changed.values())
        for projection in self._projections:
            projection.upsert(batch)
        return result

    def remove(self, record_ids: Iterable[str]) -> list[str]:
        removed = [record_id for record_id in dict.fromkeys(record_ids) if record_id in self._records]
        if not removed:
            return []
        for record_id in removed:
            del self._records[record_id]
        for projection in self._projections:
            projection.remove(removed)
        return removed

    def prune_deleted(self, authoritative_ids: set[str] | frozenset[str] | None) -> list[str]:
        """Remove every record absent from *authoritative_ids*.

        ``None`` (fetch failed) and an empty set are both refusals: an empty
        authoritative answer never means "everything was deleted".
        """
        if not authoritative_ids:
            if self._records:
                _LOG.warning("Refusing to prune %d records against an empty authoritative id set", len(self))
            return []
        stale = [record_id for record_id in self._records if record_id not in authoritative_ids]
        return self.remove(stale)

    def adopt_watermark(self, watermark: str) -> None:
        self._watermark = watermark

    def project(self) -> dict[str, list[Record]]:
        """City → records, derived from the hierarchy on every call."""
        hierarchy = self.hierarchy
        if hierarchy is None:
            flat: dict[str, list[Record]] = {}
            for record in self._records.values():
                flat.setdefault(record.city, []).append(record)
            return flat
        return {city: [self._records[i] for i in ids] for city, ids in hierarchy.project().items()}
