"""Record store and derived index exports."""

from .base import IndexProjection
from .hierarchy import UNKNOWN_CITY, HierarchicalIndex, LeafPath, SectorView, path_for
from .markers import MarkerHandle, MarkerIndex, MarkerLayer, NullMarkerLayer, ReconcileStats, unchanged_fingerprint
from .snapshot import records_from_snapshot
from .store import RecordStore, UpsertResult

__all__ = [
    "UNKNOWN_CITY",
    "HierarchicalIndex",
    "IndexProjection",
    "LeafPath",
    "MarkerHandle",
    "MarkerIndex",
    "MarkerLayer",
    "NullMarkerLayer",
    "ReconcileStats",
    "RecordStore",
    "SectorView",
    "UpsertResult",
    "path_for",
    "records_from_snapshot",
    "unchanged_fingerprint",
]
