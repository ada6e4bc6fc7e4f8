"""Public API surface for clientsync."""

__version__ = "1.4.0"

from clientsync.core.classify import classify, sector_for
from clientsync.core.config import load_config
from clientsync.core.contracts.config import ClientSyncConfig
from clientsync.core.contracts.exceptions import (
    ClientSyncError,
    ConfigError,
    CorrectionError,
    PersistenceError,
    ServerError,
    ServerResponseError,
    SyncError,
    TransportError,
)
from clientsync.core.contracts.record import Coordinates, MissingClient, Record, RecordLocation, SectorTag
from clientsync.core.contracts.server import ClientServer
from clientsync.core.contracts.sync import CacheKey, MapDiagnostics, SyncOutcome, SyncPhase, ViewKind
from clientsync.core.engine import NullSyncProgress, SyncCoordinator, SyncProgress
from clientsync.core.index import HierarchicalIndex, MarkerIndex, MarkerLayer, RecordStore
from clientsync.core.persistence import JsonFileCache, MemoryCache, PersistenceAdapter
from clientsync.core.server import HttpClientServer
from clientsync.sdk import ClientSync, SyncReport, ViewState

__all__ = [
    "CacheKey",
    "ClientServer",
    "ClientSync",
    "ClientSyncConfig",
    "ClientSyncError",
    "ConfigError",
    "Coordinates",
    "CorrectionError",
    "HierarchicalIndex",
    "HttpClientServer",
    "JsonFileCache",
    "MapDiagnostics",
    "MarkerIndex",
    "MarkerLayer",
    "MemoryCache",
    "MissingClient",
    "NullSyncProgress",
    "PersistenceAdapter",
    "PersistenceError",
    "Record",
    "RecordLocation",
    "RecordStore",
    "SectorTag",
    "ServerError",
    "ServerResponseError",
    "SyncCoordinator",
    "SyncError",
    "SyncOutcome",
    "SyncPhase",
    "SyncProgress",
    "SyncReport",
    "TransportError",
    "ViewKind",
    "ViewState",
    "__version__",
    "classify",
    "load_config",
    "sector_for",
]
