"""Core contracts-domain exports."""

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
from clientsync.core.contracts.record import (
    DISTRICT_SECTORS,
    Coordinates,
    MissingClient,
    Record,
    RecordLocation,
    SectorTag,
)
from clientsync.core.contracts.server import ClientServer
from clientsync.core.contracts.sync import CacheEntry, CacheKey, MapDiagnostics, SyncOutcome, SyncPhase, ViewKind

__all__ = [
    "DISTRICT_SECTORS",
    "CacheEntry",
    "CacheKey",
    "ClientServer",
    "ClientSyncConfig",
    "ClientSyncError",
    "ConfigError",
    "Coordinates",
    "CorrectionError",
    "MapDiagnostics",
    "MissingClient",
    "PersistenceError",
    "Record",
    "RecordLocation",
    "SectorTag",
    "ServerError",
    "ServerResponseError",
    "SyncError",
    "SyncOutcome",
    "SyncPhase",
    "TransportError",
    "ViewKind",
]
