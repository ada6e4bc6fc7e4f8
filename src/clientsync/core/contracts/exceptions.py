"""Exception hierarchy for clientsync."""

from __future__ import annotations


class ClientSyncError(Exception):
    """Base exception for all clientsync errors."""


class ConfigError(ClientSyncError):
    """Configuration loading or validation failure."""


class ServerError(ClientSyncError):
    """Base server-boundary failure."""


class TransportError(ServerError):
    """The request never produced a usable HTTP response."""


class ServerResponseError(ServerError):
    """The server answered, but not with a usable payload."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CorrectionError(ClientSyncError):
    """Single-record address correction failed; the local index was left untouched."""

    def __init__(self, message: str, *, record_id: str) -> None:
        super().__init__(message)
        self.record_id = record_id


class PersistenceError(ClientSyncError):
    """Durable cache write or clear failure."""


class SyncError(ClientSyncError):
    """Engine-level synchronization failure that leaves the view without data."""
