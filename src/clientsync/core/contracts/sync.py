"""Sync state, cache and outcome contracts."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from clientsync.core.contracts.record import MissingClient, Record


class ViewKind(StrEnum):
    BY_CITY = "by-city"
    MAP = "map"


class SyncPhase(StrEnum):
    IDLE = "idle"
    BOOTSTRAPPING = "bootstrapping"
    FULL_LOAD = "full-load"
    CHECKING_DELTA = "checking-delta"
    APPLYING_DELTA = "applying-delta"
    DELETION_ONLY = "deletion-only"
    RECONCILING_DELETIONS = "reconciling-deletions"
    STALE = "stale"
    FRESH = "fresh"
    ERROR = "error"


class CacheKey(BaseModel):
    """One durable cache slot: a dataset under one filter predicate."""

    model_config = ConfigDict(frozen=True)

    dataset: ViewKind
    frequent_only: bool = False

    @property
    def slug(self) -> str:
        suffix = ".frequent" if self.frequent_only else ""
        return f"{self.dataset.value}{suffix}"


class MapDiagnostics(BaseModel):
    total_with_coordinates: int = 0
    without_coordinates: int = 0
    missing_clients: list[MissingClient] = Field(default_factory=list)


class CacheEntry(BaseModel):
    """A self-consistent (snapshot, watermark) pair as written to durable storage."""

    version: int = 1
    key: CacheKey
    watermark: str
    records: list[Record] = Field(default_factory=list)
    diagnostics: MapDiagnostics | None = None


class SyncOutcome(BaseModel):
    """What one sync sequence did to a view."""

    generation: int
    phase: SyncPhase
    from_cache: bool = False
    full_load: bool = False
    discarded: bool = False
    upserted: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    watermark: str | None = None
    error: str | None = None

    @property
    def changed(self) -> bool:
        return bool(self.upserted or self.removed)
