"""SDK composition root for clientsync."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic import BaseModel, Field

from clientsync.core.contracts.config import ClientSyncConfig
from clientsync.core.contracts.exceptions import SyncError
from clientsync.core.contracts.record import Record
from clientsync.core.contracts.server import ClientServer
from clientsync.core.contracts.sync import CacheKey, MapDiagnostics, SyncOutcome, SyncPhase, ViewKind
from clientsync.core.engine import SyncCoordinator, SyncProgress
from clientsync.core.index import HierarchicalIndex, MarkerIndex, MarkerLayer, RecordStore
from clientsync.core.persistence import JsonFileCache, PersistenceAdapter
from clientsync.core.server import HttpClientServer

_LOG = logging.getLogger(__name__)


class SyncReport(BaseModel):
    """Summary of one view after a sync call."""

    view: ViewKind
    frequent_only: bool = False
    phase: SyncPhase
    generation: int
    from_cache: bool = False
    full_load: bool = False
    upserted: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    watermark: str | None = None
    total: int = 0
    sectors: dict[str, int] = Field(default_factory=dict)
    unmapped: int = 0
    diagnostics: MapDiagnostics | None = None
    error: str | None = None


@dataclass
class ViewState:
    coordinator: SyncCoordinator
    store: RecordStore
    hierarchy: HierarchicalIndex | None = None
    markers: MarkerIndex | None = None


class ClientSync:
    """clientsync SDK public API.

    One coordinator per (view, filter) pair lives as long as this object, so
    repeated calls reuse the in-memory index and only the first one touches
    the durable cache.
    """

    def __init__(
        self,
        *,
        server: ClientServer,
        cache: PersistenceAdapter,
        config: ClientSyncConfig,
        progress: SyncProgress | None = None,
        marker_layer: MarkerLayer | None = None,
    ) -> None:
        self._server = server
        self._cache = cache
        self._config = config
        self._progress = progress
        self._marker_layer = marker_layer
        self._views: dict[CacheKey, ViewState] = {}

    @classmethod
    async def from_config(
        cls,
        config: ClientSyncConfig,
        *,
        progress: SyncProgress | None = None,
        marker_layer: MarkerLayer | None = None,
    ) -> ClientSync:
        server = HttpClientServer(config.base_url, timeout=config.timeout, max_retries=config.max_retries)
        return cls(
            server=server,
            cache=JsonFileCache(config.cache_dir),
            config=config,
            progress=progress,
            marker_layer=marker_layer,
        )

    def view(self, kind: ViewKind, *, frequent_only: bool | None = None) -> ViewState:
        key = self._key(kind, frequent_only)
        state = self._views.get(key)
        if state is None:
            state = self._views[key] = self._build_view(key)
        return state

    async def sync(self, kind: ViewKind, *, force: bool = False, frequent_only: bool | None = None) -> SyncReport:
        """Activate the view (cache, then delta check) or force a full reload.

        Raises:
            SyncError: The view ended in the error state with nothing to show.
        """
        state = self.view(kind, frequent_only=frequent_only)
        async with self._server:
            if force:
                outcome = await state.coordinator.force_reload()
            else:
                outcome = await state.coordinator.activate()
        if outcome.phase is SyncPhase.ERROR:
            raise SyncError(f"{kind.value} sync failed: {outcome.error}")
        return self._report(kind, state, outcome)

    async def correct_address(
        self, kind: ViewKind, client_id: str, new_address: str, *, frequent_only: bool | None = None
    ) -> Record:
        """Re-geocode one record and relocate it in the view's index.

        The view is bootstrapped first when it has not been activated yet so
        the corrected record lands in the cached snapshot rather than an empty one.
        """
        state = self.view(kind, frequent_only=frequent_only)
        async with self._server:
            if state.coordinator.phase is SyncPhase.IDLE:
                await state.coordinator.activate()
            return await state.coordinator.correct_address(client_id, new_address)

    def clear_cache(self, kind: ViewKind, *, frequent_only: bool | None = None) -> CacheKey:
        key = self._key(kind, frequent_only)
        state = self._views.pop(key, None)
        if state is not None:
            state.coordinator.teardown()
        self._cache.clear(key)
        _LOG.info("Cleared cache slot %s", key.slug)
        return key

    def _key(self, kind: ViewKind, frequent_only: bool | None) -> CacheKey:
        flag = self._config.frequent_only if frequent_only is None else frequent_only
        return CacheKey(dataset=kind, frequent_only=flag)

    def _build_view(self, key: CacheKey) -> ViewState:
        hierarchy: HierarchicalIndex | None = None
        markers: MarkerIndex | None = None
        if key.dataset is ViewKind.BY_CITY:
            hierarchy = HierarchicalIndex()
            store = RecordStore([hierarchy])
        else:
            markers = MarkerIndex(self._marker_layer)
            store = RecordStore([markers])
        coordinator = SyncCoordinator(
            self._server,
            self._cache,
            store,
            view=key.dataset,
            frequent_only=key.frequent_only,
            check_on_activate=self._config.check_on_activate,
            progress=self._progress,
        )
        return ViewState(coordinator=coordinator, store=store, hierarchy=hierarchy, markers=markers)

    @staticmethod
    def _report(kind: ViewKind, state: ViewState, outcome: SyncOutcome) -> SyncReport:
        if state.hierarchy is not None:
            sectors = {sector.name: sector.count for sector in state.hierarchy.ordered()}
            unmapped = 0
        else:
            assert state.markers is not None
            sectors = state.markers.sector_stats()
            unmapped = len(state.markers.unmapped)
        return SyncReport(
            view=kind,
            frequent_only=state.coordinator.key.frequent_only,
            phase=outcome.phase,
            generation=outcome.generation,
            from_cache=outcome.from_cache,
            full_load=outcome.full_load,
            upserted=outcome.upserted,
            removed=outcome.removed,
            watermark=outcome.watermark,
            total=state.store.size(),
            sectors=sectors,
            unmapped=unmapped,
            diagnostics=state.coordinator.diagnostics,
            error=outcome.error,
        )
