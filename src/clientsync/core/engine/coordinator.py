"""Bootstrap, delta-check, incremental apply and deletion reconciliation for one view."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from clientsync.core.contracts.exceptions import CorrectionError, PersistenceError, ServerError
from clientsync.core.contracts.record import Record
from clientsync.core.contracts.server import ChangesResponse, ClientServer
from clientsync.core.contracts.sync import CacheEntry, CacheKey, MapDiagnostics, SyncOutcome, SyncPhase, ViewKind
from clientsync.core.engine.progress import NullSyncProgress, SyncProgress
from clientsync.core.index.snapshot import records_from_snapshot
from clientsync.core.index.store import RecordStore
from clientsync.core.persistence.cache import PersistenceAdapter

_LOG = logging.getLogger(__name__)

PHASE_BOOTSTRAP = "Bootstrap"
PHASE_FULL_LOAD = "Full load"
PHASE_CHECK = "Check"
PHASE_APPLY = "Apply"
PHASE_RECONCILE = "Reconcile"


class SyncCoordinator:
    """Keeps one mounted view's :class:`RecordStore` consistent with the server.

    Every sequence captures a generation number when it starts. Results are
    applied only while that generation is still current, so a late answer from
    a superseded background check can never overwrite a forced reload. Only
    one sequence runs at a time; :meth:`force_reload` is the single way to
    start a new one while another is in flight.
    """

    def __init__(
        self,
        server: ClientServer,
        cache: PersistenceAdapter,
        store: RecordStore,
        *,
        view: ViewKind,
        frequent_only: bool = False,
        check_on_activate: bool = True,
        progress: SyncProgress | None = None,
    ) -> None:
        self._server = server
        self._cache = cache
        self._store = store
        self._view = view
        self._key = CacheKey(dataset=view, frequent_only=frequent_only)
        self._check_on_activate = check_on_activate
        self._progress: SyncProgress = progress or NullSyncProgress()

        self._generation = 0
        self._in_flight: int | None = None
        self._phase = SyncPhase.IDLE
        self._diagnostics: MapDiagnostics | None = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def phase(self) -> SyncPhase:
        return self._phase

    @property
    def in_flight(self) -> bool:
        return self._in_flight is not None

    @property
    def store(self) -> RecordStore:
        return self._store

    @property
    def key(self) -> CacheKey:
        return self._key

    @property
    def diagnostics(self) -> MapDiagnostics | None:
        return self._diagnostics

    # -- entry points ------------------------------------------------------

    async def activate(self) -> SyncOutcome:
        """Render from memory or cache immediately, then confirm against the server."""
        if self._in_flight is not None:
            _LOG.debug("Sync generation %d already in flight; activation ignored", self._in_flight)
            return SyncOutcome(generation=self._in_flight, phase=self._phase, discarded=True)

        generation = self._begin()
        try:
            if self._store.watermark is None and self._store.size() == 0:
                if not self._bootstrap_from_cache():
                    return await self._full_load(generation)
            elif self._phase is SyncPhase.IDLE:
                self._phase = SyncPhase.STALE
            if not self._check_on_activate:
                return self._outcome(generation, from_cache=True)
            return await self._check_delta(generation, from_cache=True)
        finally:
            self._end(generation)

    async def check(self) -> SyncOutcome:
        """User-requested delta check; a no-op while another sequence runs."""
        if self._in_flight is not None:
            return SyncOutcome(generation=self._in_flight, phase=self._phase, discarded=True)
        generation = self._begin()
        try:
            return await self._check_delta(generation, from_cache=False)
        finally:
            self._end(generation)

    async def force_reload(self) -> SyncOutcome:
        """Supersede any in-flight sequence and reload the whole dataset."""
        if self._in_flight is not None:
            _LOG.info("Force reload supersedes sync generation %d", self._in_flight)
        generation = self._begin()
        try:
            return await self._full_load(generation)
        finally:
            self._end(generation)

    async def retry(self) -> SyncOutcome:
        return await self.force_reload()

    def teardown(self) -> None:
        """View unmounted: invalidate in-flight work and release the guard."""
        self._generation += 1
        self._in_flight = None
        self._phase = SyncPhase.IDLE

    async def correct_address(self, record_id: str, new_address: str) -> Record:
        """Re-geocode one record server-side and relocate it locally in one step.

        Raises:
            CorrectionError: The server call failed or returned no usable
                record. Nothing local was touched; callers should fall back to
                :meth:`force_reload`.
        """
        try:
            response = await self._server.update_single_client(record_id, new_address)
        except ServerError as exc:
            raise CorrectionError(f"address correction failed for {record_id}: {exc}", record_id=record_id) from exc
        if not response.success or response.client is None or response.location is None:
            raise CorrectionError(
                f"address correction for {record_id} returned no usable record", record_id=record_id
            )

        location = response.location
        record = response.client.model_copy(
            update={
                "sector": location.sector,
                "city": location.city or response.client.city,
                "district": location.district or None,
            }
        )
        if self._is_relevant(record):
            self._store.apply_upserts([record])
        else:
            self._store.remove([record.id])
        # The server has not confirmed a new watermark; keep the old one and stay stale.
        if self._phase is SyncPhase.FRESH:
            self._phase = SyncPhase.STALE
        self._persist()
        return record

    # -- sequences ---------------------------------------------------------

    def _bootstrap_from_cache(self) -> bool:
        self._phase = SyncPhase.BOOTSTRAPPING
        self._progress.phase_start(PHASE_BOOTSTRAP)
        entry = self._cache.load(self._key)
        if entry is None:
            self._progress.phase_done(PHASE_BOOTSTRAP, detail="no cache")
            return False
        self._store.bootstrap(entry.records, entry.watermark)
        self._diagnostics = entry.diagnostics
        self._phase = SyncPhase.STALE
        self._progress.phase_done(PHASE_BOOTSTRAP, detail=f"{len(entry.records)} cached")
        _LOG.debug("Bootstrapped %s from cache (%d records)", self._key.slug, len(entry.records))
        return True

    async def _full_load(self, generation: int) -> SyncOutcome:
        self._phase = SyncPhase.FULL_LOAD
        self._progress.phase_start(PHASE_FULL_LOAD)
        try:
            # Watermark first: anything changing during the load is re-delivered by the next check.
            watermark = (await self._server.fetch_last_update()).last_update
            records, diagnostics = await self._fetch_dataset()
        except ServerError as exc:
            self._progress.phase_error(PHASE_FULL_LOAD, exc)
            if not self._is_current(generation):
                return self._discarded(generation)
            _LOG.warning("Full load of %s failed: %s", self._key.slug, exc)
            self._phase = SyncPhase.ERROR
            return self._outcome(generation, full_load=True, error=str(exc))

        if not self._is_current(generation):
            return self._discarded(generation)

        self._store.bootstrap(records, watermark)
        self._diagnostics = diagnostics
        self._persist()
        self._phase = SyncPhase.FRESH if watermark is not None else SyncPhase.STALE
        self._progress.phase_done(PHASE_FULL_LOAD, detail=f"{len(records)} clients")
        return self._outcome(generation, full_load=True)

    async def _check_delta(self, generation: int, *, from_cache: bool) -> SyncOutcome:
        watermark = self._store.watermark
        if watermark is None:
            return await self._full_load(generation)

        self._phase = SyncPhase.CHECKING_DELTA
        self._progress.phase_start(PHASE_CHECK)
        try:
            changes = await self._server.fetch_changes(watermark)
        except ServerError as exc:
            return self._absorb(generation, PHASE_CHECK, exc, from_cache=from_cache)
        if not self._is_current(generation):
            return self._discarded(generation)
        self._progress.phase_done(PHASE_CHECK, detail="changes" if changes.has_changes else "up to date")

        if not changes.has_changes:
            if changes.last_update:
                self._store.adopt_watermark(changes.last_update)
                self._persist()
            self._phase = SyncPhase.FRESH
            return self._outcome(generation, from_cache=from_cache)

        return await self._apply_delta(generation, changes, from_cache=from_cache)

    async def _apply_delta(self, generation: int, changes: ChangesResponse, *, from_cache: bool) -> SyncOutcome:
        incoming = changes.clients_for_by_city or []
        upserts = [record for record in incoming if self._is_relevant(record)]
        evicted = [record.id for record in incoming if not self._is_relevant(record)]

        upserted: list[str] = []
        if upserts:
            self._phase = SyncPhase.APPLYING_DELTA
            self._progress.phase_start(PHASE_APPLY, total=len(upserts))
            upserted = self._store.apply_upserts(upserts, on_item=self._record_applied).applied
            self._progress.phase_done(PHASE_APPLY, detail=f"{len(upserted)} upserted")
        else:
            self._phase = SyncPhase.DELETION_ONLY
        removed = self._store.remove(evicted)

        # The view's own full source is the authoritative id set for this view and filter.
        self._phase = SyncPhase.RECONCILING_DELETIONS
        self._progress.phase_start(PHASE_RECONCILE)
        try:
            authoritative, diagnostics = await self._fetch_dataset()
        except ServerError as exc:
            if self._is_current(generation):
                self._persist()
            return self._absorb(
                generation, PHASE_RECONCILE, exc, from_cache=from_cache, upserted=upserted, removed=removed
            )
        if not self._is_current(generation):
            return self._discarded(generation)

        removed.extend(self._store.prune_deleted({record.id for record in authoritative}))
        if diagnostics is not None:
            self._diagnostics = diagnostics
        if changes.last_update:
            self._store.adopt_watermark(changes.last_update)
        self._persist()
        self._phase = SyncPhase.FRESH
        self._progress.phase_done(PHASE_RECONCILE, detail=f"{len(removed)} removed")
        _LOG.info(
            "Delta for %s applied: %d upserted, %d removed", self._key.slug, len(upserted), len(removed)
        )
        return self._outcome(generation, from_cache=from_cache, upserted=upserted, removed=removed)

    async def _fetch_dataset(self) -> tuple[list[Record], MapDiagnostics | None]:
        frequent_only = self._key.frequent_only
        if self._view is ViewKind.BY_CITY:
            by_city = await self._server.fetch_by_city(frequent_only=frequent_only)
            return records_from_snapshot(by_city.data), None
        for_map = await self._server.fetch_for_map(frequent_only=frequent_only)
        diagnostics = MapDiagnostics(
            total_with_coordinates=for_map.total_with_coordinates,
            without_coordinates=for_map.without_coordinates,
            missing_clients=for_map.missing_clients,
        )
        if for_map.missing_clients:
            _LOG.warning("%d client(s) with coordinates are not placed on the map", len(for_map.missing_clients))
        return list(for_map.clients), diagnostics

    # -- helpers -----------------------------------------------------------

    def _begin(self) -> int:
        self._generation += 1
        self._in_flight = self._generation
        return self._generation

    def _end(self, generation: int) -> None:
        if self._in_flight == generation:
            self._in_flight = None

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _record_applied(self, record_id: str) -> None:
        self._progress.item_done(PHASE_APPLY)

    def _is_relevant(self, record: Record) -> bool:
        return not (self._key.frequent_only and record.is_frequent is False)

    def _persist(self) -> None:
        watermark = self._store.watermark
        if watermark is None:
            _LOG.debug("No server watermark yet; %s kept in memory only", self._key.slug)
            return
        entry = CacheEntry(
            key=self._key,
            watermark=watermark,
            records=self._store.records(),
            diagnostics=self._diagnostics,
        )
        try:
            self._cache.save(entry)
        except PersistenceError as exc:
            _LOG.warning("Cache write for %s failed; continuing from memory: %s", self._key.slug, exc)

    def _absorb(
        self,
        generation: int,
        phase: str,
        error: ServerError,
        *,
        from_cache: bool,
        upserted: Sequence[str] = (),
        removed: Sequence[str] = (),
    ) -> SyncOutcome:
        self._progress.phase_error(phase, error)
        if not self._is_current(generation):
            return self._discarded(generation)
        _LOG.warning("%s for %s failed, keeping cached data: %s", phase, self._key.slug, error)
        self._phase = SyncPhase.STALE
        return self._outcome(
            generation, from_cache=from_cache, upserted=list(upserted), removed=list(removed), error=str(error)
        )

    def _discarded(self, generation: int) -> SyncOutcome:
        _LOG.debug("Discarding result of superseded generation %d (current %d)", generation, self._generation)
        return SyncOutcome(generation=generation, phase=self._phase, discarded=True)

    def _outcome(
        self,
        generation: int,
        *,
        from_cache: bool = False,
        full_load: bool = False,
        upserted: list[str] | None = None,
        removed: list[str] | None = None,
        error: str | None = None,
    ) -> SyncOutcome:
        return SyncOutcome(
            generation=generation,
            phase=self._phase,
            from_cache=from_cache,
            full_load=full_load,
            upserted=upserted or [],
            removed=removed or [],
            watermark=self._store.watermark,
            error=error,
        )
