"""Projection contract fed by the record store."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence

from clientsync.core.contracts.record import Record


class IndexProjection(ABC):
    """A derived view over the store's records.

    The store pushes every mutation into its attached projections so that a
    projection never has to diff the whole dataset to stay current.
    """

    @abstractmethod
    def rebuild(self, records: Iterable[Record]) -> None:
        """Replace all state with *records*."""
        ...  # pragma: no cover

    @abstractmethod
    def upsert(self, records: Sequence[Record]) -> None:
        """Insert or relocate each of *records*."""
        ...  # pragma: no cover

    @abstractmethod
    def remove(self, record_ids: Iterable[str]) -> None:
        """Drop every id in *record_ids*; unknown ids are ignored."""
        ...  # pragma: no cover
