"""Progress reporting protocol for sync sequences.

The coordinator emits phase lifecycle events; consumers (e.g. the CLI's Rich
progress display) implement ``SyncProgress`` to render feedback.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class SyncProgress(ABC):
    """Observer interface for sync sequence progress events."""

    @abstractmethod
    def phase_start(self, phase: str, total: int | None = None) -> None:
        """A phase is starting. *total* is ``None`` for indeterminate phases."""
        ...  # pragma: no cover

    @abstractmethod
    def item_done(self, phase: str) -> None:
        """One record within *phase* has been applied."""
        ...  # pragma: no cover

    @abstractmethod
    def phase_done(self, phase: str, detail: str | None = None) -> None:
        """The *phase* has finished; *detail* summarizes what it changed."""
        ...  # pragma: no cover

    @abstractmethod
    def phase_error(self, phase: str, error: BaseException) -> None:
        """The *phase* was interrupted by *error*; cached data is still shown."""
        ...  # pragma: no cover


class NullSyncProgress(SyncProgress):
    """No-op implementation used when no progress display is requested."""

    def phase_start(self, phase: str, total: int | None = None) -> None:
        pass

    def item_done(self, phase: str) -> None:
        pass

    def phase_done(self, phase: str, detail: str | None = None) -> None:
        pass

    def phase_error(self, phase: str, error: BaseException) -> None:
        pass
