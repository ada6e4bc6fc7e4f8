"""Rich-based sync progress display."""

from __future__ import annotations

from types import TracebackType
from typing import ClassVar

from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.progress import TaskID as RichTaskID

from clientsync.core.engine.progress import SyncProgress


class RichSyncProgress(SyncProgress):
    """One terminal row per sync phase, ending with what it did to the local copy.

    A run that only confirmed the cache reads ``Cache 12 cached`` then
    ``Delta check up to date``; a run that moved data shows the upserted and
    removed counts on the ``Upserts`` and ``Deletions`` rows. A phase that
    runs again within the same display gets a fresh row::

        with RichSyncProgress() as progress:
            report = await client.sync(ViewKind.MAP)
    """

    _ROWS: ClassVar[dict[str, tuple[str, str]]] = {
        "Bootstrap": ("Cache", "cyan"),
        "Full load": ("Full load", "green"),
        "Check": ("Delta check", "blue"),
        "Apply": ("Upserts", "magenta"),
        "Reconcile": ("Deletions", "yellow"),
    }

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)
        self._progress = Progress(
            SpinnerColumn(finished_text="[green]✓[/green]"),
            TextColumn("{task.description:>12}"),
            BarColumn(bar_width=24),
            MofNCompleteColumn(),
            TextColumn("{task.fields[detail]}"),
            TimeElapsedColumn(),
            console=self._console,
            transient=False,
        )
        self._rows: dict[str, RichTaskID] = {}

    def __enter__(self) -> RichSyncProgress:
        self._progress.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self._progress.stop()

    def phase_start(self, phase: str, total: int | None = None) -> None:
        name, color = self._ROWS.get(phase, (phase, "white"))
        self._rows[phase] = self._progress.add_task(f"[{color}]{name}[/]", total=total, detail="")

    def item_done(self, phase: str) -> None:
        row = self._rows.get(phase)
        if row is not None:
            self._progress.advance(row)

    def phase_done(self, phase: str, detail: str | None = None) -> None:
        row = self._rows.get(phase)
        if row is None:
            return
        task = self._progress.tasks[row]
        total = task.total if task.total is not None else 1
        self._progress.update(row, total=total, completed=total, detail=escape(detail or ""))

    def phase_error(self, phase: str, error: BaseException) -> None:
        row = self._rows.get(phase)
        if row is None:
            return
        name, _ = self._ROWS.get(phase, (phase, "white"))
        self._progress.update(
            row,
            description=f"[red]✗ {name}[/red]",
            detail=f"[red]{escape(str(error))}[/red] (cached data kept)",
        )
