"""Shared CLI formatting helpers."""

from __future__ import annotations

from clientsync import SyncReport


def format_counts(values: dict[str, int]) -> str:
    if not values:
        return "none"
    return ", ".join(f"{name} {count}" for name, count in values.items())


def format_sync_summary(report: SyncReport) -> str:
    slot = f"{report.view.value}{' (frequent only)' if report.frequent_only else ''}"
    if report.full_load:
        source = "full reload"
    elif report.from_cache:
        source = "cache + delta check"
    else:
        source = "delta check"

    lines = [
        "",
        f"clientsync - {slot} {report.phase.value}",
        "",
        f"  Source:    {source}",
        f"  Watermark: {report.watermark or 'none'}",
        f"  Clients:   {report.total}",
        f"  Sectors:   {format_counts(report.sectors)}",
    ]
    if not report.full_load:
        if report.upserted or report.removed:
            lines.append(f"  Changes:   {len(report.upserted)} upserted, {len(report.removed)} removed")
        else:
            lines.append("  Changes:   none")
    if report.view.value == "map":
        lines.append(f"  Unmapped:  {report.unmapped}")
        if report.diagnostics is not None and report.diagnostics.missing_clients:
            lines.append(f"  Missing:   {len(report.diagnostics.missing_clients)} not placed on the map")
    if report.error:
        lines.append("")
        lines.append(f"  [stale] {report.error}")
    lines.append("")
    return "\n".join(lines)
