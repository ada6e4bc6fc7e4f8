"""Sync command."""

from __future__ import annotations

import argparse

from clientsync import SyncReport, ViewKind
from clientsync.cli.progress.rich import RichSyncProgress


async def run_sync(args: argparse.Namespace) -> SyncReport:
    import clientsync.cli as cli

    config = cli.load_config(args.config)
    view = ViewKind(args.view)

    if not args.verbose:
        with RichSyncProgress() as progress:
            client = await cli.ClientSync.from_config(config, progress=progress)
            report = await client.sync(view, force=args.force, frequent_only=args.frequent_only)
    else:
        client = await cli.ClientSync.from_config(config)
        report = await client.sync(view, force=args.force, frequent_only=args.frequent_only)

    print(cli._format_summary(report))
    return report


__all__ = ["run_sync"]
