"""Address correction command."""

from __future__ import annotations

import argparse
import sys

from clientsync import CorrectionError, Record, ViewKind


def format_correction(record: Record) -> str:
    place = record.district or record.city or "-"
    return "\n".join(
        [
            "",
            "clientsync - address corrected",
            "",
            f"  Client:    {record.display_name or record.id}",
            f"  Address:   {record.address_line}",
            f"  Location:  {record.sector or '-'} / {place}",
            "",
        ]
    )


async def run_correct(args: argparse.Namespace) -> Record:
    """Correct one address; on failure reload the whole view before reporting the error."""
    import clientsync.cli as cli

    config = cli.load_config(args.config)
    view = ViewKind(args.view)
    client = await cli.ClientSync.from_config(config)

    try:
        record = await client.correct_address(view, args.client_id, args.address, frequent_only=args.frequent_only)
    except CorrectionError as exc:
        print(f"warning: {exc}; reloading {view.value}", file=sys.stderr)
        report = await client.sync(view, force=True, frequent_only=args.frequent_only)
        print(cli._format_summary(report))
        raise

    print(format_correction(record))
    return record


__all__ = ["format_correction", "run_correct"]
