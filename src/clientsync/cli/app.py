"""CLI app entrypoint and error mapping."""

from __future__ import annotations

import sys

from clientsync import ConfigError, CorrectionError, ServerError, SyncError


def main(argv: list[str] | None = None) -> int:
    import clientsync.cli as cli

    parser = cli.build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        cli.logging.basicConfig(level=cli.logging.DEBUG, format="%(name)s %(message)s", stream=sys.stderr)

    try:
        if args.command == "sync":
            cli.asyncio.run(cli._run_sync(args))
        elif args.command == "correct":
            cli.asyncio.run(cli._run_correct(args))
        elif args.command == "cache":
            if args.cache_command != "clear":
                print(f"error: unsupported cache command: {args.cache_command}", file=sys.stderr)
                return 2
            cli._run_cache_clear(args)
        return 0
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 3
    except ServerError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 4
    except (SyncError, CorrectionError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 5
    except Exception as exc:  # pragma: no cover - last-resort mapping to exit code 1
        print(f"error: {exc}", file=sys.stderr)
        return 1


__all__ = ["main"]
