"""CLI parser construction."""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version

_VIEWS = ("by-city", "map")


def _package_version() -> str:
    try:
        return version("clientsync")
    except PackageNotFoundError:
        return "0.0.0"


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", default="./clientsync.json", help="Path to clientsync.json")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")


def _add_filter(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--frequent-only",
        action="store_true",
        default=None,
        help="Use the frequent-clients slot instead of the config default",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="clientsync")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    sync_parser = subparsers.add_parser("sync", help="Bring a view's local index up to date")
    sync_parser.add_argument("--view", choices=_VIEWS, default="by-city", help="View to synchronize")
    sync_parser.add_argument("--force", action="store_true", help="Discard the cache and reload everything")
    _add_filter(sync_parser)
    _add_common(sync_parser)

    correct_parser = subparsers.add_parser("correct", help="Correct one client's address")
    correct_parser.add_argument("--client-id", required=True, help="Client record id")
    correct_parser.add_argument("--address", required=True, help="New address line")
    correct_parser.add_argument("--view", choices=_VIEWS, default="by-city", help="View to update")
    _add_filter(correct_parser)
    _add_common(correct_parser)

    cache_parser = subparsers.add_parser("cache", help="Durable cache operations")
    cache_subparsers = cache_parser.add_subparsers(dest="cache_command", required=True)
    clear_parser = cache_subparsers.add_parser("clear", help="Delete a view's cache slot")
    clear_parser.add_argument("--view", choices=_VIEWS, required=True, help="View whose slot is cleared")
    _add_filter(clear_parser)
    _add_common(clear_parser)

    return parser


__all__ = ["build_parser"]
