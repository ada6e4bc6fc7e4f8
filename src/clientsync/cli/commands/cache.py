"""Cache maintenance command."""

from __future__ import annotations

import argparse

from clientsync import CacheKey, ClientSync, JsonFileCache, ViewKind
from clientsync.core.server import HttpClientServer


def run_cache_clear(args: argparse.Namespace) -> CacheKey:
    import clientsync.cli as cli

    config = cli.load_config(args.config)
    cache = JsonFileCache(config.cache_dir)
    client = ClientSync(server=HttpClientServer(config.base_url), cache=cache, config=config)
    key = client.clear_cache(ViewKind(args.view), frequent_only=args.frequent_only)
    print(f"Cleared {cache.path_for(key)}")
    return key


__all__ = ["run_cache_clear"]
