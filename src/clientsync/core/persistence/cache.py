"""Durable (snapshot, watermark) cache slots."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from clientsync.core.contracts.exceptions import PersistenceError
from clientsync.core.contracts.sync import CacheEntry, CacheKey

_LOG = logging.getLogger(__name__)


class PersistenceAdapter(ABC):
    """Key/value store local to the running client.

    ``load`` never raises for bad content: an absent or unparsable slot is an
    empty cache. ``save`` writes the whole entry or nothing.
    """

    @abstractmethod
    def load(self, key: CacheKey) -> CacheEntry | None: ...  # pragma: no cover

    @abstractmethod
    def save(self, entry: CacheEntry) -> None: ...  # pragma: no cover

    @abstractmethod
    def clear(self, key: CacheKey) -> None: ...  # pragma: no cover


class MemoryCache(PersistenceAdapter):
    def __init__(self) -> None:
        self._slots: dict[str, str] = {}

    def load(self, key: CacheKey) -> CacheEntry | None:
        raw = self._slots.get(key.slug)
        if raw is None:
            return None
        return _parse_entry(raw, key=key, source="memory")

    def save(self, entry: CacheEntry) -> None:
        self._slots[entry.key.slug] = entry.model_dump_json(by_alias=True)

    def clear(self, key: CacheKey) -> None:
        self._slots.pop(key.slug, None)


class JsonFileCache(PersistenceAdapter):
    """One JSON file per slot under *directory*, replaced atomically on save."""

    def __init__(self, directory: Path) -> None:
        self._directory = directory

    def path_for(self, key: CacheKey) -> Path:
        return self._directory / f"{key.slug}.json"

    def load(self, key: CacheKey) -> CacheEntry | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            _LOG.warning("Could not read cache file %s: %s", path, exc)
            return None
        return _parse_entry(raw, key=key, source=str(path))

    def save(self, entry: CacheEntry) -> None:
        path = self.path_for(entry.key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(entry.model_dump_json(by_alias=True, indent=2))
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise PersistenceError(f"failed to persist cache slot: {path}") from exc

    def clear(self, key: CacheKey) -> None:
        path = self.path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceError(f"failed to clear cache slot: {path}") from exc


def _parse_entry(raw: str, *, key: CacheKey, source: str) -> CacheEntry | None:
    try:
        payload: Any = json.loads(raw)
        entry = CacheEntry.model_validate(payload)
    except (json.JSONDecodeError, ValidationError) as exc:
        _LOG.warning("Ignoring unparsable cache slot %s: %s", source, exc)
        return None
    if entry.key != key:
        _LOG.warning("Ignoring cache slot %s written for %s", source, entry.key.slug)
        return None
    return entry
