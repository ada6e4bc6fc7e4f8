"""Durable cache exports."""

from .cache import JsonFileCache, MemoryCache, PersistenceAdapter

__all__ = ["JsonFileCache", "MemoryCache", "PersistenceAdapter"]
