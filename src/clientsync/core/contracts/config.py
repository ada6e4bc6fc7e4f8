"""Runtime configuration contract."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class ClientSyncConfig(BaseModel):
    """Settings shared by the server adapter, the durable cache and the coordinators.

    Attributes:
        base_url: API root, e.g. ``https://api.example.com/api``.
        cache_dir: Directory holding one JSON file per cache slot.
        frequent_only: Default filter predicate for both views.
        timeout: Per-request timeout in seconds.
        max_retries: Retry budget for transient transport failures.
        check_on_activate: Run a delta check right after a cache hit.
    """

    base_url: str
    cache_dir: Path = Path(".clientsync-cache")
    frequent_only: bool = False
    timeout: float = Field(default=30.0, gt=0)
    max_retries: int = Field(default=3, ge=0)
    check_on_activate: bool = True
