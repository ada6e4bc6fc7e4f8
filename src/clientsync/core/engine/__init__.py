"""Sync coordination exports."""

from .coordinator import SyncCoordinator
from .progress import NullSyncProgress, SyncProgress

__all__ = ["NullSyncProgress", "SyncCoordinator", "SyncProgress"]
