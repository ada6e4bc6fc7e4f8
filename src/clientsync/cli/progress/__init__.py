"""CLI progress displays."""

from .rich import RichSyncProgress

__all__ = ["RichSyncProgress"]
