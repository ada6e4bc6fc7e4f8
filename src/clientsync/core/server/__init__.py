"""Server boundary implementations."""

from .http import HttpClientServer

__all__ = ["HttpClientServer"]
