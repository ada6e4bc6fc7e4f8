"""Config loading exports."""

from .loader import load_config

__all__ = ["load_config"]
