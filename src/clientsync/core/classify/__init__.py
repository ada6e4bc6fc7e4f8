"""Sector classification exports."""

from .sector import RIVE_NORD_CITIES, RIVE_SUD_CITIES, classify, sector_for

__all__ = ["RIVE_NORD_CITIES", "RIVE_SUD_CITIES", "classify", "sector_for"]
