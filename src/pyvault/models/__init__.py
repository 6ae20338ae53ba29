"""Data models for pyvault."""

from pyvault.models.entry import MANUAL_SOURCE, Entry

__all__ = [
    "MANUAL_SOURCE",
    "Entry",
]
