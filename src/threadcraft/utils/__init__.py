"""Utility modules for threadcraft."""

from .text import TRUNCATION_MARKER, truncate

__all__ = [
    "TRUNCATION_MARKER",
    "truncate",
]
