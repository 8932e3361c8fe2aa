"""
Text-related helpers.
"""

from __future__ import annotations


def byte_length(text: str) -> int:
    """Size of text once encoded as UTF-8."""
    return len(text.encode("utf-8"))


def format_kb(size_bytes: int) -> str:
    """Render a byte count as kilobytes with two decimals, e.g. ``12.34 KB``."""
    return f"{size_bytes / 1024:.2f} KB"


def size_reduction_percent(original: int, reduced: int) -> float:
    """
    Percentage saved going from original to reduced, rounded to one decimal.

    An empty original counts as no reduction.
    """
    if original <= 0:
        return 0.0
    return round((original - reduced) / original * 100, 1)
