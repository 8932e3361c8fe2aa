"""
Package HTML pages and their local assets into a single file.
"""

from importlib import metadata as _metadata

try:
    __version__ = _metadata.version("htmlpack")
except _metadata.PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

from .pipeline import EntryNotFoundError, bundle

__all__ = ["__version__", "EntryNotFoundError", "bundle"]
