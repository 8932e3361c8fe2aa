"""
Bundle pipeline orchestration.
"""

from .executor import EntryNotFoundError, bundle, run_pipeline

__all__ = ["EntryNotFoundError", "bundle", "run_pipeline"]
