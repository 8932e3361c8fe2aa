"""
Shared utility helpers for filesystem access, subprocesses, and formatting.
"""

from .execute import ExecutionError, ExecutionResult, execute
from .filesystem import ensure_directory, read_text_file, write_text_file
from .text import byte_length, format_kb, size_reduction_percent

__all__ = [
    "ExecutionError",
    "ExecutionResult",
    "execute",
    "ensure_directory",
    "read_text_file",
    "write_text_file",
    "byte_length",
    "format_kb",
    "size_reduction_percent",
]
