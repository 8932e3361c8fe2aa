"""
Filesystem helpers shared across pipeline modules.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def ensure_directory(path: Path | str) -> Path:
    """
    Ensure a directory exists, returning the resolved Path.
    """
    resolved = Path(path).expanduser().resolve()
    resolved.mkdir(parents=True, exist_ok=True)
    return resolved


def _ensure_parent(target: Path) -> None:
    """Ensure the parent directory for target exists."""
    if target.parent and not target.parent.exists():
        target.parent.mkdir(parents=True, exist_ok=True)


def _atomic_write_text(target: Path, content: str, encoding: str) -> None:
    """Write text atomically by staging a temp file and renaming."""
    _ensure_parent(target)
    fd, tmp_path = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, target)
    finally:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.debug("Failed to remove temp file %s (%s)", tmp_path, exc)


def read_text_file(path: Path | str, encoding: str = "utf-8") -> str:
    """Read a whole text file."""
    return Path(path).read_text(encoding=encoding)


def write_text_file(path: Path | str, content: str, encoding: str = "utf-8") -> Path:
    """
    Replace the contents of a text file in one step, creating parent directories as needed.

    Readers never observe a partially written file.
    """
    target = Path(path).expanduser().resolve()
    _atomic_write_text(target, content, encoding=encoding)
    return target
