"""
Image MIME types for data URLs.
"""

from __future__ import annotations

from pathlib import PurePath
from typing import Optional

IMAGE_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
}


def mime_type_for(path: PurePath | str) -> Optional[str]:
    """Return the image MIME type for a file extension, or None if unsupported."""
    return IMAGE_MIME_TYPES.get(PurePath(path).suffix.lower())
