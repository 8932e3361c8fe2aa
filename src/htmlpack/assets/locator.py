"""
Classify asset references and find the files they point at.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence, Union
from urllib.parse import unquote

if TYPE_CHECKING:
    from bs4 import Tag

EXTERNAL_PREFIXES = ("http://", "https://", "//")
DATA_PREFIX = "data:"


class AssetCategory(str, Enum):
    SCRIPT = "script"
    STYLESHEET = "stylesheet"
    IMAGE = "image"


class AssetKind(str, Enum):
    EXTERNAL = "external"
    EMBEDDED = "embedded"
    LOCAL = "local"


class AssetNotFoundError(LookupError):
    """Raised when no candidate location holds the referenced file."""

    def __init__(self, reference: str, tried: Sequence[Path]) -> None:
        tried_list = ", ".join(str(path) for path in tried) or "no candidates"
        super().__init__(f"{reference} not found (tried: {tried_list})")
        self.reference = reference
        self.tried = list(tried)


@dataclass(frozen=True)
class AssetReference:
    """
    A tag that points at an asset.

    Attributes:
        category: Script, stylesheet, or image.
        value: Raw ``src``/``href`` attribute value.
        node: The parsed tag carrying the reference.
    """
    category: AssetCategory
    value: str
    node: Optional["Tag"] = None

    @property
    def kind(self) -> AssetKind:
        return classify_reference(self.value, self.category)


@dataclass(frozen=True)
class ResolvedAsset:
    """A local reference together with the file it resolved to and its contents."""
    reference: AssetReference
    path: Path
    content: Union[str, bytes]


Resolver = Callable[[str], Optional[Path]]


def classify_reference(value: str, category: AssetCategory) -> AssetKind:
    """
    Classify a reference value.

    Absolute and protocol-relative URLs are external. ``data:`` URLs are
    embedded for images only; everything else is local.
    """
    lowered = value.strip().lower()
    if lowered.startswith(EXTERNAL_PREFIXES):
        return AssetKind.EXTERNAL
    if category is AssetCategory.IMAGE and lowered.startswith(DATA_PREFIX):
        return AssetKind.EMBEDDED
    return AssetKind.LOCAL


def reference_to_relative_path(value: str) -> str:
    """
    Turn a reference into a path relative to a candidate root.

    Drops query strings and fragments, decodes percent escapes, and treats a
    leading slash as relative to the root rather than to the filesystem.
    """
    path_part = value.strip().split("#", 1)[0].split("?", 1)[0]
    return unquote(path_part).lstrip("/")


def root_resolver(directory: Path | str) -> Resolver:
    """Build a resolver that looks for references beneath ``directory``."""
    base = Path(directory)

    def resolve(value: str) -> Optional[Path]:
        try:
            return (base / reference_to_relative_path(value)).resolve()
        except ValueError:
            # embedded NUL bytes cannot name a file
            return None

    return resolve


def locate_asset(reference: str, resolvers: Sequence[Resolver]) -> Path:
    """
    Return the first candidate path that is an existing file.

    Args:
        reference: Raw reference value from the document.
        resolvers: Candidate resolvers in priority order.

    Raises:
        AssetNotFoundError: If every candidate is missing.
    """
    tried: List[Path] = []
    for resolver in resolvers:
        candidate = resolver(reference)
        if candidate is None:
            continue
        if candidate.is_file():
            return candidate
        tried.append(candidate)
    raise AssetNotFoundError(reference, tried)
