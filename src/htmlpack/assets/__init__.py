"""
Residual asset handling: locating, inlining and path fixing.
"""

from .css_paths import fix_background_image_paths
from .inliner import collect_references, inline_assets, to_data_url
from .locator import (
    AssetCategory,
    AssetKind,
    AssetNotFoundError,
    AssetReference,
    ResolvedAsset,
    classify_reference,
    locate_asset,
    root_resolver,
)
from .mime import IMAGE_MIME_TYPES, mime_type_for

__all__ = [
    "fix_background_image_paths",
    "collect_references",
    "inline_assets",
    "to_data_url",
    "AssetCategory",
    "AssetKind",
    "AssetNotFoundError",
    "AssetReference",
    "ResolvedAsset",
    "classify_reference",
    "locate_asset",
    "root_resolver",
    "IMAGE_MIME_TYPES",
    "mime_type_for",
]
