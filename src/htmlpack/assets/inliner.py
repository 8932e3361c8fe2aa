"""
Inline local scripts, stylesheets and images into an HTML document.
"""

from __future__ import annotations

import base64
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, Tag
from bs4.element import Script, Stylesheet

from ..reporting import LoggingReporter, Reporter, Stage
from .locator import (
    AssetCategory,
    AssetKind,
    AssetNotFoundError,
    AssetReference,
    ResolvedAsset,
    Resolver,
    locate_asset,
    root_resolver,
)
from .mime import mime_type_for

logger = logging.getLogger(__name__)

_LABELS = {
    AssetCategory.SCRIPT: "JavaScript file",
    AssetCategory.STYLESHEET: "CSS file",
    AssetCategory.IMAGE: "image",
}


def inline_assets(
    html: str,
    root_dir: Path | str,
    *,
    js: bool = True,
    css: bool = True,
    images: bool = True,
    dist_dir: Path | str | None = None,
    reporter: Optional[Reporter] = None,
) -> str:
    """
    Return ``html`` with its local assets embedded.

    Scripts are handled first, then stylesheets, then images, each in document
    order. A reference that cannot be inlined is left untouched and reported
    as a warning; it never stops the remaining work.

    Args:
        html: Document text.
        root_dir: Directory that local references are relative to.
        js: Replace ``<script src>`` with inline scripts.
        css: Replace ``<link rel="stylesheet">`` with ``<style>`` blocks.
        images: Replace ``<img src>`` values with base64 data URLs.
        dist_dir: Fallback directory for stylesheets produced by the bundler
            (defaults to ``<root_dir>/dist``).
        reporter: Receives progress and warnings.

    Returns:
        The serialized document.
    """
    reporter = reporter or LoggingReporter()
    root = Path(root_dir)
    dist = Path(dist_dir) if dist_dir is not None else root / "dist"
    soup = BeautifulSoup(html, "html.parser")

    if js:
        reporter.info("Inlining JavaScript files...", Stage.INLINE)
        _apply(_plan_scripts(soup, [root_resolver(root)], reporter))
    else:
        reporter.info("Skipping JavaScript inlining (inlineJs=false)", Stage.INLINE)

    if css:
        reporter.info("Inlining CSS files...", Stage.INLINE)
        _apply(_plan_stylesheets(soup, [root_resolver(root), root_resolver(dist)], reporter))
    else:
        reporter.info("Skipping CSS inlining (inlineCss=false)", Stage.INLINE)

    if images:
        reporter.info("Inlining images as base64...", Stage.INLINE)
        _apply_image_sources(_plan_images(soup, [root_resolver(root)], reporter))
    else:
        reporter.info("Skipping image inlining (inlineImages=false)", Stage.INLINE)

    return str(soup)


def collect_references(soup: BeautifulSoup, category: AssetCategory) -> List[AssetReference]:
    """Find every tag of a category that carries a reference, in document order."""
    if category is AssetCategory.SCRIPT:
        tags = soup.find_all("script", src=True)
        attribute = "src"
    elif category is AssetCategory.STYLESHEET:
        tags = [tag for tag in soup.find_all("link", href=True) if _is_stylesheet_link(tag)]
        attribute = "href"
    else:
        tags = soup.find_all("img", src=True)
        attribute = "src"
    return [AssetReference(category, str(tag.get(attribute)), tag) for tag in tags]


def _is_stylesheet_link(tag: Tag) -> bool:
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return [token.lower() for token in rel] == ["stylesheet"]


def _local_references(soup: BeautifulSoup, category: AssetCategory) -> Iterable[AssetReference]:
    for reference in collect_references(soup, category):
        if reference.kind is AssetKind.LOCAL:
            yield reference


def _read_asset(
    reference: AssetReference,
    resolvers: Sequence[Resolver],
    reporter: Reporter,
    *,
    binary: bool,
) -> Optional[ResolvedAsset]:
    try:
        path = locate_asset(reference.value, resolvers)
        content = path.read_bytes() if binary else path.read_text(encoding="utf-8")
    except (AssetNotFoundError, OSError, UnicodeDecodeError) as exc:
        label = _LABELS[reference.category]
        reporter.warning(f"Could not inline {label}: {reference.value} - {exc}", Stage.INLINE)
        return None
    logger.debug("Resolved %s to %s", reference.value, path)
    return ResolvedAsset(reference=reference, path=path, content=content)


def _copy_attributes(source: Tag, target: Tag, skip: set[str]) -> None:
    for name, value in source.attrs.items():
        if name.lower() not in skip:
            target[name] = value


def _plan_scripts(
    soup: BeautifulSoup,
    resolvers: Sequence[Resolver],
    reporter: Reporter,
) -> List[Tuple[Tag, Tag, AssetReference]]:
    planned = []
    for reference in _local_references(soup, AssetCategory.SCRIPT):
        asset = _read_asset(reference, resolvers, reporter, binary=False)
        if asset is None:
            continue
        node = reference.node
        replacement = soup.new_tag("script")
        _copy_attributes(node, replacement, {"src"})
        replacement.string = Script(asset.content)
        planned.append((node, replacement, reference))
        reporter.success(f"Inlined JavaScript: {reference.value}", Stage.INLINE)
    return planned


def _plan_stylesheets(
    soup: BeautifulSoup,
    resolvers: Sequence[Resolver],
    reporter: Reporter,
) -> List[Tuple[Tag, Tag, AssetReference]]:
    planned = []
    for reference in _local_references(soup, AssetCategory.STYLESHEET):
        asset = _read_asset(reference, resolvers, reporter, binary=False)
        if asset is None:
            continue
        node = reference.node
        replacement = soup.new_tag("style")
        _copy_attributes(node, replacement, {"href", "rel"})
        replacement.string = Stylesheet(asset.content)
        planned.append((node, replacement, reference))
        reporter.success(f"Inlined CSS: {reference.value}", Stage.INLINE)
    return planned


def _plan_images(
    soup: BeautifulSoup,
    resolvers: Sequence[Resolver],
    reporter: Reporter,
) -> List[Tuple[Tag, str, AssetReference]]:
    planned = []
    for reference in _local_references(soup, AssetCategory.IMAGE):
        mime_type = mime_type_for(reference.value.split("#", 1)[0].split("?", 1)[0])
        if mime_type is None:
            suffix = Path(reference.value.split("?", 1)[0]).suffix or "(none)"
            reporter.warning(f"Unsupported image format: {suffix} for {reference.value}", Stage.INLINE)
            continue
        asset = _read_asset(reference, resolvers, reporter, binary=True)
        if asset is None:
            continue
        planned.append((reference.node, to_data_url(asset.content, mime_type), reference))
        reporter.success(f"Inlined image: {reference.value}", Stage.INLINE)
    return planned


def to_data_url(data: bytes, mime_type: str) -> str:
    """Encode bytes as a base64 ``data:`` URL."""
    payload = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def _apply(planned: Iterable[Tuple[Tag, Tag, AssetReference]]) -> None:
    for node, replacement, _ in planned:
        node.replace_with(replacement)


def _apply_image_sources(planned: Iterable[Tuple[Tag, str, AssetReference]]) -> None:
    for node, data_url, _ in planned:
        node["src"] = data_url
