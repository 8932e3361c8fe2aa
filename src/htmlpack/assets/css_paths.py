"""
Point CSS background images at the bundler's assets directory.

Only the first plain ``url(...)`` of a ``background``/``background-image``
declaration is considered; multi-background lists and ``image-set()`` are left
as they are.
"""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath
from typing import Optional

from ..reporting import LoggingReporter, Reporter, Stage

ASSETS_DIRNAME = "assets"

_BACKGROUND_URL_RE = re.compile(
    r"(?P<prefix>\bbackground(?:-image)?\s*:[^;{}<>]*?url\(\s*)"
    r"(?P<quote>['\"]?)"
    r"(?P<path>[^'\"()\s]+?\.(?:jpe?g|png|gif|webp|svg))"
    r"(?P=quote)"
    r"(?P<suffix>\s*\))",
    re.IGNORECASE,
)


def _is_relative(path: str) -> bool:
    lowered = path.lower()
    return not (lowered.startswith("/") or ":" in lowered)


def fix_background_image_paths(
    html: str,
    out_dir: Path | str,
    *,
    reporter: Optional[Reporter] = None,
) -> str:
    """
    Rewrite relative background image URLs to ``./assets/<name>``.

    A URL is rewritten only when ``<out_dir>/assets/<name>`` exists; anything
    else is returned unchanged.
    """
    reporter = reporter or LoggingReporter()
    assets_dir = Path(out_dir) / ASSETS_DIRNAME

    def _rewrite(match: re.Match[str]) -> str:
        path = match.group("path")
        if not _is_relative(path):
            return match.group(0)
        filename = PurePosixPath(path).name
        new_path = f"./{ASSETS_DIRNAME}/{filename}"
        if path == new_path or not (assets_dir / filename).is_file():
            return match.group(0)
        reporter.success(f"Fixed background path: {filename} -> {new_path}", Stage.CSS_PATHS)
        quote = match.group("quote")
        return f"{match.group('prefix')}{quote}{new_path}{quote}{match.group('suffix')}"

    return _BACKGROUND_URL_RE.sub(_rewrite, html)
