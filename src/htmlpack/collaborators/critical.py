"""
Critical-CSS extraction through the ``critical`` package.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Protocol

from .node import run_node_module

logger = logging.getLogger(__name__)

_CRITICAL_MODULE = """
import { generate } from 'critical';

const request = JSON.parse(process.env.HTMLPACK_PAYLOAD);

await generate({
  base: request.baseDir,
  src: request.sourceFile,
  target: request.targetFile,
  inline: request.inline,
  extract: request.extract,
  width: request.viewportWidth,
  height: request.viewportHeight,
  assetPaths: request.assetSearchPaths,
});
"""


@dataclass(frozen=True)
class CriticalCssRequest:
    """
    Input for the critical-CSS stage. ``source_file`` and ``target_file`` are
    relative to ``base_dir``; the target is rewritten in place.
    """
    base_dir: Path
    source_file: str
    target_file: str
    extract: bool
    viewport_width: int
    viewport_height: int
    asset_search_paths: List[Path] = field(default_factory=list)
    inline: bool = True


class CriticalCssExtractor(Protocol):
    def extract(self, request: CriticalCssRequest) -> None:
        """Inline above-the-fold CSS into the target file."""


class NodeCriticalExtractor:
    """Run ``critical.generate`` from the project's node_modules."""

    def __init__(self, project_root: Path | str | None = None) -> None:
        self.project_root = Path(project_root) if project_root is not None else None

    def extract(self, request: CriticalCssRequest) -> None:
        payload = {
            "baseDir": str(request.base_dir),
            "sourceFile": request.source_file,
            "targetFile": request.target_file,
            "inline": request.inline,
            "extract": request.extract,
            "viewportWidth": request.viewport_width,
            "viewportHeight": request.viewport_height,
            "assetSearchPaths": [str(path) for path in request.asset_search_paths],
        }
        cwd = self.project_root or (request.asset_search_paths[0] if request.asset_search_paths else request.base_dir)
        logger.info("Running critical on %s", request.base_dir / request.target_file)
        run_node_module(_CRITICAL_MODULE, payload, cwd=cwd)
