"""
Bundling stage collaborators.

``ViteBundler`` drives vite with vite-plugin-singlefile; ``CopyBundler`` copies
the entry file unchanged when bundling is switched off. Both leave their
artifact at ``<output_dir>/index.html``.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from ..config.models import DEFAULT_OUTPUT_NAME
from ..util import ensure_directory
from .node import run_node_module

logger = logging.getLogger(__name__)

INLINE_EVERYTHING_LIMIT = 100_000_000

_VITE_BUILD_MODULE = """
import { build } from 'vite';
import { viteSingleFile } from 'vite-plugin-singlefile';

const request = JSON.parse(process.env.HTMLPACK_PAYLOAD);

await build({
  root: request.root,
  base: './',
  configFile: false,
  build: {
    outDir: request.outputDir,
    emptyOutDir: true,
    minify: request.minifyJs ? 'esbuild' : false,
    assetsInlineLimit: request.assetsInlineLimit,
    cssCodeSplit: false,
    modulePreload: { polyfill: false },
    rollupOptions: {
      input: request.entryPath,
      output: {
        inlineDynamicImports: true,
        manualChunks: undefined,
      },
    },
  },
  plugins: [
    viteSingleFile({
      removeViteModuleLoader: true,
      useRecommendedBuildConfig: false,
    }),
  ],
  logLevel: 'info',
});
"""


@dataclass(frozen=True)
class BundleRequest:
    """
    Input for the bundling stage.

    Attributes:
        root: Project root (directory of the entry file).
        entry_path: Absolute path of the entry HTML file.
        output_dir: Directory that receives ``index.html`` and ``assets/``.
        minify_js: Minify bundled JavaScript.
        inline_assets_below_threshold: Inline every asset (True) or none (False).
    """
    root: Path
    entry_path: Path
    output_dir: Path
    minify_js: bool = True
    inline_assets_below_threshold: bool = True

    @property
    def assets_inline_limit(self) -> int:
        return INLINE_EVERYTHING_LIMIT if self.inline_assets_below_threshold else 0


class Bundler(Protocol):
    def build(self, request: BundleRequest) -> Path:
        """Produce the bundled document and return its path."""


class ViteBundler:
    """Bundle with vite and vite-plugin-singlefile installed in the project."""

    def build(self, request: BundleRequest) -> Path:
        payload = {
            "root": str(request.root),
            "entryPath": str(request.entry_path),
            "outputDir": str(request.output_dir),
            "minifyJs": request.minify_js,
            "assetsInlineLimit": request.assets_inline_limit,
        }
        logger.info("Running vite build for %s", request.entry_path)
        run_node_module(_VITE_BUILD_MODULE, payload, cwd=request.root)
        return request.output_dir / DEFAULT_OUTPUT_NAME


class CopyBundler:
    """Copy the entry document verbatim into the output directory."""

    def build(self, request: BundleRequest) -> Path:
        ensure_directory(request.output_dir)
        target = request.output_dir / DEFAULT_OUTPUT_NAME
        shutil.copyfile(request.entry_path, target)
        logger.debug("Copied %s to %s", request.entry_path, target)
        return target
