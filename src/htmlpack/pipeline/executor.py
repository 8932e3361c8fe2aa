"""
Pipeline executor: bundling, residual inlining, critical CSS and minification.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from ..assets import fix_background_image_paths, inline_assets
from ..collaborators import (
    Bundler,
    BundleRequest,
    CopyBundler,
    CriticalCssExtractor,
    CriticalCssRequest,
    HtmlMinifier,
    MinifyHtmlMinifier,
    NodeCriticalExtractor,
    ViteBundler,
)
from ..config import BuildConfig, BundleOptions, resolve_build_config
from ..reporting import LoggingReporter, Reporter, Stage
from ..util import byte_length, format_kb, read_text_file, size_reduction_percent, write_text_file

logger = logging.getLogger(__name__)


class EntryNotFoundError(FileNotFoundError):
    """Raised when the entry HTML file does not exist."""


def bundle(
    entry_path: Path | str,
    options: Optional[Mapping[str, Any] | BundleOptions] = None,
    *,
    reporter: Optional[Reporter] = None,
    bundler: Optional[Bundler] = None,
    critical: Optional[CriticalCssExtractor] = None,
    minifier: Optional[HtmlMinifier] = None,
) -> str:
    """
    Package an HTML entry file into a single self-contained document.

    Args:
        entry_path: The entry HTML file.
        options: Caller options (camelCase or snake_case keys); see BundleOptions.
        reporter: Receives progress, warnings and errors (logs by default).
        bundler: Bundling collaborator used when the vite build is enabled.
        critical: Critical-CSS collaborator.
        minifier: HTML minifier collaborator.

    Returns:
        The final HTML text, also written to ``<root>/dist/<outputFileName>``.

    Raises:
        EntryNotFoundError: If the entry file does not exist.
        ConfigError: If the options are invalid.
        ExecutionError: If an external tool fails.
    """
    _require_entry(Path(entry_path).expanduser().resolve())
    config = resolve_build_config(entry_path, options)
    return run_pipeline(
        config,
        reporter=reporter,
        bundler=bundler,
        critical=critical,
        minifier=minifier,
    )


def run_pipeline(
    config: BuildConfig,
    *,
    reporter: Optional[Reporter] = None,
    bundler: Optional[Bundler] = None,
    critical: Optional[CriticalCssExtractor] = None,
    minifier: Optional[HtmlMinifier] = None,
) -> str:
    """
    Run every enabled stage for an already resolved configuration.

    Any stage failure is reported once and re-raised unchanged; nothing is
    retried or rolled back.
    """
    reporter = reporter or LoggingReporter()
    _require_entry(config.entry_path)
    _report_start(config, reporter)

    try:
        reporter.info("Starting build...")
        produced = _run_bundle_stage(config, bundler, reporter)
        _run_rename_stage(config, produced, reporter)
        _run_inline_stage(config, reporter)
        _run_critical_stage(config, critical, reporter)
        _run_minify_stage(config, minifier, reporter)
        return _finalize(config, reporter)
    except Exception as exc:
        reporter.error(f"Build failed: {exc}")
        raise


def _require_entry(entry_path: Path) -> None:
    if not entry_path.is_file():
        raise EntryNotFoundError(f"File not found: {entry_path}")


def _report_start(config: BuildConfig, reporter: Reporter) -> None:
    reporter.info(f"Root Dir: {config.root_dir}", Stage.RESOLVE)
    reporter.info(f"Entry File: {config.entry_path}", Stage.RESOLVE)
    flags = {
        "inlineImages": config.inline.images,
        "inlineJs": config.inline.js,
        "inlineCss": config.inline.css,
        "pruneCss": config.critical.strip,
        "minifyHtml": config.minify.enabled,
        "minifyJs": config.minify.options.minify_js,
        "minifyCss": config.minify.options.minify_css,
        "useCriticalCss": config.critical.enabled,
        "useViteBuild": config.vite.enabled,
    }
    rendered = ", ".join(f"{key}={str(value).lower()}" for key, value in flags.items())
    reporter.info(f"Options: {rendered}", Stage.RESOLVE)


def _run_bundle_stage(config: BuildConfig, bundler: Optional[Bundler], reporter: Reporter) -> Path:
    request = BundleRequest(
        root=config.root_dir,
        entry_path=config.entry_path,
        output_dir=config.out_dir,
        minify_js=config.vite.minify_js,
        inline_assets_below_threshold=config.inline.images,
    )
    if config.vite.enabled:
        reporter.stage(Stage.BUNDLE, "Running vite build...")
        return (bundler or ViteBundler()).build(request)
    reporter.stage(Stage.BUNDLE, "Skipping Vite build (useViteBuild=false)")
    return CopyBundler().build(request)


def _run_rename_stage(config: BuildConfig, produced: Path, reporter: Reporter) -> None:
    if produced == config.dist_file:
        return
    reporter.stage(Stage.RENAME, f"Renaming output file to: {config.out_name}")
    produced.replace(config.dist_file)


def _run_inline_stage(config: BuildConfig, reporter: Reporter) -> None:
    if not config.needs_inlining:
        return
    reporter.stage(Stage.INLINE, "Post-processing to inline remaining local assets...")
    html = read_text_file(config.dist_file)
    html = inline_assets(
        html,
        config.root_dir,
        js=config.inline.js,
        css=config.inline.css,
        images=config.inline.images,
        dist_dir=config.out_dir,
        reporter=reporter,
    )
    if not config.inline.images:
        reporter.stage(Stage.CSS_PATHS, "Fixing CSS background-image paths for external images...")
        html = fix_background_image_paths(html, config.out_dir, reporter=reporter)
    write_text_file(config.dist_file, html)


def _run_critical_stage(
    config: BuildConfig,
    critical: Optional[CriticalCssExtractor],
    reporter: Reporter,
) -> None:
    if not config.critical.enabled:
        return
    reporter.stage(Stage.CRITICAL, "Generating Critical CSS...")
    request = CriticalCssRequest(
        base_dir=config.out_dir,
        source_file=config.out_name,
        target_file=config.out_name,
        extract=config.critical.strip,
        viewport_width=config.critical.width,
        viewport_height=config.critical.height,
        asset_search_paths=[config.root_dir, config.out_dir],
    )
    (critical or NodeCriticalExtractor(config.root_dir)).extract(request)
    reporter.success("Critical CSS injected.", Stage.CRITICAL)


def _run_minify_stage(config: BuildConfig, minifier: Optional[HtmlMinifier], reporter: Reporter) -> None:
    if not config.minify.enabled:
        return
    reporter.stage(Stage.MINIFY, "Minifying HTML...")
    html = read_text_file(config.dist_file)
    original_size = byte_length(html)
    minified = (minifier or MinifyHtmlMinifier()).minify(html, config.minify.options)
    minified_size = byte_length(minified)
    write_text_file(config.dist_file, minified)
    reduction = size_reduction_percent(original_size, minified_size)
    reporter.success(
        f"HTML minified: {format_kb(original_size)} → {format_kb(minified_size)} ({reduction:.1f}% reduction)",
        Stage.MINIFY,
    )


def _finalize(config: BuildConfig, reporter: Reporter) -> str:
    size = config.dist_file.stat().st_size
    reporter.success("Build Complete!", Stage.FINALIZE)
    reporter.info(f"Output: {config.dist_file}", Stage.FINALIZE)
    reporter.info(f"Size: {format_kb(size)}", Stage.FINALIZE)
    return read_text_file(config.dist_file)
