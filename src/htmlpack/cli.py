"""
Command line interface for htmlpack.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .collaborators import HtmlMinifier, MinifyHtmlMinifier, NodeHtmlMinifier
from .config import BuildConfig, BuildConfigBuilder, ConfigError, get_tool_settings, load_options
from .pipeline import EntryNotFoundError, run_pipeline
from .reporting import RichReporter
from .util import ExecutionError, format_kb

console = Console()
err_console = Console(stderr=True)
app = typer.Typer(help="Bundle an HTML page and its local assets into a single file.")
logger = logging.getLogger(__name__)

LOG_LEVELS = ["critical", "error", "warning", "info", "debug"]
MINIFIERS = ["inprocess", "node"]


def _configure_logging(level_name: str) -> None:
    env_override = get_tool_settings().log_level
    level_str = (env_override or level_name or "info").upper()
    if level_str not in {lvl.upper() for lvl in LOG_LEVELS}:
        level_str = "INFO"
    logging.basicConfig(
        level=getattr(logging, level_str, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.debug("Logging configured at %s", level_str)


def _resolve_config_path(value: Optional[Path]) -> Optional[Path]:
    """Ensure an options file, when given, exists and return its absolute path."""
    if value is None:
        return None
    resolved = value.expanduser().resolve()
    if not resolved.exists():
        raise typer.BadParameter(f"No config file found at {resolved}")
    if not resolved.is_file():
        raise typer.BadParameter(f"Config path must be a file, got directory: {resolved}")
    return resolved


def _resolve_config_or_exit(entry: Path, config_file: Optional[Path], overrides: Dict[str, Any]) -> BuildConfig:
    builder = BuildConfigBuilder(entry)
    try:
        if config_file is not None:
            builder.override(load_options(config_file))
        return builder.override(overrides).build()
    except ConfigError as exc:
        err_console.print(f"[bold red]Configuration error:[/] {exc}")
        raise typer.Exit(code=1) from exc


def _print_config(config: BuildConfig, title: str) -> None:
    table = Table(title=title)
    table.add_column("Key")
    table.add_column("Value", overflow="fold")
    for key, value in config.summary_rows():
        table.add_row(key, value)
    console.print(table)


def _select_minifier(name: str, config: BuildConfig) -> HtmlMinifier:
    if name.lower() == "node":
        return NodeHtmlMinifier(config.root_dir)
    return MinifyHtmlMinifier()


def _validate_minifier(value: str) -> str:
    if value.lower() not in MINIFIERS:
        raise typer.BadParameter(f"Expected one of: {', '.join(MINIFIERS)}")
    return value.lower()


@app.callback(invoke_without_command=True)
def _root_command(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show htmlpack version and exit.",
        is_flag=True,
    ),
    log_level: str = typer.Option(
        "info",
        "--log-level",
        help="Logging level (critical, error, warning, info, debug).",
        show_default=True,
        case_sensitive=False,
    ),
) -> None:
    """
    Default command when no subcommand is selected.
    """
    _configure_logging(log_level)

    if version:
        console.print(f"[bold green]htmlpack[/] {__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print("[bold yellow]htmlpack[/] is ready. Run [cyan]htmlpack bundle path/to/index.html[/] to build.")


@app.command("bundle")
def bundle_command(
    entry: Path = typer.Argument(..., help="Entry HTML file."),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="TOML file with bundle options (top level or [bundle] table).",
        callback=_resolve_config_path,
    ),
    inline_images: Optional[bool] = typer.Option(None, "--inline-images/--no-inline-images", help="Embed images as data URLs."),
    inline_js: Optional[bool] = typer.Option(None, "--inline-js/--no-inline-js", help="Inline local scripts."),
    inline_css: Optional[bool] = typer.Option(None, "--inline-css/--no-inline-css", help="Inline local stylesheets."),
    prune_css: Optional[bool] = typer.Option(None, "--prune-css/--no-prune-css", help="Strip CSS that is not critical."),
    minify_html: Optional[bool] = typer.Option(None, "--minify-html/--no-minify-html", help="Minify the final HTML."),
    minify_js: Optional[bool] = typer.Option(None, "--minify-js/--no-minify-js", help="Minify JavaScript."),
    minify_css: Optional[bool] = typer.Option(None, "--minify-css/--no-minify-css", help="Minify CSS."),
    remove_comments: Optional[bool] = typer.Option(None, "--remove-comments/--keep-comments", help="Drop HTML comments."),
    remove_redundant_attributes: Optional[bool] = typer.Option(
        None,
        "--remove-redundant-attributes/--keep-redundant-attributes",
        help="Drop redundant/empty attributes and attribute quotes.",
    ),
    collapse_whitespace: Optional[bool] = typer.Option(
        None,
        "--collapse-whitespace/--preserve-whitespace",
        help="Collapse whitespace between tags.",
    ),
    use_vite_build: Optional[bool] = typer.Option(None, "--vite/--no-vite", help="Bundle with vite first."),
    use_critical_css: Optional[bool] = typer.Option(None, "--critical/--no-critical", help="Inline critical CSS."),
    critical_width: Optional[int] = typer.Option(None, "--critical-width", min=1, help="Critical CSS viewport width."),
    critical_height: Optional[int] = typer.Option(None, "--critical-height", min=1, help="Critical CSS viewport height."),
    output_file_name: Optional[str] = typer.Option(None, "--output-name", "-o", help="File name of the artifact in dist/."),
    minifier: str = typer.Option(
        "inprocess",
        "--minifier",
        help="HTML minifier (inprocess, node).",
        callback=_validate_minifier,
    ),
    to_stdout: bool = typer.Option(False, "--stdout", help="Write the final HTML to standard output."),
) -> None:
    """
    Build a single-file HTML artifact at <entry dir>/dist/<output name>.
    """
    cli_options = {
        "inlineImages": inline_images,
        "inlineJs": inline_js,
        "inlineCss": inline_css,
        "pruneCss": prune_css,
        "minifyHtml": minify_html,
        "minifyJs": minify_js,
        "minifyCss": minify_css,
        "removeComments": remove_comments,
        "removeRedundantAttributes": remove_redundant_attributes,
        "collapseWhitespace": collapse_whitespace,
        "useViteBuild": use_vite_build,
        "useCriticalCss": use_critical_css,
        "criticalWidth": critical_width,
        "criticalHeight": critical_height,
        "outputFileName": output_file_name,
    }
    overrides = {key: value for key, value in cli_options.items() if value is not None}
    build_config = _resolve_config_or_exit(entry, config, overrides)
    if not to_stdout:
        _print_config(build_config, "Bundle Configuration")

    try:
        html = run_pipeline(
            build_config,
            reporter=RichReporter(err_console),
            minifier=_select_minifier(minifier, build_config),
        )
    except EntryNotFoundError as exc:
        err_console.print(f"[bold red]Entry error:[/] {exc}")
        raise typer.Exit(code=1) from exc
    except ExecutionError as exc:
        err_console.print(f"[bold red]Build failed:[/] {exc}")
        if exc.stderr:
            err_console.print(exc.stderr, markup=False)
        raise typer.Exit(code=1) from exc

    if to_stdout:
        sys.stdout.write(html)
        sys.stdout.flush()
        return
    console.print(
        f"[bold green]Bundle written:[/] {build_config.dist_file} ({format_kb(build_config.dist_file.stat().st_size)})"
    )


@app.command("show-config")
def show_config(
    entry: Path = typer.Argument(..., help="Entry HTML file."),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="TOML file with bundle options.",
        callback=_resolve_config_path,
    ),
) -> None:
    """
    Print the resolved build configuration without running anything.
    """
    build_config = _resolve_config_or_exit(entry, config, {})
    _print_config(build_config, "Resolved Configuration")


def main() -> None:
    """
    Entry-point used by the console script defined in pyproject.toml.
    """
    app()
