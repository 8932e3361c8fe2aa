"""
Configuration helpers for htmlpack.
"""

from .builder import BuildConfigBuilder, resolve_build_config
from .models import (
    BuildConfig,
    BundleOptions,
    ConfigError,
    CriticalSettings,
    InlineSettings,
    MinifyOptions,
    MinifySettings,
    ViteSettings,
    load_options,
    parse_options,
)
from .settings import ToolSettings, get_tool_settings

__all__ = [
    "BuildConfigBuilder",
    "resolve_build_config",
    "BuildConfig",
    "BundleOptions",
    "ConfigError",
    "CriticalSettings",
    "InlineSettings",
    "MinifyOptions",
    "MinifySettings",
    "ViteSettings",
    "load_options",
    "parse_options",
    "ToolSettings",
    "get_tool_settings",
]
