"""
Layered construction of the resolved BuildConfig.

Layers are applied in a fixed order: defaults, caller overrides, derived
fields, then pass-through extras. The result is validated once.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from .models import (
    DIST_DIRNAME,
    BuildConfig,
    BundleOptions,
    ConfigError,
    CriticalSettings,
    InlineSettings,
    MinifyOptions,
    MinifySettings,
    ViteSettings,
    parse_options,
)

logger = logging.getLogger(__name__)


class BuildConfigBuilder:
    """
    Collects option layers for one entry file and produces a frozen BuildConfig.

    Example:
        config = BuildConfigBuilder("site/index.html").override({"inlineImages": False}).build()
    """

    def __init__(self, entry_path: Path | str) -> None:
        self.entry_path = Path(entry_path).expanduser().resolve()
        self._layers: list[Dict[str, Any]] = []

    def override(self, options: Mapping[str, Any] | BundleOptions | None) -> "BuildConfigBuilder":
        """Add a layer of caller options; later layers win key by key."""
        if options is None:
            return self
        if isinstance(options, BundleOptions):
            layer = options.model_dump(exclude_unset=True)
            layer.update(options.extras)
        elif isinstance(options, Mapping):
            layer = dict(options)
        else:
            raise ConfigError("Bundle options must be a mapping.")
        self._layers.append(layer)
        return self

    def options(self) -> BundleOptions:
        """Defaults merged with every override layer."""
        merged: Dict[str, Any] = {}
        for layer in self._layers:
            for key, value in layer.items():
                merged[_canonical_option_key(key)] = value
        return parse_options(merged)

    def build(self) -> BuildConfig:
        """
        Resolve the layers into a BuildConfig.

        Raises:
            ConfigError: If any layer holds invalid values.
        """
        options = self.options()
        derived = self._derive(options)
        overlay, passthrough = self._split_extras(options.extras)
        if "out_dir" in overlay:
            out_dir = Path(overlay["out_dir"]).expanduser()
            overlay["out_dir"] = out_dir if out_dir.is_absolute() else self.entry_path.parent / out_dir
        if overlay:
            logger.debug("Overriding resolved fields from extra options: %s", ", ".join(sorted(overlay)))

        payload = {**derived, **overlay, "extras": passthrough}
        try:
            return BuildConfig.model_validate(payload)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc

    def _derive(self, options: BundleOptions) -> Dict[str, Any]:
        root_dir = self.entry_path.parent
        return {
            "entry_file": self.entry_path.name,
            "entry_path": self.entry_path,
            "root_dir": root_dir,
            "out_dir": root_dir / DIST_DIRNAME,
            "out_name": options.output_file_name,
            "vite": ViteSettings(
                enabled=options.use_vite_build,
                minify_js=options.minify_js,
            ),
            "critical": CriticalSettings(
                enabled=options.use_critical_css and options.prune_css,
                strip=options.prune_css,
                width=options.critical_width,
                height=options.critical_height,
            ),
            "minify": MinifySettings(
                enabled=options.minify_html,
                options=MinifyOptions(
                    remove_comments=options.remove_comments,
                    remove_redundant_attributes=options.remove_redundant_attributes,
                    remove_script_type_attributes=True,
                    remove_style_link_type_attributes=True,
                    remove_attribute_quotes=options.remove_redundant_attributes,
                    use_short_doctype=True,
                    collapse_whitespace=options.collapse_whitespace,
                    collapse_inline_tag_whitespace=options.collapse_whitespace,
                    remove_empty_attributes=options.remove_redundant_attributes,
                    minify_css=options.minify_css,
                    minify_js=options.minify_js,
                    minify_urls=True,
                    sort_attributes=True,
                    sort_class_name=True,
                ),
            ),
            "inline": InlineSettings(
                images=options.inline_images,
                js=options.inline_js,
                css=options.inline_css,
            ),
        }

    @staticmethod
    def _split_extras(extras: Mapping[str, Any]) -> tuple[Dict[str, Any], Dict[str, Any]]:
        """Separate extras that name a BuildConfig field from the rest."""
        overlay: Dict[str, Any] = {}
        passthrough: Dict[str, Any] = {}
        for key, value in extras.items():
            field_name = _BUILD_FIELD_KEYS.get(key)
            if field_name:
                overlay[field_name] = value
            else:
                passthrough[key] = value
        return overlay, passthrough


def _field_keys(model: type, *, exclude: set[str]) -> Dict[str, str]:
    keys: Dict[str, str] = {}
    for name, info in model.model_fields.items():
        if name in exclude:
            continue
        keys[name] = name
        keys[to_camel(name)] = name
        if info.alias:
            keys[info.alias] = name
    return keys


_OPTION_KEYS = _field_keys(BundleOptions, exclude=set())
_BUILD_FIELD_KEYS = _field_keys(BuildConfig, exclude={"extras"})


def _canonical_option_key(key: str) -> str:
    """Map camelCase option keys onto field names so layers merge per option."""
    return _OPTION_KEYS.get(key, key)


def resolve_build_config(
    entry_path: Path | str,
    options: Optional[Mapping[str, Any] | BundleOptions] = None,
) -> BuildConfig:
    """Shortcut for ``BuildConfigBuilder(entry_path).override(options).build()``."""
    return BuildConfigBuilder(entry_path).override(options).build()
