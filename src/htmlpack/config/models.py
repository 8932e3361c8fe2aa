"""
Pydantic models for caller options and the resolved build configuration.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Dict, Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_OUTPUT_NAME = "index.html"
DIST_DIRNAME = "dist"


class ConfigError(RuntimeError):
    """Raised when bundle options or option files cannot be loaded or validated."""


class BundleOptions(BaseModel):
    """
    Caller-facing options. Every field has a default so an empty options
    record produces a runnable build.

    Keys are accepted in camelCase (``inlineImages``) or snake_case
    (``inline_images``). Unknown keys are kept as extras and passed through
    to the resolved configuration.
    """
    inline_images: bool = True
    inline_js: bool = True
    inline_css: bool = True
    prune_css: bool = True
    minify_html: bool = True
    minify_js: bool = True
    minify_css: bool = True
    remove_comments: bool = True
    remove_redundant_attributes: bool = True
    collapse_whitespace: bool = True
    use_vite_build: bool = True
    use_critical_css: bool = True
    critical_width: int = Field(default=1300, gt=0)
    critical_height: int = Field(default=900, gt=0)
    output_file_name: str = DEFAULT_OUTPUT_NAME

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    @field_validator("output_file_name")
    @classmethod
    def _plain_file_name(cls, value: str) -> str:
        name = value.strip()
        if not name or name in {".", ".."} or "/" in name or "\\" in name:
            raise ValueError(f"output file name must be a plain file name, got {value!r}")
        return name

    @property
    def extras(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


class _Frozen(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )


class ViteSettings(_Frozen):
    enabled: bool = True
    minify_js: bool = True


class CriticalSettings(_Frozen):
    """
    Critical-CSS stage settings.

    Attributes:
        enabled: Run the stage (requires both the critical flag and CSS pruning).
        strip: Remove the non-critical rules from the document.
        width: Viewport width used to decide what is above the fold.
        height: Viewport height used to decide what is above the fold.
    """
    enabled: bool = True
    strip: bool = True
    width: int = 1300
    height: int = 900


class MinifyOptions(_Frozen):
    """Option record handed to the HTML minifier."""
    remove_comments: bool = True
    remove_redundant_attributes: bool = True
    remove_script_type_attributes: bool = True
    remove_style_link_type_attributes: bool = True
    remove_attribute_quotes: bool = True
    use_short_doctype: bool = True
    collapse_whitespace: bool = True
    collapse_inline_tag_whitespace: bool = True
    remove_empty_attributes: bool = True
    minify_css: bool = Field(default=True, alias="minifyCSS")
    minify_js: bool = Field(default=True, alias="minifyJS")
    minify_urls: bool = Field(default=True, alias="minifyURLs")
    sort_attributes: bool = True
    sort_class_name: bool = True


class MinifySettings(_Frozen):
    enabled: bool = True
    options: MinifyOptions = Field(default_factory=MinifyOptions)


class InlineSettings(_Frozen):
    images: bool = True
    js: bool = True
    css: bool = True


class BuildConfig(_Frozen):
    """
    Resolved configuration for one bundle invocation. Never mutated once built.

    Attributes:
        entry_file: File name of the entry document.
        entry_path: Absolute path of the entry document.
        root_dir: Directory containing the entry document.
        out_dir: Distribution directory (``<root>/dist`` unless overridden).
        out_name: File name of the final artifact inside ``out_dir``.
        extras: Unknown caller keys, passed through untouched.
    """
    entry_file: str
    entry_path: Path
    root_dir: Path
    out_dir: Path
    out_name: str = DEFAULT_OUTPUT_NAME
    vite: ViteSettings = Field(default_factory=ViteSettings)
    critical: CriticalSettings = Field(default_factory=CriticalSettings)
    minify: MinifySettings = Field(default_factory=MinifySettings)
    inline: InlineSettings = Field(default_factory=InlineSettings)
    extras: Dict[str, Any] = Field(default_factory=dict)

    @property
    def dist_file(self) -> Path:
        """Path of the artifact every post-bundling stage works on."""
        return self.out_dir / self.out_name

    @property
    def needs_inlining(self) -> bool:
        """True when the residual inlining / path-fix pass has work to do."""
        return self.inline.js or self.inline.css or not self.inline.images

    def summary_rows(self) -> Iterable[tuple[str, str]]:
        yield ("Root dir", str(self.root_dir))
        yield ("Entry file", str(self.entry_path))
        yield ("Output", str(self.dist_file))
        yield ("Vite build", _yes_no(self.vite.enabled))
        yield ("Inline JS / CSS / images", "/".join(_yes_no(v) for v in (self.inline.js, self.inline.css, self.inline.images)))
        yield ("Critical CSS", _yes_no(self.critical.enabled))
        yield ("Critical viewport", f"{self.critical.width}x{self.critical.height}")
        yield ("Minify HTML", _yes_no(self.minify.enabled))
        if self.extras:
            yield ("Extra keys", ", ".join(sorted(self.extras)))


def _yes_no(value: bool) -> str:
    return "yes" if value else "no"


def parse_options(raw: Any) -> BundleOptions:
    """
    Validate a raw mapping into BundleOptions.

    Raises:
        ConfigError: If the mapping is not a table or holds invalid values.
    """
    if raw is None:
        return BundleOptions()
    if isinstance(raw, BundleOptions):
        return raw
    if not isinstance(raw, dict):
        raise ConfigError("Bundle options must be a mapping.")
    try:
        return BundleOptions.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def load_options(path: Path | str) -> BundleOptions:
    """
    Load bundle options from a TOML file.

    The options may sit at the top level or inside a ``[bundle]`` table.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with config_path.open("rb") as handle:
            raw_data: Dict[str, Any] = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"Unable to read configuration file: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in configuration file: {exc}") from exc

    if "bundle" in raw_data:
        section = raw_data["bundle"]
        if not isinstance(section, dict):
            raise ConfigError("[bundle] must be a table.")
        raw_data = section
    return parse_options(raw_data)
