from pathlib import Path
import textwrap

import pytest
from pydantic import ValidationError

from htmlpack.config import (
    BuildConfigBuilder,
    BundleOptions,
    ConfigError,
    load_options,
    resolve_build_config,
)


def test_defaults_resolve_without_caller_input(site: Path) -> None:
    config = resolve_build_config(site)

    assert config.entry_file == "index.html"
    assert config.root_dir == site.parent.resolve()
    assert config.out_dir == site.parent.resolve() / "dist"
    assert config.dist_file == site.parent.resolve() / "dist" / "index.html"
    assert config.vite.enabled and config.vite.minify_js
    assert config.critical.enabled and config.critical.strip
    assert (config.critical.width, config.critical.height) == (1300, 900)
    assert config.minify.enabled
    assert config.inline.images and config.inline.js and config.inline.css
    assert config.extras == {}


def test_minify_options_are_derived(site: Path) -> None:
    config = resolve_build_config(
        site,
        {"removeRedundantAttributes": False, "collapseWhitespace": False, "minifyCss": False},
    )
    options = config.minify.options

    assert options.remove_redundant_attributes is False
    assert options.remove_attribute_quotes is False
    assert options.remove_empty_attributes is False
    assert options.collapse_whitespace is False
    assert options.collapse_inline_tag_whitespace is False
    assert options.minify_css is False
    assert options.remove_script_type_attributes is True
    assert options.use_short_doctype is True
    assert options.minify_urls is True
    assert options.sort_attributes and options.sort_class_name


def test_minify_options_dump_with_minifier_names(site: Path) -> None:
    dumped = resolve_build_config(site).minify.options.model_dump(by_alias=True)

    assert set(dumped) == {
        "removeComments",
        "removeRedundantAttributes",
        "removeScriptTypeAttributes",
        "removeStyleLinkTypeAttributes",
        "removeAttributeQuotes",
        "useShortDoctype",
        "collapseWhitespace",
        "collapseInlineTagWhitespace",
        "removeEmptyAttributes",
        "minifyCSS",
        "minifyJS",
        "minifyURLs",
        "sortAttributes",
        "sortClassName",
    }


def test_critical_requires_css_pruning(site: Path) -> None:
    config = resolve_build_config(site, {"pruneCss": False})

    assert config.critical.enabled is False
    assert config.critical.strip is False


def test_accepts_snake_and_camel_case(site: Path) -> None:
    camel = resolve_build_config(site, {"inlineImages": False, "outputFileName": "app.html"})
    snake = resolve_build_config(site, {"inline_images": False, "output_file_name": "app.html"})

    assert camel == snake
    assert camel.out_name == "app.html"


def test_later_layers_win(site: Path) -> None:
    config = (
        BuildConfigBuilder(site)
        .override({"inline_js": False, "criticalWidth": 800})
        .override({"inlineJs": True})
        .build()
    )

    assert config.inline.js is True
    assert config.critical.width == 800


def test_config_is_immutable(site: Path) -> None:
    config = resolve_build_config(site)

    with pytest.raises(ValidationError):
        config.out_name = "other.html"


def test_unknown_keys_pass_through(site: Path) -> None:
    config = resolve_build_config(site, {"banner": "hello", "retries": 2})

    assert config.extras == {"banner": "hello", "retries": 2}


def test_extra_keys_naming_resolved_fields_override_them(site: Path) -> None:
    config = resolve_build_config(site, {"outDir": "build", "inline": {"js": False}})

    assert config.out_dir == site.parent.resolve() / "build"
    assert config.inline.js is False
    assert config.inline.css is True
    assert config.extras == {}


@pytest.mark.parametrize("name", ["", "nested/app.html", "..", "dir\\app.html"])
def test_rejects_output_names_with_paths(site: Path, name: str) -> None:
    with pytest.raises(ConfigError):
        resolve_build_config(site, {"outputFileName": name})


def test_rejects_invalid_values(site: Path) -> None:
    with pytest.raises(ConfigError) as exc:
        resolve_build_config(site, {"criticalWidth": 0})

    assert "critical" in str(exc.value).lower()


def test_rejects_non_mapping_options(site: Path) -> None:
    with pytest.raises(ConfigError):
        resolve_build_config(site, ["inlineJs"])  # type: ignore[arg-type]


def _write_options(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "htmlpack.toml"
    path.write_text(textwrap.dedent(body).strip() + "\n", encoding="utf-8")
    return path


def test_load_options_from_top_level_table(tmp_path: Path) -> None:
    path = _write_options(
        tmp_path,
        """
        inline_images = false
        criticalWidth = 1024
        """,
    )

    options = load_options(path)

    assert isinstance(options, BundleOptions)
    assert options.inline_images is False
    assert options.critical_width == 1024


def test_load_options_from_bundle_table(tmp_path: Path, site: Path) -> None:
    path = _write_options(
        tmp_path,
        """
        [bundle]
        outputFileName = "app.html"
        useViteBuild = false
        """,
    )

    config = BuildConfigBuilder(site).override(load_options(path)).override({"useViteBuild": True}).build()

    assert config.out_name == "app.html"
    assert config.vite.enabled is True


def test_load_options_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError) as exc:
        load_options(tmp_path / "nope.toml")

    assert "not found" in str(exc.value)


def test_load_options_invalid_toml(tmp_path: Path) -> None:
    path = _write_options(tmp_path, "inline_images = ")

    with pytest.raises(ConfigError) as exc:
        load_options(path)

    assert "Invalid TOML" in str(exc.value)
