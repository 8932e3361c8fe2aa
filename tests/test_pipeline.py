import base64
from pathlib import Path
import re
from typing import List

import pytest
from bs4 import BeautifulSoup

from htmlpack import EntryNotFoundError, bundle
from htmlpack.collaborators import BundleRequest, CriticalCssRequest
from htmlpack.config import MinifyOptions
from htmlpack.reporting import Level, RecordingReporter, Stage
from htmlpack.util import ExecutionError

from conftest import APP_JS, PNG_BYTES


class FakeBundler:
    """Stand-in for vite: copies the entry page and emits an assets directory."""

    def __init__(self) -> None:
        self.requests: List[BundleRequest] = []

    def build(self, request: BundleRequest) -> Path:
        self.requests.append(request)
        request.output_dir.mkdir(parents=True, exist_ok=True)
        (request.output_dir / "assets").mkdir(exist_ok=True)
        (request.output_dir / "assets" / "bg.png").write_bytes(b"bg")
        html = request.entry_path.read_text(encoding="utf-8").replace(
            "</head>",
            "<style>.hero { background-image: url(./bg.png); }</style></head>",
        )
        target = request.output_dir / "index.html"
        target.write_text(html, encoding="utf-8")
        return target


class FailingBundler:
    def build(self, request: BundleRequest) -> Path:
        raise ExecutionError('Command "node" exited with code 1', command="node", code=1, stderr="vite: boom")


class FailingCritical:
    def extract(self, request: CriticalCssRequest) -> None:
        raise ExecutionError('Command "node" exited with code 1', command="node", code=1, stderr="critical: timeout")


class FakeCritical:
    def __init__(self) -> None:
        self.requests: List[CriticalCssRequest] = []
        self.seen_html: List[str] = []

    def extract(self, request: CriticalCssRequest) -> None:
        self.requests.append(request)
        target = request.base_dir / request.target_file
        html = target.read_text(encoding="utf-8")
        self.seen_html.append(html)
        target.write_text(html.replace("<head>", '<head><style id="critical">h1{}</style>', 1), encoding="utf-8")


class TagGapMinifier:
    def __init__(self) -> None:
        self.options: List[MinifyOptions] = []

    def minify(self, html: str, options: MinifyOptions) -> str:
        self.options.append(options)
        return re.sub(r">\s+<", "><", html).strip()


def test_end_to_end_without_bundler(site: Path, recorder: RecordingReporter, offline_options: dict) -> None:
    html = bundle(site, offline_options, reporter=recorder)

    artifact = site.parent / "dist" / "index.html"
    assert artifact.read_text(encoding="utf-8") == html

    soup = BeautifulSoup(html, "html.parser")
    assert [s["src"] for s in soup.find_all("script", src=True)] == ["//cdn.example.com/lib.js"]
    assert [link["href"] for link in soup.find_all("link", rel="stylesheet")] == ["https://cdn.example.com/reset.css"]
    assert any(script.string == APP_JS for script in soup.find_all("script"))

    encoded = base64.b64encode(PNG_BYTES).decode("ascii")
    assert f"data:image/png;base64,{encoded}" in html
    assert recorder.warnings == []


def test_custom_output_name_replaces_index(site: Path, recorder: RecordingReporter, offline_options: dict) -> None:
    bundle(site, {**offline_options, "outputFileName": "app.html"}, reporter=recorder)

    dist = site.parent / "dist"
    assert (dist / "app.html").exists()
    assert not (dist / "index.html").exists()
    assert "Renaming output file to: app.html" in recorder.messages(Stage.RENAME)


def test_custom_output_name_after_bundler(site: Path, recorder: RecordingReporter) -> None:
    bundle(
        site,
        {"outputFileName": "app.html", "useCriticalCss": False, "minifyHtml": False},
        reporter=recorder,
        bundler=FakeBundler(),
    )

    dist = site.parent / "dist"
    assert (dist / "app.html").exists()
    assert not (dist / "index.html").exists()


def test_missing_script_is_a_warning(site: Path, recorder: RecordingReporter, offline_options: dict) -> None:
    site.write_text(
        site.read_text(encoding="utf-8").replace("./app.js", "./missing.js"),
        encoding="utf-8",
    )

    html = bundle(site, offline_options, reporter=recorder)

    soup = BeautifulSoup(html, "html.parser")
    kept = soup.find("script", src="./missing.js")
    assert kept is not None and kept.string is None
    assert len(recorder.warnings) == 1
    assert "./missing.js" in recorder.warnings[0]
    assert "Build Complete!" in recorder.messages(Stage.FINALIZE)


def test_missing_entry_fails_before_side_effects(tmp_path: Path, recorder: RecordingReporter) -> None:
    entry = tmp_path / "site" / "index.html"

    with pytest.raises(EntryNotFoundError) as exc:
        bundle(entry, reporter=recorder)

    assert "File not found" in str(exc.value)
    assert isinstance(exc.value, FileNotFoundError)
    assert not (tmp_path / "site" / "dist").exists()
    assert recorder.events == []


def test_external_images_keep_assets_paths(site: Path, recorder: RecordingReporter) -> None:
    bundler = FakeBundler()

    html = bundle(
        site,
        {"inlineImages": False, "useCriticalCss": False, "minifyHtml": False},
        reporter=recorder,
        bundler=bundler,
    )

    request = bundler.requests[0]
    assert request.inline_assets_below_threshold is False
    assert request.assets_inline_limit == 0
    assert request.output_dir == site.parent.resolve() / "dist"

    assert "url(./assets/bg.png)" in html
    soup = BeautifulSoup(html, "html.parser")
    assert soup.find("img", alt="Logo")["src"] == "./logo.png"
    assert "Fixed background path: bg.png -> ./assets/bg.png" in recorder.messages(Stage.CSS_PATHS)


def test_inlining_stage_skipped_when_nothing_to_do(site: Path, recorder: RecordingReporter, offline_options: dict) -> None:
    original = site.read_text(encoding="utf-8")

    html = bundle(
        site,
        {**offline_options, "inlineJs": False, "inlineCss": False, "inlineImages": True},
        reporter=recorder,
    )

    assert html == original
    assert recorder.messages(Stage.INLINE) == []


def test_critical_runs_on_inlined_artifact(site: Path, recorder: RecordingReporter) -> None:
    critical = FakeCritical()

    html = bundle(
        site,
        {"useViteBuild": False, "minifyHtml": False, "criticalWidth": 1024, "criticalHeight": 768},
        reporter=recorder,
        critical=critical,
    )

    root = site.parent.resolve()
    request = critical.requests[0]
    assert request.base_dir == root / "dist"
    assert request.source_file == request.target_file == "index.html"
    assert request.inline is True
    assert request.extract is True
    assert (request.viewport_width, request.viewport_height) == (1024, 768)
    assert request.asset_search_paths == [root, root / "dist"]
    assert 'src="./app.js"' not in critical.seen_html[0]
    assert '<style id="critical">' in html


def test_critical_skipped_without_pruning(site: Path, recorder: RecordingReporter) -> None:
    critical = FakeCritical()

    bundle(site, {"useViteBuild": False, "minifyHtml": False, "pruneCss": False}, reporter=recorder, critical=critical)

    assert critical.requests == []


def test_minification_reports_reduction(site: Path, recorder: RecordingReporter) -> None:
    minifier = TagGapMinifier()

    html = bundle(
        site,
        {"useViteBuild": False, "useCriticalCss": False, "removeComments": False},
        reporter=recorder,
        minifier=minifier,
    )

    between_tags = re.sub(r"<(script|style)\b[^>]*>.*?</\1>", "", html, flags=re.DOTALL)
    assert "><" in html
    assert re.search(r">\s+<", between_tags) is None
    assert minifier.options[0].remove_comments is False
    [message] = recorder.messages(Stage.MINIFY)[1:]
    assert re.fullmatch(r"HTML minified: \d+\.\d\d KB → \d+\.\d\d KB \(\d+\.\d% reduction\)", message)


def test_default_minifier_runs_in_process(site: Path, recorder: RecordingReporter) -> None:
    html = bundle(site, {"useViteBuild": False, "useCriticalCss": False}, reporter=recorder)

    assert html == (site.parent / "dist" / "index.html").read_text(encoding="utf-8")
    assert "\n  <" not in html
    assert "data:image/png;base64," in html


def test_bundler_failure_propagates(site: Path, recorder: RecordingReporter) -> None:
    with pytest.raises(ExecutionError) as exc:
        bundle(site, reporter=recorder, bundler=FailingBundler())

    assert exc.value.stderr == "vite: boom"
    errors = [event for event in recorder.events if event.level is Level.ERROR]
    assert len(errors) == 1
    assert errors[0].message.startswith("Build failed:")


def test_critical_failure_propagates(site: Path, recorder: RecordingReporter) -> None:
    failing = FailingCritical()

    with pytest.raises(ExecutionError) as exc:
        bundle(site, {"useViteBuild": False, "minifyHtml": False}, reporter=recorder, critical=failing)

    assert exc.value.stderr == "critical: timeout"
    assert exc.value.code == 1
    errors = [event for event in recorder.events if event.level is Level.ERROR]
    assert len(errors) == 1
    assert errors[0].message == f"Build failed: {exc.value}"
    assert "Build Complete!" not in recorder.messages(Stage.FINALIZE)


def test_stages_report_in_order(site: Path, recorder: RecordingReporter) -> None:
    bundle(
        site,
        {"inlineImages": False, "outputFileName": "page.html"},
        reporter=recorder,
        bundler=FakeBundler(),
        critical=FakeCritical(),
        minifier=TagGapMinifier(),
    )

    stages = []
    for event in recorder.events:
        if event.stage is not None and (not stages or stages[-1] is not event.stage):
            stages.append(event.stage)
    assert stages == [
        Stage.RESOLVE,
        Stage.BUNDLE,
        Stage.RENAME,
        Stage.INLINE,
        Stage.CSS_PATHS,
        Stage.CRITICAL,
        Stage.MINIFY,
        Stage.FINALIZE,
    ]


def test_out_dir_extra_redirects_output(site: Path, recorder: RecordingReporter, offline_options: dict) -> None:
    bundle(site, {**offline_options, "outDir": "public"}, reporter=recorder)

    assert (site.parent / "public" / "index.html").exists()
    assert not (site.parent / "dist").exists()
