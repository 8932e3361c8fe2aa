from pathlib import Path
import textwrap

import pytest
from typer.testing import CliRunner

from htmlpack.reporting import RecordingReporter

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * 4
APP_JS = 'const ready = 1 < 2 && 3 > 2;\nconsole.log("ready", ready);\n'
STYLE_CSS = "body { color: #333; }\n.hero { background-image: url(./bg.png); }\n"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def recorder() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """
    Write a small site (entry page, script, stylesheet, images) and return the entry path.
    """
    root = tmp_path / "site"
    root.mkdir()
    entry = root / "index.html"
    entry.write_text(
        textwrap.dedent(
            """
            <!DOCTYPE html>
            <html>
            <head>
              <meta charset="utf-8">
              <title>Sample</title>
              <link rel="stylesheet" href="./style.css" media="screen">
              <link rel="stylesheet" href="https://cdn.example.com/reset.css">
            </head>
            <body>
              <div class="hero">Hello</div>
              <img src="./logo.png" alt="Logo" class="brand wide">
              <img src="https://example.com/remote.png" alt="Remote">
              <script src="./app.js" defer></script>
              <script src="//cdn.example.com/lib.js"></script>
            </body>
            </html>
            """
        ).strip()
        + "\n",
        encoding="utf-8",
    )
    (root / "app.js").write_text(APP_JS, encoding="utf-8")
    (root / "style.css").write_text(STYLE_CSS, encoding="utf-8")
    (root / "logo.png").write_bytes(PNG_BYTES)
    (root / "bg.png").write_bytes(PNG_BYTES[:64])
    return entry


@pytest.fixture
def offline_options() -> dict:
    """Options that keep every stage in-process (no node tooling)."""
    return {
        "useViteBuild": False,
        "useCriticalCss": False,
        "minifyHtml": False,
    }
