import pytest

from htmlpack.assets import mime_type_for


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("photo.jpg", "image/jpeg"),
        ("photo.jpeg", "image/jpeg"),
        ("logo.png", "image/png"),
        ("spinner.gif", "image/gif"),
        ("icon.svg", "image/svg+xml"),
        ("hero.webp", "image/webp"),
        ("LOGO.PNG", "image/png"),
    ],
)
def test_known_extensions(name: str, expected: str) -> None:
    assert mime_type_for(name) == expected


@pytest.mark.parametrize("name", ["favicon.ico", "scan.bmp", "picture.avif", "README"])
def test_unsupported_extensions_have_no_type(name: str) -> None:
    assert mime_type_for(name) is None
