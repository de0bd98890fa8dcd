"""`geolet.render` / `RenderResult` のテスト。"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

import geolet
from geolet.api.render import _sanitize_name
from geolet.core.runtime_config import set_config_path

DEFINITION = {
    "size": [120, 80],
    "let": {"r": 10},
    "circle": {"cx": 60, "cy": 40, "r": lambda s: s["r"] * 2, "fill": "tomato"},
}


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    set_config_path(None)
    yield
    set_config_path(None)


def test_render_returns_ast_and_svg() -> None:
    result = geolet.render(DEFINITION)

    assert result.ast.width == 120.0
    (circle,) = result.ast.elements
    assert circle.r == 20.0
    root = ET.fromstring(result.svg_string())
    assert root.attrib["viewBox"] == "0 0 120 80"


def test_svg_string_is_serialized_once() -> None:
    result = geolet.render(DEFINITION)
    assert result.svg_string() is result.svg_string()


def test_html_embeds_svg() -> None:
    result = geolet.render(DEFINITION)
    page = result.html(title="demo")

    assert result.svg_string() in page
    assert "<title>demo</title>" in page


def test_save_writes_svg_and_html(tmp_path: Path) -> None:
    result = geolet.render(DEFINITION)
    svg_path, html_path = result.save("my sketch", directory=tmp_path / "out")

    assert svg_path == tmp_path / "out" / "my_sketch.svg"
    assert html_path == tmp_path / "out" / "my_sketch.html"
    assert svg_path.read_text(encoding="utf-8").strip() == result.svg_string()
    assert result.svg_string() in html_path.read_text(encoding="utf-8")


def test_save_defaults_to_configured_output_dir(tmp_path: Path) -> None:
    svg_path, _ = geolet.render(DEFINITION).save("default")

    assert svg_path == Path("data") / "output" / "default.svg"
    assert (tmp_path / "data" / "output" / "default.svg").is_file()


def test_sanitize_name_rejects_empty() -> None:
    assert _sanitize_name("a/b c") == "a_b_c"
    with pytest.raises(ValueError):
        _sanitize_name("   ")


def test_render_propagates_definition_errors() -> None:
    with pytest.raises(geolet.DefinitionError):
        geolet.render({"size": [10, 10], "hexagon": {}})
