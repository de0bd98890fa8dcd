from pathlib import Path

import pytest

from geolet.core.runtime_config import output_root_dir, runtime_config, set_config_path


@pytest.fixture(autouse=True)
def _reset_runtime_config() -> None:
    set_config_path(None)
    yield
    set_config_path(None)


def _isolate_config_discovery(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))


def test_packaged_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    assert output_root_dir() == Path("data") / "output"
    cfg = runtime_config()
    assert cfg.config_path is None
    assert (cfg.default_fill, cfg.default_stroke, cfg.default_stroke_width) == ("none", "black", 1.0)
    assert cfg.svg_decimals == 2
    assert cfg.voronoi_resolution == 200
    assert cfg.poisson_max_attempts == 30
    assert cfg.pack_attempts_per_circle == 500


def test_discovered_config_overrides_packaged_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    discovered = tmp_path / ".geolet" / "config.yaml"
    discovered.parent.mkdir(parents=True, exist_ok=True)
    discovered.write_text(
        'paths:\n  output_dir: "./out_discovered"\nstyle:\n  stroke: "#333"\n',
        encoding="utf-8",
    )

    assert output_root_dir() == Path("out_discovered")
    cfg = runtime_config()
    assert cfg.config_path == discovered
    assert cfg.default_stroke == "#333"
    # 未指定のキーは同梱デフォルトを引き継ぐ。
    assert cfg.default_fill == "none"
    assert cfg.voronoi_resolution == 200


def test_home_config_is_discovered(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    home_cfg = tmp_path / ".config" / "geolet" / "config.yaml"
    home_cfg.parent.mkdir(parents=True, exist_ok=True)
    home_cfg.write_text("generators:\n  voronoi:\n    resolution: 64\n", encoding="utf-8")

    cfg = runtime_config()
    assert cfg.config_path == home_cfg
    assert cfg.voronoi_resolution == 64


def test_explicit_config_overrides_discovered_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    discovered = tmp_path / ".geolet" / "config.yaml"
    discovered.parent.mkdir(parents=True, exist_ok=True)
    discovered.write_text('paths:\n  output_dir: "./out_discovered"\n', encoding="utf-8")

    explicit = tmp_path / "explicit.yaml"
    explicit.write_text(
        'paths:\n  output_dir: "./out_explicit"\nexport:\n  svg:\n    decimals: 4\n',
        encoding="utf-8",
    )
    set_config_path(explicit)

    assert output_root_dir() == Path("out_explicit")
    cfg = runtime_config()
    assert cfg.config_path == explicit
    assert cfg.svg_decimals == 4


def test_config_is_cached_until_path_changes(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    first = runtime_config()
    assert runtime_config() is first

    explicit = tmp_path / "explicit.yaml"
    explicit.write_text("generators:\n  pack:\n    attempts_per_circle: 10\n", encoding="utf-8")
    set_config_path(explicit)
    assert runtime_config().pack_attempts_per_circle == 10


def test_explicit_config_path_missing_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    set_config_path(tmp_path / "missing.yaml")

    with pytest.raises(FileNotFoundError):
        output_root_dir()


@pytest.mark.parametrize(
    ("text", "exc"),
    [
        ("- not\n- a mapping\n", RuntimeError),
        ("version: 2\n", RuntimeError),
        ("generators:\n  voronoi:\n    resolution: 0\n", ValueError),
        ("generators:\n  poisson:\n    max_attempts: many\n", RuntimeError),
        ("style:\n  stroke_width: -1\n", ValueError),
        ("export:\n  svg:\n    decimals: -1\n", ValueError),
        ("paths: [1, 2]\n", RuntimeError),
    ],
)
def test_invalid_values_raise(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, text: str, exc: type) -> None:
    _isolate_config_discovery(tmp_path, monkeypatch)

    explicit = tmp_path / "bad.yaml"
    explicit.write_text(text, encoding="utf-8")
    set_config_path(explicit)

    with pytest.raises(exc):
        runtime_config()
