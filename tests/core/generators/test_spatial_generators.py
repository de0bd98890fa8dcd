"""random / poisson / pack / noise / voronoi / delaunay / tile / distribute generator のテスト群。"""

from __future__ import annotations

import math
from pathlib import Path

import numpy as np
import pytest

from geolet.core import builtins  # noqa: F401
from geolet.core.generator_registry import generator_registry
from geolet.core.generators.delaunay import circumcircle, triangulate
from geolet.core.generators.voronoi import convex_hull
from geolet.core.runtime_config import set_config_path
from geolet.core.scope import Scope

BOUNDS = {"x": 20, "y": 20, "width": 360, "height": 360}

SITES = [
    [50, 80], [120, 40], [200, 60], [280, 30], [350, 70],
    [40, 150], [100, 180], [180, 140], [260, 160], [340, 130],
    [60, 240], [140, 280], [220, 220], [300, 260], [370, 200],
    [30, 320], [110, 360], [190, 340], [270, 380], [350, 330],
]


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    set_config_path(None)
    yield
    set_config_path(None)


def _steps(name: str, scope: Scope | None = None, **params) -> list[dict]:
    return list(generator_registry.get(name)(params, scope or Scope()))


def _xy(steps: list[dict]) -> np.ndarray:
    return np.array([[s["x"], s["y"]] for s in steps], dtype=np.float64).reshape(-1, 2)


def test_random_is_seeded_and_bounded() -> None:
    a = _steps("random", count=100, bounds=BOUNDS, seed=12345)
    b = _steps("random", count=100, bounds=BOUNDS, seed=12345)
    c = _steps("random", count=100, bounds=BOUNDS, seed=7)

    assert len(a) == 100
    np.testing.assert_array_equal(_xy(a), _xy(b))
    assert not np.allclose(_xy(a), _xy(c))
    xy = _xy(a)
    assert np.all((xy >= 20) & (xy <= 380))


def test_poisson_respects_minimum_separation() -> None:
    steps = _steps("poisson", radius=20, bounds=BOUNDS, seed=42)
    xy = _xy(steps)

    assert len(steps) > 50
    d = np.hypot(xy[:, None, 0] - xy[None, :, 0], xy[:, None, 1] - xy[None, :, 1])
    np.fill_diagonal(d, np.inf)
    assert d.min() >= 20.0
    assert steps[-1]["t"] == 1.0


def test_poisson_terminates_when_space_is_exhausted() -> None:
    steps = _steps("poisson", radius=500, bounds=BOUNDS, seed=1)
    assert len(steps) == 1


def test_poisson_count_caps_output(caplog: pytest.LogCaptureFixture) -> None:
    assert len(_steps("poisson", radius=5, bounds=BOUNDS, seed=3, count=10)) == 10

    with caplog.at_level("INFO"):
        steps = _steps("poisson", radius=300, bounds=BOUNDS, seed=3, count=10)
    assert len(steps) < 10
    assert "poisson" in caplog.text


def test_pack_places_non_overlapping_circles_largest_first() -> None:
    steps = _steps(
        "pack",
        bounds={"type": "circle", "cx": 200, "cy": 200, "r": 180},
        count=60,
        min_radius=5,
        max_radius=30,
        padding=2,
        seed=1,
    )
    circles = np.array([[s["x"], s["y"], s["r"]] for s in steps])

    assert 0 < len(steps) <= 60
    assert list(circles[:, 2]) == sorted(circles[:, 2], reverse=True)
    assert np.all((circles[:, 2] >= 5) & (circles[:, 2] <= 30))
    assert np.all(np.hypot(circles[:, 0] - 200, circles[:, 1] - 200) + circles[:, 2] <= 180 + 1e-9)
    for k in range(len(circles)):
        for j in range(k + 1, len(circles)):
            gap = math.hypot(*(circles[k, :2] - circles[j, :2]))
            assert gap >= circles[k, 2] + circles[j, 2] + 2 - 1e-9


def test_pack_rect_bounds_and_under_fill(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("INFO"):
        steps = _steps(
            "pack",
            bounds={"x": 0, "y": 0, "width": 100, "height": 100},
            count=50,
            min_radius=30,
            max_radius=40,
            seed=2,
        )
    assert len(steps) < 50
    assert "pack" in caplog.text
    for s in steps:
        assert s["r"] <= s["x"] <= 100 - s["r"]
        assert s["r"] <= s["y"] <= 100 - s["r"]


def test_pack_rejects_unknown_bounds_type() -> None:
    from geolet.core.errors import UnknownVariantError

    with pytest.raises(UnknownVariantError):
        _steps("pack", bounds={"type": "hexagon"}, count=3)


@pytest.mark.parametrize("kind", ["perlin", "value"])
def test_noise_grid_values(kind: str) -> None:
    steps = _steps("noise", bounds={"width": 100, "height": 50}, cols=10, rows=5, scale=0.05, type=kind, seed=1)
    again = _steps("noise", bounds={"width": 100, "height": 50}, cols=10, rows=5, scale=0.05, type=kind, seed=1)
    other = _steps("noise", bounds={"width": 100, "height": 50}, cols=10, rows=5, scale=0.05, type=kind, seed=2)
    values = np.array([s["value"] for s in steps])

    assert len(steps) == 50
    assert (steps[11]["row"], steps[11]["col"]) == (1, 1)
    assert (steps[11]["x"], steps[11]["y"]) == (15.0, 15.0)
    assert np.all(np.abs(values) <= 1.5)
    assert np.std(values) > 0.0
    np.testing.assert_array_equal(values, [s["value"] for s in again])
    assert not np.allclose(values, [s["value"] for s in other])


def test_convex_hull_drops_interior_and_collinear_points() -> None:
    pts = np.array([[0, 0], [2, 0], [1, 0], [2, 2], [0, 2], [1, 1], [1, 2]], dtype=np.float64)
    hull = convex_hull(pts)

    assert {tuple(p) for p in hull} == {(0.0, 0.0), (2.0, 0.0), (2.0, 2.0), (0.0, 2.0)}
    assert len(hull) == 4


def test_voronoi_has_one_cell_per_site() -> None:
    steps = _steps("voronoi", points=SITES, bounds={"x": 0, "y": 0, "width": 400, "height": 400}, resolution=120)

    assert len(steps) == len(SITES)
    for s in steps:
        poly = np.array(s["vertices"])
        assert poly.shape[0] >= 3
        assert np.all((poly >= 0) & (poly <= 400))


def test_voronoi_cell_contains_its_site() -> None:
    steps = _steps("voronoi", points=SITES, bounds={"x": 0, "y": 0, "width": 400, "height": 400}, resolution=80)

    for s in steps:
        poly = np.array(s["vertices"])
        px, py = s["x"], s["y"]
        # 凸多角形の内側（境界含む）なら全辺の外積が同符号。
        crosses = [
            (b[0] - a[0]) * (py - a[1]) - (b[1] - a[1]) * (px - a[0])
            for a, b in zip(poly, np.roll(poly, -1, axis=0))
        ]
        assert all(c >= -1e-9 for c in crosses) or all(c <= 1e-9 for c in crosses)


def test_voronoi_handles_close_sites() -> None:
    steps = _steps("voronoi", points=[[10, 10], [10.5, 10], [50, 50], [90, 20]], bounds={"width": 100, "height": 100}, resolution=20)
    assert len(steps) == 4


def test_voronoi_degrades_with_fewer_than_three_sites() -> None:
    assert _steps("voronoi", points=[[1, 1], [5, 5]]) == []
    assert _steps("voronoi", points=[]) == []


def test_delaunay_hexagon_fan() -> None:
    hexagon = [[math.cos(k * math.pi / 3) * 10, math.sin(k * math.pi / 3) * 10] for k in range(6)]
    steps = _steps("delaunay", points=hexagon + [[0, 0]])

    # 2n - 2 - k = 14 - 2 - 6
    assert len(steps) == 6
    for s in steps:
        assert [0.0, 0.0] in [list(v) for v in s["vertices"]]


def _triangle_area(a, b, c) -> float:
    return abs((b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])) / 2.0


def _polygon_area(poly: np.ndarray) -> float:
    x, y = poly[:, 0], poly[:, 1]
    return abs(float(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))) / 2.0


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4, 5, 7, 11, 23, 42])
def test_delaunay_covers_hull_with_exact_triangle_count(seed: int) -> None:
    pts = np.random.default_rng(seed).random((30, 2)) * 300
    tris = triangulate([tuple(p) for p in pts])
    hull = convex_hull(pts)
    n, k = len(pts), len(hull)
    inputs = {tuple(p) for p in pts}

    assert len(tris) == 2 * n - 2 - k
    assert sum(_triangle_area(*tri) for tri in tris) == pytest.approx(_polygon_area(hull), rel=1e-9)
    for tri in tris:
        assert all(v in inputs for v in tri)
        circle = circumcircle(*tri)
        assert circle is not None
        ux, uy, r2 = circle
        d2 = (pts[:, 0] - ux) ** 2 + (pts[:, 1] - uy) ** 2
        assert np.all(d2 >= r2 * (1 - 1e-9))


def test_delaunay_keeps_points_on_hull_edges() -> None:
    grid = [(x, y) for y in range(3) for x in range(3)]
    tris = triangulate(grid)

    # 境界上の 8 点はすべて頂点になる: 2·9 - 2 - 8
    assert len(tris) == 8
    assert sum(_triangle_area(*tri) for tri in tris) == pytest.approx(4.0)
    assert {v for tri in tris for v in tri} == {(float(x), float(y)) for x, y in grid}


def test_delaunay_steps_carry_vertices_and_centroid() -> None:
    steps = _steps("delaunay", points=[[0, 0], [30, 0], [0, 30]])

    assert len(steps) == 1
    s = steps[0]
    assert (s["x"], s["y"]) == (10.0, 10.0)
    assert {(s["x1"], s["y1"]), (s["x2"], s["y2"]), (s["x3"], s["y3"])} == {(0.0, 0.0), (30.0, 0.0), (0.0, 30.0)}


def test_delaunay_degenerate_input_yields_nothing() -> None:
    assert _steps("delaunay", points=[[0, 0], [1, 1]]) == []
    assert _steps("delaunay", points=[[0, 0], [1, 1], [2, 2], [3, 3]]) == []
    assert _steps("delaunay", points=[[0, 0], [0, 0], [1, 0]]) == []


def test_square_tiles_checkerboard_layout() -> None:
    steps = _steps("tile", type="square", size=50, cols=8, rows=8)

    assert len(steps) == 64
    assert steps[9]["vertices"] == [(50.0, 50.0), (100.0, 50.0), (100.0, 100.0), (50.0, 100.0)]
    assert (steps[9]["x"], steps[9]["y"]) == (75.0, 75.0)


def test_hex_tiles_offset_odd_rows() -> None:
    steps = _steps("tile", type="hex", size=30, cols=3, rows=2)
    w = math.sqrt(3) * 30

    assert all(len(s["vertices"]) == 6 for s in steps)
    assert steps[1]["x"] - steps[0]["x"] == pytest.approx(w)
    assert steps[3]["x"] - steps[0]["x"] == pytest.approx(w / 2)
    assert steps[3]["y"] - steps[0]["y"] == pytest.approx(45.0)


def test_triangle_tiles_alternate_orientation() -> None:
    steps = _steps("tile", type="triangle", size=10, cols=2, rows=1)
    up, down = steps[0]["vertices"], steps[1]["vertices"]
    h = 10 * math.sqrt(3) / 2

    assert up[0] == (5.0, 0.0)
    assert up[1][1] == pytest.approx(h) and up[2][1] == pytest.approx(h)
    assert down[0][1] == 0.0 and down[1][1] == 0.0
    assert down[2][1] == pytest.approx(h)


def test_distribute_line_includes_endpoints() -> None:
    steps = _steps("distribute", type="line", count=5, x1=0, y1=0, x2=40, y2=40)

    np.testing.assert_allclose(_xy(steps), [[0, 0], [10, 10], [20, 20], [30, 30], [40, 40]])
    assert steps[0]["angle"] == pytest.approx(math.pi / 4)


def test_distribute_full_circle_has_no_duplicate_endpoint() -> None:
    steps = _steps("distribute", type="circle", count=4, cx=0, cy=0, r=10)

    np.testing.assert_allclose(_xy(steps), [[10, 0], [0, 10], [-10, 0], [0, -10]], atol=1e-9)


def test_distribute_arc_includes_both_ends() -> None:
    steps = _steps("distribute", type="circle", count=3, r=10, start_angle=0, end_angle=180)

    np.testing.assert_allclose(_xy(steps), [[10, 0], [0, 10], [-10, 0]], atol=1e-9)


def test_distribute_phyllotaxis_radius_grows_with_sqrt() -> None:
    steps = _steps("distribute", type="phyllotaxis", count=10, spacing=4)

    for k, s in enumerate(steps):
        assert math.hypot(s["x"], s["y"]) == pytest.approx(4 * math.sqrt(k))
