"""閉形式の曲線 generator（for/grid/spiral/lissajous/rose/parametric/superformula/trochoid）のテスト群。"""

from __future__ import annotations

import math

import numpy as np
import pytest

from geolet.core import builtins  # noqa: F401
from geolet.core.errors import GeneratorLimitError, UnknownVariantError
from geolet.core.generator_registry import generator_registry, make_step, progress
from geolet.core.generators import for_loop as for_loop_module
from geolet.core.generators.trochoid import closing_revolutions
from geolet.core.scope import Scope


def _steps(name: str, scope: Scope | None = None, **params) -> list[dict]:
    return list(generator_registry.get(name)(params, scope or Scope()))


def _xy(steps: list[dict]) -> np.ndarray:
    return np.array([[s["x"], s["y"]] for s in steps], dtype=np.float64)


def test_progress_is_zero_for_single_step() -> None:
    assert progress(0, 1) == 0.0
    assert progress(0, 0) == 0.0
    assert progress(3, 4) == 1.0
    assert make_step(1, 3, x=2.0) == {"i": 1, "t": 0.5, "x": 2.0}


def test_for_counts_to_exclusive_bound() -> None:
    steps = _steps("for", i=2, to=5)

    assert [s["i"] for s in steps] == [2, 3, 4]
    assert [s["t"] for s in steps] == [0.0, 0.5, 1.0]


def test_for_bound_is_reevaluated_with_i_in_scope() -> None:
    scope = Scope({"limit": 4})
    seen = []

    def to(s: Scope) -> float:
        seen.append(s.i)
        return s.limit

    steps = _steps("for", scope, to=to)

    assert len(steps) == 4
    assert seen[:5] == [0, 1, 2, 3, 4]


def test_for_is_capped(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(for_loop_module, "MAX_FOR_ITERATIONS", 10)
    with pytest.raises(GeneratorLimitError):
        _steps("for", to=math.inf)


def test_grid_is_row_major() -> None:
    steps = _steps("grid", cols=3, rows=2, cell_width=10, cell_height=20, x=100, y=0)

    assert [s["i"] for s in steps] == list(range(6))
    assert [(s["row"], s["col"]) for s in steps[:4]] == [(0, 0), (0, 1), (0, 2), (1, 0)]
    assert (steps[4]["x"], steps[4]["y"]) == (115.0, 30.0)


def test_spiral_sample_count_and_progress() -> None:
    steps = _steps("spiral", cx=0, cy=0, start_radius=10, end_radius=110, turns=2, samples=100)

    assert len(steps) == 101
    assert steps[0]["i"] == 0 and steps[0]["t"] == 0.0
    assert steps[100]["i"] == 100 and steps[100]["t"] == 1.0
    assert steps[50]["r"] == pytest.approx(60.0)
    assert steps[100]["theta"] == pytest.approx(4 * math.pi)


@pytest.mark.parametrize("kind", ["archimedean", "logarithmic", "fermat"])
def test_spiral_radius_laws_hit_both_ends(kind: str) -> None:
    steps = _steps("spiral", start_radius=5, end_radius=80, turns=3, type=kind, samples=60)

    assert steps[0]["r"] == pytest.approx(5.0)
    assert steps[-1]["r"] == pytest.approx(80.0)
    radii = [s["r"] for s in steps]
    assert radii == sorted(radii)


def test_spiral_rejects_unknown_type() -> None:
    with pytest.raises(UnknownVariantError):
        _steps("spiral", type="golden")


def test_lissajous_matches_closed_form() -> None:
    steps = _steps("lissajous", cx=150, cy=150, ax=100, ay=50, fx=3, fy=2, delta=0.5, samples=40)
    s = steps[7]
    phase = 2 * math.pi * 7 / 40

    assert s["x"] == pytest.approx(150 + 100 * math.sin(3 * phase + 0.5))
    assert s["y"] == pytest.approx(150 + 50 * math.sin(2 * phase))


def test_rose_petal_radius() -> None:
    steps = _steps("rose", r=120, k=5, samples=300)

    assert steps[0]["r"] == pytest.approx(120.0)
    for s in steps:
        assert math.hypot(s["x"], s["y"]) == pytest.approx(abs(s["r"]), abs=1e-9)


def test_parametric_binds_raw_parameter_as_t() -> None:
    scope = Scope({"scale": 2})
    steps = _steps(
        "parametric",
        scope,
        x=lambda s: s.scale * math.cos(s.t),
        y=lambda s: s.scale * math.sin(s.t),
        t=[0, math.pi],
        samples=4,
    )

    assert len(steps) == 5
    assert steps[2]["u"] == pytest.approx(math.pi / 2)
    assert steps[2]["t"] == pytest.approx(0.5)
    np.testing.assert_allclose(_xy(steps)[[0, 2, 4]], [[2, 0], [0, 2], [-2, 0]], atol=1e-12)


def test_superformula_circle_case() -> None:
    steps = _steps("superformula", cx=10, cy=10, scale=50, m=4, n1=2, n2=2, n3=2, samples=72)

    for s in steps:
        assert s["r"] == pytest.approx(50.0)
        assert math.hypot(s["x"] - 10, s["y"] - 10) == pytest.approx(50.0)


def test_hypotrochoid_closes_after_computed_revolutions() -> None:
    assert closing_revolutions(100, 40) == 2.0

    steps = _steps("hypotrochoid", cx=450, cy=150, R=100, r=40, d=30)
    xy = _xy(steps)

    assert len(steps) == 201
    np.testing.assert_allclose(xy[0], xy[-1], atol=1e-9)
    assert steps[-1]["theta"] == pytest.approx(4 * math.pi)


def test_epitrochoid_closes_and_starts_on_axis() -> None:
    steps = _steps("epitrochoid", R=60, r=20, d=30)
    xy = _xy(steps)

    np.testing.assert_allclose(xy[0], [60 + 20 - 30, 0.0], atol=1e-9)
    np.testing.assert_allclose(xy[0], xy[-1], atol=1e-9)


def test_trochoid_rejects_zero_rolling_radius() -> None:
    with pytest.raises(ValueError):
        _steps("hypotrochoid", R=100, r=0, d=10)
