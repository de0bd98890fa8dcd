"""`attractor`: 3 次元カオス ODE を Euler 法で積分し、xy 射影を返す generator。"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

import numpy as np
from numba import njit  # type: ignore[import-untyped]

from geolet.core.errors import UnknownVariantError
from geolet.core.generator_registry import Step, generator, make_step
from geolet.core.meta import ParamMeta
from geolet.core.scope import Scope

TRANSIENT_STEPS = 1000
INITIAL_STATE = (0.1, 0.0, 0.0)

# 種類ごとの係数既定値。順序は kernel へ渡す配列の並び。
ATTRACTOR_DEFAULTS: dict[str, dict[str, float]] = {
    "lorenz": {"sigma": 10.0, "rho": 28.0, "beta": 8.0 / 3.0},
    "rossler": {"a": 0.2, "b": 0.2, "c": 5.7},
    "thomas": {"b": 0.208186},
    "aizawa": {"a": 0.95, "b": 0.7, "c": 0.6, "d": 3.5, "e": 0.25, "f": 0.1},
    "halvorsen": {"a": 1.89},
}
ATTRACTOR_TYPES = tuple(ATTRACTOR_DEFAULTS)

attractor_meta = {
    "type": ParamMeta(kind="choice", choices=ATTRACTOR_TYPES),
    "cx": ParamMeta(kind="float"),
    "cy": ParamMeta(kind="float"),
    "scale": ParamMeta(kind="float"),
    "iterations": ParamMeta(kind="int"),
    "dt": ParamMeta(kind="float"),
    "params": ParamMeta(kind="mapping"),
    "initial": ParamMeta(kind="mapping"),
}


@njit(cache=True)
def _derivative(kind: int, x: float, y: float, z: float, p: np.ndarray) -> tuple[float, float, float]:
    if kind == 0:
        return p[0] * (y - x), x * (p[1] - z) - y, x * y - p[2] * z
    if kind == 1:
        return -y - z, x + p[0] * y, p[1] + z * (x - p[2])
    if kind == 2:
        return np.sin(y) - p[0] * x, np.sin(z) - p[0] * y, np.sin(x) - p[0] * z
    if kind == 3:
        a, b, c, d, e, f = p[0], p[1], p[2], p[3], p[4], p[5]
        dx = (z - b) * x - d * y
        dy = d * x + (z - b) * y
        dz = c + a * z - z * z * z / 3.0 - (x * x + y * y) * (1.0 + e * z) + f * z * x * x * x
        return dx, dy, dz
    a = p[0]
    return (
        -a * x - 4.0 * y - 4.0 * z - y * y,
        -a * y - 4.0 * z - 4.0 * x - z * z,
        -a * z - 4.0 * x - 4.0 * y - x * x,
    )


@njit(cache=True)
def integrate_attractor(
    kind: int, params: np.ndarray, state: np.ndarray, dt: float, iterations: int, transient: int
) -> np.ndarray:
    """Euler 法で積分し、過渡応答を捨てた後の (iterations, 3) 軌道を返す。"""
    x, y, z = state[0], state[1], state[2]
    for _ in range(transient):
        dx, dy, dz = _derivative(kind, x, y, z, params)
        x += dx * dt
        y += dy * dt
        z += dz * dt
    out = np.empty((iterations, 3), dtype=np.float64)
    for k in range(iterations):
        dx, dy, dz = _derivative(kind, x, y, z, params)
        x += dx * dt
        y += dy * dt
        z += dz * dt
        out[k, 0] = x
        out[k, 1] = y
        out[k, 2] = z
    return out


def _coefficients(kind: str, overrides: Mapping[str, Any] | None) -> np.ndarray:
    defaults = ATTRACTOR_DEFAULTS[kind]
    values = dict(defaults)
    for key, value in (overrides or {}).items():
        if key not in defaults:
            raise UnknownVariantError(f"attractor.{kind}.params", key, tuple(defaults))
        values[key] = float(value)
    return np.array([values[k] for k in defaults], dtype=np.float64)


@generator(meta=attractor_meta)
def attractor(
    scope: Scope,
    *,
    type: str = "lorenz",
    cx: float = 0.0,
    cy: float = 0.0,
    scale: float = 1.0,
    iterations: int = 5000,
    dt: float = 0.01,
    params: Mapping[str, Any] | None = None,
    initial: Mapping[str, Any] | None = None,
) -> Iterator[Step]:
    """ストレンジアトラクタの軌道を返す。

    Parameters
    ----------
    type : {"lorenz", "rossler", "thomas", "aizawa", "halvorsen"}
        方程式の種類。
    cx, cy, scale : float
        2D 射影 ``(cx + x·scale, cy + y·scale)`` の中心と倍率。
    iterations : int
        出力点数。先頭の `TRANSIENT_STEPS` 回は過渡応答として捨てる。
    dt : float
        Euler 法の時間刻み。
    params : mapping, optional
        係数の上書き（lorenz なら sigma/rho/beta など）。
    initial : mapping, optional
        初期状態 ``{x, y, z}``。既定は (0.1, 0, 0)。

    Notes
    -----
    ステップの ``z`` は射影前の z 座標。
    """
    n = int(iterations)
    if n < 0:
        raise ValueError(f"attractor.iterations は 0 以上である必要がある: got={n}")
    kind_id = ATTRACTOR_TYPES.index(type)
    coeffs = _coefficients(type, params)
    init = dict(zip("xyz", INITIAL_STATE))
    for key, value in (initial or {}).items():
        if key not in init:
            raise UnknownVariantError("attractor.initial", key, ("x", "y", "z"))
        init[key] = float(value)
    state = np.array([init["x"], init["y"], init["z"]], dtype=np.float64)

    trajectory = integrate_attractor(kind_id, coeffs, state, float(dt), n, TRANSIENT_STEPS)
    for i in range(n):
        x, y, z = trajectory[i]
        yield make_step(
            i,
            n,
            x=cx + float(x) * scale,
            y=cy + float(y) * scale,
            z=float(z),
        )


__all__ = [
    "ATTRACTOR_DEFAULTS",
    "ATTRACTOR_TYPES",
    "TRANSIENT_STEPS",
    "attractor",
    "attractor_meta",
    "integrate_attractor",
]
