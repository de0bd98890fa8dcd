"""`spiral`: アルキメデス / 対数 / フェルマーの螺旋を等分サンプリングする generator。"""

from __future__ import annotations

import math
from collections.abc import Iterator

from geolet.core.generator_registry import Step, generator, make_step
from geolet.core.meta import ParamMeta
from geolet.core.scope import Scope
from geolet.core.generators.util import sample_count

SPIRAL_TYPES = ("archimedean", "logarithmic", "fermat")
DEFAULT_SAMPLES = 200

# 対数螺旋で半径 0 を log に渡さないための下限。
MIN_LOG_RADIUS = 1e-6

spiral_meta = {
    "cx": ParamMeta(kind="float"),
    "cy": ParamMeta(kind="float"),
    "start_radius": ParamMeta(kind="float"),
    "end_radius": ParamMeta(kind="float"),
    "turns": ParamMeta(kind="float"),
    "type": ParamMeta(kind="choice", choices=SPIRAL_TYPES),
    "samples": ParamMeta(kind="int"),
}


def spiral_radius(
    kind: str, theta: float, t: float, r0: float, r1: float, total_angle: float
) -> float:
    """螺旋の種類ごとの半径則 r(θ) を返す。"""
    if kind == "logarithmic":
        a = max(r0, MIN_LOG_RADIUS)
        b = max(r1, MIN_LOG_RADIUS)
        if total_angle <= 0.0:
            return a
        k = math.log(b / a) / total_angle
        return a * math.exp(k * theta)
    if kind == "fermat":
        if total_angle <= 0.0:
            return r0
        a = (r1 - r0) / math.sqrt(total_angle)
        return r0 + a * math.sqrt(theta)
    return r0 + (r1 - r0) * t


@generator(meta=spiral_meta)
def spiral(
    scope: Scope,
    *,
    cx: float = 0.0,
    cy: float = 0.0,
    start_radius: float = 0.0,
    end_radius: float = 100.0,
    turns: float = 3.0,
    type: str = "archimedean",
    samples: int | None = None,
) -> Iterator[Step]:
    """θ = t·turns·2π に沿って螺旋上の点を返す。

    Parameters
    ----------
    cx, cy : float
        中心。
    start_radius, end_radius : float
        θ=0 と θ=終端での半径。
    turns : float
        回転数。
    type : {"archimedean", "logarithmic", "fermat"}
        半径則。archimedean は線形補間、logarithmic は r0·e^{kθ}
        （k は始端・終端半径と総角度から決める）、fermat は r0 + a√θ。
    samples : int, optional
        分割数。ステップ数は samples + 1。
    """
    n = sample_count(samples, DEFAULT_SAMPLES)
    total_angle = float(turns) * 2.0 * math.pi
    count = n + 1
    for i in range(count):
        t = i / n
        theta = t * total_angle
        r = spiral_radius(type, theta, t, float(start_radius), float(end_radius), total_angle)
        yield make_step(
            i,
            count,
            x=cx + r * math.cos(theta),
            y=cy + r * math.sin(theta),
            theta=theta,
            r=r,
        )


__all__ = ["SPIRAL_TYPES", "spiral", "spiral_meta", "spiral_radius"]
