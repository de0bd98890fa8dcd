"""`epitrochoid` / `hypotrochoid`: 転がり円で描くスピログラフ曲線の generator。"""

from __future__ import annotations

import math
from collections.abc import Iterator

from geolet.core.generator_registry import Step, generator, make_step
from geolet.core.meta import ParamMeta
from geolet.core.scope import Scope

# 1 回転あたりのサンプル数（samples 省略時は回転数に比例させる）。
SAMPLES_PER_REVOLUTION = 100

trochoid_meta = {
    "cx": ParamMeta(kind="float"),
    "cy": ParamMeta(kind="float"),
    "R": ParamMeta(kind="float"),
    "r": ParamMeta(kind="float"),
    "d": ParamMeta(kind="float"),
    "revolutions": ParamMeta(kind="float"),
    "samples": ParamMeta(kind="int"),
}


def closing_revolutions(R: float, r: float) -> float:
    """曲線がちょうど閉じる回転数 r / gcd(round(R), round(r)) を返す。"""
    g = math.gcd(int(round(R)), int(round(r)))
    if g == 0:
        return 1.0
    return abs(float(r)) / g


def _sampling(R: float, r: float, revolutions: float | None, samples: int | None) -> tuple[float, int]:
    if r == 0.0:
        raise ValueError("転がり円の半径 r は 0 以外である必要がある")
    revs = closing_revolutions(R, r) if revolutions is None else float(revolutions)
    if samples is None:
        n = max(1, int(math.ceil(revs * SAMPLES_PER_REVOLUTION)))
    else:
        n = int(samples)
        if n < 1:
            raise ValueError(f"samples は 1 以上である必要がある: got={n}")
    return revs * 2.0 * math.pi, n


@generator(meta=trochoid_meta)
def epitrochoid(
    scope: Scope,
    *,
    R: float,
    r: float,
    d: float,
    cx: float = 0.0,
    cy: float = 0.0,
    revolutions: float | None = None,
    samples: int | None = None,
) -> Iterator[Step]:
    """固定円 R の外側を半径 r の円が転がるときのペン位置（距離 d）を返す。

    x = (R+r)cosθ - d·cos((R+r)/r·θ)
    y = (R+r)sinθ - d·sin((R+r)/r·θ)
    """
    total, n = _sampling(R, r, revolutions, samples)
    k = (R + r) / r
    count = n + 1
    for i in range(count):
        theta = (i / n) * total
        yield make_step(
            i,
            count,
            x=cx + (R + r) * math.cos(theta) - d * math.cos(k * theta),
            y=cy + (R + r) * math.sin(theta) - d * math.sin(k * theta),
            theta=theta,
        )


@generator(meta=trochoid_meta)
def hypotrochoid(
    scope: Scope,
    *,
    R: float,
    r: float,
    d: float,
    cx: float = 0.0,
    cy: float = 0.0,
    revolutions: float | None = None,
    samples: int | None = None,
) -> Iterator[Step]:
    """固定円 R の内側を半径 r の円が転がるときのペン位置（距離 d）を返す。

    x = (R-r)cosθ + d·cos((R-r)/r·θ)
    y = (R-r)sinθ - d·sin((R-r)/r·θ)
    """
    total, n = _sampling(R, r, revolutions, samples)
    k = (R - r) / r
    count = n + 1
    for i in range(count):
        theta = (i / n) * total
        yield make_step(
            i,
            count,
            x=cx + (R - r) * math.cos(theta) + d * math.cos(k * theta),
            y=cy + (R - r) * math.sin(theta) - d * math.sin(k * theta),
            theta=theta,
        )


__all__ = ["closing_revolutions", "epitrochoid", "hypotrochoid", "trochoid_meta"]
