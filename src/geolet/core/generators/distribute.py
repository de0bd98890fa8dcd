"""`distribute`: 線分・円周・フィロタキシス（ひまわり配置）上に点を並べる generator。"""

from __future__ import annotations

import math
from collections.abc import Iterator

from geolet.core.generator_registry import Step, generator, make_step
from geolet.core.meta import ParamMeta
from geolet.core.scope import Scope

DISTRIBUTE_TYPES = ("line", "circle", "phyllotaxis")
GOLDEN_ANGLE = math.pi * (3.0 - math.sqrt(5.0))

distribute_meta = {
    "type": ParamMeta(kind="choice", choices=DISTRIBUTE_TYPES),
    "count": ParamMeta(kind="int"),
    "x1": ParamMeta(kind="float"),
    "y1": ParamMeta(kind="float"),
    "x2": ParamMeta(kind="float"),
    "y2": ParamMeta(kind="float"),
    "cx": ParamMeta(kind="float"),
    "cy": ParamMeta(kind="float"),
    "r": ParamMeta(kind="float"),
    "start_angle": ParamMeta(kind="float"),
    "end_angle": ParamMeta(kind="float"),
    "spacing": ParamMeta(kind="float"),
}


@generator(meta=distribute_meta)
def distribute(
    scope: Scope,
    *,
    count: int,
    type: str = "line",
    x1: float = 0.0,
    y1: float = 0.0,
    x2: float = 100.0,
    y2: float = 0.0,
    cx: float = 0.0,
    cy: float = 0.0,
    r: float = 100.0,
    start_angle: float = 0.0,
    end_angle: float = 360.0,
    spacing: float = 5.0,
) -> Iterator[Step]:
    """count 個の点を x, y と angle（ラジアン）付きで返す。

    - line: (x1, y1)→(x2, y2) を両端含みで等分。angle は線分の向き。
    - circle: start_angle→end_angle（度）を等分。一周する場合は終端の重複点を出さない。
      angle は中心から見た方位。
    - phyllotaxis: k 番目の点を半径 spacing·√k、角度 k·黄金角に置く。
    """
    n = int(count)
    if n < 0:
        raise ValueError(f"distribute.count は 0 以上である必要がある: got={n}")

    if type == "line":
        direction = math.atan2(y2 - y1, x2 - x1)
        for i in range(n):
            f = i / (n - 1) if n > 1 else 0.0
            yield make_step(i, n, x=x1 + (x2 - x1) * f, y=y1 + (y2 - y1) * f, angle=direction)
        return

    if type == "circle":
        a0 = math.radians(start_angle)
        a1 = math.radians(end_angle)
        full = math.isclose(abs(end_angle - start_angle) % 360.0, 0.0) and end_angle != start_angle
        divisions = n if full else max(n - 1, 1)
        for i in range(n):
            a = a0 + (a1 - a0) * (i / divisions)
            yield make_step(i, n, x=cx + r * math.cos(a), y=cy + r * math.sin(a), angle=a)
        return

    for i in range(n):
        a = i * GOLDEN_ANGLE
        radius = spacing * math.sqrt(i)
        yield make_step(i, n, x=cx + radius * math.cos(a), y=cy + radius * math.sin(a), angle=a)


__all__ = ["DISTRIBUTE_TYPES", "GOLDEN_ANGLE", "distribute", "distribute_meta"]
