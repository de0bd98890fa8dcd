"""`random`: 矩形領域内に一様乱数で点を置く generator。"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

import numpy as np

from geolet.core.generator_registry import Step, generator, make_step
from geolet.core.meta import ParamMeta
from geolet.core.scope import Scope
from geolet.core.generators.util import parse_bounds

random_meta = {
    "count": ParamMeta(kind="int"),
    "bounds": ParamMeta(kind="bounds"),
    "seed": ParamMeta(kind="int"),
}


@generator(name="random", meta=random_meta)
def random_points(
    scope: Scope,
    *,
    count: int,
    bounds: Mapping[str, Any],
    seed: int | None = None,
) -> Iterator[Step]:
    """bounds の外接矩形内に count 個の一様乱数点を返す。

    seed を省略すると実行ごとに異なる点列になる。
    """
    n = int(count)
    if n < 0:
        raise ValueError(f"random.count は 0 以上である必要がある: got={n}")
    x0, y0, x1, y1 = parse_bounds(bounds).box
    rng = np.random.default_rng(seed)
    xs = x0 + rng.random(n) * (x1 - x0)
    ys = y0 + rng.random(n) * (y1 - y0)
    for i in range(n):
        yield make_step(i, n, x=float(xs[i]), y=float(ys[i]))


__all__ = ["random_meta", "random_points"]
