"""`noise`: 領域上の cols×rows グリッドでコヒーレントノイズを標本化する generator。"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

import numpy as np

from geolet.core.generator_registry import Step, generator, make_step
from geolet.core.meta import ParamMeta
from geolet.core.noise import NOISE_KINDS, sample_fbm
from geolet.core.scope import Scope
from geolet.core.generators.util import parse_bounds

noise_meta = {
    "bounds": ParamMeta(kind="bounds"),
    "cols": ParamMeta(kind="int"),
    "rows": ParamMeta(kind="int"),
    "scale": ParamMeta(kind="float"),
    "octaves": ParamMeta(kind="int"),
    "persistence": ParamMeta(kind="float"),
    "lacunarity": ParamMeta(kind="float"),
    "type": ParamMeta(kind="choice", choices=NOISE_KINDS),
    "seed": ParamMeta(kind="float"),
}


@generator(name="noise", meta=noise_meta)
def noise_grid(
    scope: Scope,
    *,
    bounds: Mapping[str, Any],
    cols: int,
    rows: int,
    scale: float = 0.01,
    octaves: int = 4,
    persistence: float = 0.5,
    lacunarity: float = 2.0,
    type: str = "perlin",
    seed: float = 0.0,
) -> Iterator[Step]:
    """セル中心 x, y と fBm ノイズ値 value（おおよそ [-1, 1]）を行優先で返す。

    scale はノイズの空間周波数。seed はサンプリング領域を決定的にずらす。
    """
    if cols < 0 or rows < 0:
        raise ValueError("noise の cols/rows は 0 以上である必要がある")
    x0, y0, x1, y1 = parse_bounds(bounds).box
    count = cols * rows
    if count == 0:
        return
    cw = (x1 - x0) / cols
    ch = (y1 - y0) / rows
    col_idx, row_idx = np.meshgrid(np.arange(cols), np.arange(rows))
    xs = x0 + (col_idx.ravel() + 0.5) * cw
    ys = y0 + (row_idx.ravel() + 0.5) * ch
    values = sample_fbm(
        np.column_stack([xs, ys]),
        frequency=scale,
        octaves=octaves,
        persistence=persistence,
        lacunarity=lacunarity,
        kind=type,
        seed=seed,
    )
    for i in range(count):
        yield make_step(
            i,
            count,
            x=float(xs[i]),
            y=float(ys[i]),
            row=i // cols,
            col=i % cols,
            value=float(values[i]),
        )


__all__ = ["noise_grid", "noise_meta"]
