"""`pack`: 乱択棄却サンプリングによる円充填の generator。"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

import numpy as np

from geolet.core.generator_registry import Step, generator, make_step
from geolet.core.meta import ParamMeta
from geolet.core.runtime_config import runtime_config
from geolet.core.scope import Scope
from geolet.core.generators.util import Bounds, parse_bounds

_logger = logging.getLogger(__name__)

pack_meta = {
    "bounds": ParamMeta(kind="bounds"),
    "count": ParamMeta(kind="int"),
    "min_radius": ParamMeta(kind="float"),
    "max_radius": ParamMeta(kind="float"),
    "padding": ParamMeta(kind="float"),
    "seed": ParamMeta(kind="int"),
}


def pack_circles(
    bounds: Bounds,
    count: int,
    min_radius: float,
    max_radius: float,
    padding: float,
    *,
    attempts: int,
    rng: np.random.Generator,
) -> np.ndarray:
    """(cx, cy, r) の配列 shape (N,3) を大きい順に返す。N <= count。"""
    x0, y0, x1, y1 = bounds.box
    circles = np.empty((count, 3), dtype=np.float64)
    n = 0
    for _ in range(attempts):
        if n >= count:
            break
        r = min_radius + rng.random() * (max_radius - min_radius)
        px = x0 + rng.random() * (x1 - x0)
        py = y0 + rng.random() * (y1 - y0)
        if not bounds.contains_circle(px, py, r):
            continue
        if n > 0:
            placed = circles[:n]
            dist = np.hypot(placed[:, 0] - px, placed[:, 1] - py)
            if np.any(dist < placed[:, 2] + r + padding):
                continue
        circles[n] = (px, py, r)
        n += 1
    out = circles[:n]
    order = np.argsort(-out[:, 2], kind="stable")
    return out[order]


@generator(meta=pack_meta)
def pack(
    scope: Scope,
    *,
    bounds: Mapping[str, Any],
    count: int,
    min_radius: float = 5.0,
    max_radius: float = 20.0,
    padding: float = 0.0,
    seed: int | None = None,
) -> Iterator[Step]:
    """重ならない円を最大 count 個置き、中心 x, y と半径 r を大きい順に返す。

    Notes
    -----
    試行回数は ``count × generators.pack.attempts_per_circle``。予算を使い切ると
    count を下回った部分的な結果を返す（エラーではない）。
    """
    n = int(count)
    if n < 0:
        raise ValueError(f"pack.count は 0 以上である必要がある: got={n}")
    lo, hi = float(min_radius), float(max_radius)
    if lo < 0 or hi < lo:
        raise ValueError(f"pack の半径範囲が不正: min_radius={lo}, max_radius={hi}")
    attempts = n * runtime_config().pack_attempts_per_circle
    circles = pack_circles(
        parse_bounds(bounds),
        n,
        lo,
        hi,
        float(padding),
        attempts=attempts,
        rng=np.random.default_rng(seed),
    )
    placed = circles.shape[0]
    if placed < n:
        _logger.info("pack: 要求 %d 個に対し %d 個を配置", n, placed)
    for i in range(placed):
        cx, cy, r = circles[i]
        yield make_step(i, placed, x=float(cx), y=float(cy), r=float(r))


__all__ = ["pack", "pack_circles", "pack_meta"]
