"""`poisson`: ダーツ投げ法による Poisson-disk サンプリングの generator。"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

import numpy as np

from geolet.core.generator_registry import Step, generator, make_step
from geolet.core.meta import ParamMeta
from geolet.core.runtime_config import runtime_config
from geolet.core.scope import Scope
from geolet.core.generators.util import parse_bounds

_logger = logging.getLogger(__name__)

poisson_meta = {
    "radius": ParamMeta(kind="float"),
    "bounds": ParamMeta(kind="bounds"),
    "seed": ParamMeta(kind="int"),
    "max_attempts": ParamMeta(kind="int"),
    "count": ParamMeta(kind="int"),
}


def poisson_disk(
    x0: float,
    y0: float,
    x1: float,
    y1: float,
    radius: float,
    *,
    max_attempts: int,
    rng: np.random.Generator,
    limit: int | None = None,
) -> np.ndarray:
    """採択済みの全点から radius 以上離れた候補だけを採る。

    連続 max_attempts 回棄却された時点（または limit 個に達した時点）で終了し、
    shape (N,2) の配列を返す。
    """
    cap = 64
    accepted = np.empty((cap, 2), dtype=np.float64)
    n = 0
    r2 = radius * radius
    rejections = 0
    while rejections < max_attempts:
        if limit is not None and n >= limit:
            break
        px = x0 + rng.random() * (x1 - x0)
        py = y0 + rng.random() * (y1 - y0)
        if n > 0:
            d = accepted[:n] - (px, py)
            if np.min(d[:, 0] * d[:, 0] + d[:, 1] * d[:, 1]) < r2:
                rejections += 1
                continue
        if n == cap:
            cap *= 2
            grown = np.empty((cap, 2), dtype=np.float64)
            grown[:n] = accepted[:n]
            accepted = grown
        accepted[n] = (px, py)
        n += 1
        rejections = 0
    return accepted[:n].copy()


@generator(meta=poisson_meta)
def poisson(
    scope: Scope,
    *,
    radius: float,
    bounds: Mapping[str, Any],
    seed: int | None = None,
    max_attempts: int | None = None,
    count: int | None = None,
) -> Iterator[Step]:
    """最小間隔 radius を満たす点列を返す。

    Parameters
    ----------
    radius : float
        2 点間の最小距離（正の値）。
    bounds : mapping
        サンプリング領域（外接矩形を使う）。
    seed : int, optional
        乱数 seed。
    max_attempts : int, optional
        連続棄却の上限。省略時は config の ``generators.poisson.max_attempts``。
    count : int, optional
        採択数の上限。

    Notes
    -----
    個数は保証しない。空間が埋まった時点で打ち切るため、count を指定しても下回ることがある。
    """
    r = float(radius)
    if r <= 0.0:
        raise ValueError(f"poisson.radius は正の値である必要がある: got={r}")
    attempts = runtime_config().poisson_max_attempts if max_attempts is None else int(max_attempts)
    if attempts < 1:
        raise ValueError(f"poisson.max_attempts は 1 以上である必要がある: got={attempts}")
    x0, y0, x1, y1 = parse_bounds(bounds).box

    # t を確定させるため、先に全点を確定してから流す。
    points = poisson_disk(
        x0, y0, x1, y1, r, max_attempts=attempts, rng=np.random.default_rng(seed), limit=count
    )
    n = points.shape[0]
    if count is not None and n < count:
        _logger.info("poisson: 要求 %d 点に対し %d 点で打ち切り", count, n)
    for i in range(n):
        yield make_step(i, n, x=float(points[i, 0]), y=float(points[i, 1]))


__all__ = ["poisson", "poisson_disk", "poisson_meta"]
