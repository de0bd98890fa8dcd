"""`voronoi`: 格子標本の最近傍割り当てと凸包で Voronoi セルを近似する generator。"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from typing import Any

import numpy as np

from geolet.core.generator_registry import Step, generator, make_step
from geolet.core.meta import ParamMeta
from geolet.core.runtime_config import runtime_config
from geolet.core.scope import Scope
from geolet.core.generators.util import parse_bounds

_logger = logging.getLogger(__name__)

# 最近傍探索の距離行列を一度に作る標本数の上限。
_CHUNK = 16_384
# サイト周囲に補う円周標本の数。
_RING = 8

voronoi_meta = {
    "points": ParamMeta(kind="points"),
    "bounds": ParamMeta(kind="bounds"),
    "resolution": ParamMeta(kind="int"),
}


def nearest_site(samples: np.ndarray, sites: np.ndarray) -> np.ndarray:
    """各標本に最も近いサイトの添字を総当たりで求める。"""
    out = np.empty(samples.shape[0], dtype=np.int64)
    for start in range(0, samples.shape[0], _CHUNK):
        block = samples[start : start + _CHUNK]
        dx = block[:, None, 0] - sites[None, :, 0]
        dy = block[:, None, 1] - sites[None, :, 1]
        out[start : start + block.shape[0]] = np.argmin(dx * dx + dy * dy, axis=1)
    return out


def convex_hull(points: np.ndarray) -> np.ndarray:
    """Graham scan で凸包を反時計回り（y 上向き座標系）に返す。

    最下点（同値なら最左）を基点に偏角でソートし、左折だけを残すスタックで掃引する。
    3 点未満・全点共線の場合は 3 点未満の配列になる。
    """
    pts = np.unique(np.asarray(points, dtype=np.float64), axis=0)
    if pts.shape[0] < 3:
        return pts
    pivot_idx = np.lexsort((pts[:, 0], pts[:, 1]))[0]
    pivot = pts[pivot_idx]
    rest = np.delete(pts, pivot_idx, axis=0)
    rel = rest - pivot
    angle = np.arctan2(rel[:, 1], rel[:, 0])
    dist = rel[:, 0] * rel[:, 0] + rel[:, 1] * rel[:, 1]
    ordered = rest[np.lexsort((dist, angle))]

    hull = [pivot]
    for p in ordered:
        while len(hull) >= 2:
            o, a = hull[-2], hull[-1]
            cross = (a[0] - o[0]) * (p[1] - o[1]) - (a[1] - o[1]) * (p[0] - o[0])
            if cross > 0:
                break
            hull.pop()
        hull.append(p)
    return np.array(hull, dtype=np.float64)


def _site_rings(sites: np.ndarray, box: tuple[float, float, float, float], spacing: float) -> np.ndarray:
    """各サイトの周囲に置く小さな円周標本 shape (n, _RING, 2) を返す。

    半径は最近傍サイトまでの距離の半分未満に取るため、円周上の点は必ずそのサイトの
    セルに属する。領域への射影も距離を伸ばさないので、クリップ後も所属は変わらない。
    """
    diff = sites[:, None, :] - sites[None, :, :]
    dist = np.hypot(diff[..., 0], diff[..., 1])
    np.fill_diagonal(dist, np.inf)
    nearest = dist.min(axis=1)
    radius = np.minimum(spacing, 0.45 * nearest)
    radius = np.where(np.isfinite(radius), radius, spacing)
    angles = np.linspace(0.0, 2.0 * np.pi, _RING, endpoint=False)
    ring = np.stack([np.cos(angles), np.sin(angles)], axis=1)
    pts = sites[:, None, :] + radius[:, None, None] * ring[None, :, :]
    x0, y0, x1, y1 = box
    pts[..., 0] = np.clip(pts[..., 0], x0, x1)
    pts[..., 1] = np.clip(pts[..., 1], y0, y1)
    return pts


def voronoi_cells(
    sites: np.ndarray, box: tuple[float, float, float, float], resolution: int
) -> list[tuple[int, np.ndarray]]:
    """(サイト添字, セル多角形) のリストを返す。退化したセルは含めない。"""
    x0, y0, x1, y1 = box
    gx, gy = np.meshgrid(np.linspace(x0, x1, resolution), np.linspace(y0, y1, resolution))
    samples = np.column_stack([gx.ravel(), gy.ravel()])
    owner = nearest_site(samples, sites)
    spacing = max(x1 - x0, y1 - y0) / (resolution - 1)
    rings = _site_rings(sites, box, spacing)

    cells = []
    for k in range(sites.shape[0]):
        own = samples[owner == k]
        # 格子標本が届かない小さなセルも、サイト自身と周囲の円周標本で形を保つ。
        hull = convex_hull(np.vstack([own, rings[k], sites[k : k + 1]]))
        if hull.shape[0] < 3:
            _logger.debug("voronoi: サイト %d のセルが退化したため除外", k)
            continue
        cells.append((k, hull))
    return cells


@generator(meta=voronoi_meta)
def voronoi(
    scope: Scope,
    *,
    points: Sequence[tuple[float, float]],
    bounds: Mapping[str, Any] | None = None,
    resolution: int | None = None,
) -> Iterator[Step]:
    """サイトごとに x, y（サイト座標）と vertices（セル多角形）を返す。

    Parameters
    ----------
    points : list of point
        サイト列（``collect`` の ``points`` を渡すのが典型）。
    bounds : mapping, optional
        セルを切り出す領域。省略時はサイトの外接矩形。
    resolution : int, optional
        1 辺あたりの標本数。省略時は config の ``generators.voronoi.resolution``。

    Notes
    -----
    計算量は O(resolution² × サイト数)。サイトが 3 未満ならセルを出さない。
    """
    sites = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if sites.shape[0] < 3:
        _logger.debug("voronoi: サイト数 %d (< 3) のためセルなし", sites.shape[0])
        return
    res = runtime_config().voronoi_resolution if resolution is None else int(resolution)
    if res < 2:
        raise ValueError(f"voronoi.resolution は 2 以上である必要がある: got={res}")
    if bounds is None:
        box = (
            float(sites[:, 0].min()),
            float(sites[:, 1].min()),
            float(sites[:, 0].max()),
            float(sites[:, 1].max()),
        )
    else:
        box = parse_bounds(bounds).box

    cells = voronoi_cells(sites, box, res)
    count = len(cells)
    for i, (k, hull) in enumerate(cells):
        yield make_step(
            i,
            count,
            x=float(sites[k, 0]),
            y=float(sites[k, 1]),
            vertices=[(float(px), float(py)) for px, py in hull],
        )


__all__ = ["convex_hull", "nearest_site", "voronoi", "voronoi_cells", "voronoi_meta"]
