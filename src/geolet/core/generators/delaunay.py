"""`delaunay`: Bowyer-Watson 法による Delaunay 三角形分割の generator。

有限の超三角形の代わりに無限遠の仮想頂点 GHOST を置き、凸包の各辺を
仮想三角形 (u, v, GHOST) として保持する。超三角形の頂点が有限距離にあると
凸包付近の三角形が失われるため、外周は向き判定だけで扱う。
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

from geolet.core.generator_registry import Step, generator, make_step
from geolet.core.meta import ParamMeta
from geolet.core.scope import Scope

_logger = logging.getLogger(__name__)

# 外接円判定で退化（共線）とみなす行列式の閾値。
DET_EPS = 1e-12
# 最終出力から除く三角形の面積の下限。
MIN_AREA = 1e-9
# 無限遠の仮想頂点の添字。
GHOST = -1

delaunay_meta = {
    "points": ParamMeta(kind="points"),
}

Point = tuple[float, float]
Triangle = tuple[int, int, int]
Circle = tuple[float, float, float] | None


def circumcircle(a: Point, b: Point, c: Point) -> Circle:
    """外接円 (cx, cy, r²) を代数的に求める。共線なら None。"""
    ax, ay = a
    bx, by = b
    cx, cy = c
    d = 2.0 * (ax * (by - cy) + bx * (cy - ay) + cx * (ay - by))
    if abs(d) < DET_EPS:
        return None
    a2 = ax * ax + ay * ay
    b2 = bx * bx + by * by
    c2 = cx * cx + cy * cy
    ux = (a2 * (by - cy) + b2 * (cy - ay) + c2 * (ay - by)) / d
    uy = (a2 * (cx - bx) + b2 * (ax - cx) + c2 * (bx - ax)) / d
    return (ux, uy, (ax - ux) ** 2 + (ay - uy) ** 2)


def _in_circle(circle: Circle, p: Point) -> bool:
    if circle is None:
        return False
    ux, uy, r2 = circle
    return (p[0] - ux) ** 2 + (p[1] - uy) ** 2 < r2


def _orient(a: Point, b: Point, c: Point) -> float:
    """c が有向辺 a→b の左にあれば正、右なら負、共線なら 0。"""
    return (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])


def _area2(a: Point, b: Point, c: Point) -> float:
    return abs(_orient(a, b, c))


def _is_bad(tri: Triangle, circle: Circle, pts: list[Point], p: Point) -> bool:
    """p の挿入で壊れる三角形か。

    仮想三角形 (u, v, GHOST) は辺 u→v の左側が凸包の外。p がその外側にあるか、
    辺の延長線上で線分 uv の内側にあれば壊れる。
    """
    u, v, w = tri
    if w != GHOST:
        return _in_circle(circle, p)
    a, b = pts[u], pts[v]
    o = _orient(a, b, p)
    if o > 0.0:
        return True
    if o < 0.0:
        return False
    return (p[0] - a[0]) * (p[0] - b[0]) + (p[1] - a[1]) * (p[1] - b[1]) < 0.0


def _canonical(tri: Triangle) -> Triangle:
    """GHOST を末尾へ回転する（向きは保つ）。"""
    a, b, c = tri
    if a == GHOST:
        return (b, c, a)
    if b == GHOST:
        return (c, a, b)
    return tri


def _seed(pts: list[Point]) -> Triangle | None:
    """反時計回りの初期三角形を返す。全点共線なら None。"""
    a, b = pts[0], pts[1]
    for k in range(2, len(pts)):
        o = _orient(a, b, pts[k])
        if 2.0 * abs(o) >= DET_EPS:
            return (0, 1, k) if o > 0.0 else (0, k, 1)
    return None


def _unique(points: Sequence[tuple[float, float]]) -> list[Point]:
    pts: list[Point] = []
    seen: set[Point] = set()
    for x, y in points:
        p = (float(x), float(y))
        if p not in seen:
            seen.add(p)
            pts.append(p)
    return pts


def triangulate(points: Sequence[tuple[float, float]]) -> list[tuple[Point, ...]]:
    """点列を三角形分割し、頂点座標 3 つ組のリストを返す。

    重複点は無視する。点が 3 未満、または全点共線なら空リスト。
    一般位置の n 点（凸包頂点 k 個）なら三角形は 2n - 2 - k 個になる。
    """
    pts = _unique(points)
    if len(pts) < 3:
        return []
    seed = _seed(pts)
    if seed is None:
        return []

    a, b, c = seed
    triangles: dict[Triangle, Circle] = {
        seed: circumcircle(pts[a], pts[b], pts[c]),
        (b, a, GHOST): None,
        (c, b, GHOST): None,
        (a, c, GHOST): None,
    }

    for idx, p in enumerate(pts):
        if idx in seed:
            continue
        bad = [tri for tri, circ in triangles.items() if _is_bad(tri, circ, pts, p)]
        edge_count: dict[tuple[int, int], int] = {}
        edge_order: list[tuple[int, int]] = []
        for tri in bad:
            u, v, w = tri
            for e in ((u, v), (v, w), (w, u)):
                key = (min(e), max(e))
                if key not in edge_count:
                    edge_order.append(e)
                    edge_count[key] = 0
                edge_count[key] += 1
        for tri in bad:
            del triangles[tri]
        # 空洞の境界辺と p を結ぶ。GHOST を含む辺は新しい凸包辺になる。
        for u, v in edge_order:
            if edge_count[(min(u, v), max(u, v))] != 1:
                continue
            tri = _canonical((u, v, idx))
            if tri[2] == GHOST:
                triangles[tri] = None
            else:
                triangles[tri] = circumcircle(pts[tri[0]], pts[tri[1]], pts[tri[2]])

    out = []
    for u, v, w in triangles:
        if w == GHOST:
            continue
        if _area2(pts[u], pts[v], pts[w]) < MIN_AREA:
            continue
        out.append((pts[u], pts[v], pts[w]))
    return out


@generator(meta=delaunay_meta)
def delaunay(scope: Scope, *, points: Sequence[tuple[float, float]]) -> Iterator[Step]:
    """三角形ごとに vertices・各頂点 x1..y3・重心 x, y を返す。"""
    tris = triangulate(points)
    if not tris:
        _logger.debug("delaunay: 三角形なし（入力 %d 点）", len(points))
    count = len(tris)
    for i, (a, b, c) in enumerate(tris):
        yield make_step(
            i,
            count,
            x=(a[0] + b[0] + c[0]) / 3.0,
            y=(a[1] + b[1] + c[1]) / 3.0,
            vertices=[a, b, c],
            x1=a[0],
            y1=a[1],
            x2=b[0],
            y2=b[1],
            x3=c[0],
            y3=c[1],
        )


__all__ = ["GHOST", "circumcircle", "delaunay", "delaunay_meta", "triangulate"]
