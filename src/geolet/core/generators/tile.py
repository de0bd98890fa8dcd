"""`tile`: 正方形・六角形・三角形の正則タイリングを返す generator。"""

from __future__ import annotations

import math
from collections.abc import Iterator

from geolet.core.generator_registry import Step, generator, make_step
from geolet.core.meta import ParamMeta
from geolet.core.scope import Scope

TILE_TYPES = ("square", "hex", "triangle")

tile_meta = {
    "type": ParamMeta(kind="choice", choices=TILE_TYPES),
    "size": ParamMeta(kind="float"),
    "cols": ParamMeta(kind="int"),
    "rows": ParamMeta(kind="int"),
    "x": ParamMeta(kind="float"),
    "y": ParamMeta(kind="float"),
}

Polygon = list[tuple[float, float]]


def square_cell(row: int, col: int, size: float, ox: float, oy: float) -> Polygon:
    x = ox + col * size
    y = oy + row * size
    return [(x, y), (x + size, y), (x + size, y + size), (x, y + size)]


def hex_cell(row: int, col: int, size: float, ox: float, oy: float) -> Polygon:
    """pointy-top 六角形（size は外接円半径）。奇数行は半タイル右へずらす。"""
    w = math.sqrt(3.0) * size
    cx = ox + w / 2.0 + col * w + (w / 2.0 if row % 2 == 1 else 0.0)
    cy = oy + size + row * size * 1.5
    return [
        (cx + size * math.cos(math.radians(60.0 * k - 30.0)), cy + size * math.sin(math.radians(60.0 * k - 30.0)))
        for k in range(6)
    ]


def triangle_cell(row: int, col: int, size: float, ox: float, oy: float) -> Polygon:
    """(row + col) が偶数なら上向き、奇数なら下向きの正三角形（size は一辺）。"""
    h = size * math.sqrt(3.0) / 2.0
    x = ox + col * size / 2.0
    y = oy + row * h
    if (row + col) % 2 == 0:
        return [(x + size / 2.0, y), (x + size, y + h), (x, y + h)]
    return [(x, y), (x + size, y), (x + size / 2.0, y + h)]


_CELLS = {"square": square_cell, "hex": hex_cell, "triangle": triangle_cell}


@generator(meta=tile_meta)
def tile(
    scope: Scope,
    *,
    cols: int,
    rows: int,
    type: str = "square",
    size: float = 10.0,
    x: float = 0.0,
    y: float = 0.0,
) -> Iterator[Step]:
    """タイルごとに vertices・中心 x, y・row/col を行優先で返す。

    中心は頂点の平均（三角形なら重心）。
    """
    if cols < 0 or rows < 0:
        raise ValueError("tile の cols/rows は 0 以上である必要がある")
    if size <= 0:
        raise ValueError(f"tile.size は正の値である必要がある: got={size}")
    cell = _CELLS[type]
    count = cols * rows
    for row in range(rows):
        for col in range(cols):
            vertices = cell(row, col, float(size), float(x), float(y))
            yield make_step(
                row * cols + col,
                count,
                x=sum(p[0] for p in vertices) / len(vertices),
                y=sum(p[1] for p in vertices) / len(vertices),
                row=row,
                col=col,
                vertices=vertices,
            )


__all__ = ["TILE_TYPES", "hex_cell", "square_cell", "tile", "tile_meta", "triangle_cell"]
