"""generator 間で共有する矩形・円領域のヘルパ。"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from geolet.core.errors import UnknownVariantError

BOUNDS_KINDS = ("rect", "circle")


@dataclass(frozen=True, slots=True)
class Bounds:
    """矩形 (x, y, width, height) または円 (cx, cy, r) の領域。"""

    kind: str
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    cx: float = 0.0
    cy: float = 0.0
    r: float = 0.0

    @property
    def box(self) -> tuple[float, float, float, float]:
        """外接矩形 (x0, y0, x1, y1) を返す。"""
        if self.kind == "circle":
            return (self.cx - self.r, self.cy - self.r, self.cx + self.r, self.cy + self.r)
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    def contains_circle(self, px: float, py: float, radius: float) -> bool:
        """中心 (px, py)・半径 radius の円が領域内に完全に収まるか。"""
        if self.kind == "circle":
            return math.hypot(px - self.cx, py - self.cy) + radius <= self.r
        return (
            px - radius >= self.x
            and px + radius <= self.x + self.width
            and py - radius >= self.y
            and py + radius <= self.y + self.height
        )


def parse_bounds(value: Any, *, name: str = "bounds") -> Bounds:
    """`{"x", "y", "width", "height"}` または `{"type": "circle", "cx", "cy", "r"}` を Bounds にする。

    Raises
    ------
    UnknownVariantError
        type が rect/circle 以外の場合。
    ValueError
        mapping でない、または寸法が負の場合。
    """
    if isinstance(value, Bounds):
        return value
    if not isinstance(value, Mapping):
        raise ValueError(f"{name} は mapping である必要がある: got={value!r}")
    kind = str(value.get("type", "rect")).strip().lower()
    if kind not in BOUNDS_KINDS:
        raise UnknownVariantError(f"{name}.type", value.get("type"), BOUNDS_KINDS)
    if kind == "circle":
        r = float(value.get("r", 0.0))
        if r < 0:
            raise ValueError(f"{name}.r は 0 以上である必要がある: got={r}")
        return Bounds(
            kind="circle",
            cx=float(value.get("cx", 0.0)),
            cy=float(value.get("cy", 0.0)),
            r=r,
        )
    width = float(value.get("width", 0.0))
    height = float(value.get("height", 0.0))
    if width < 0 or height < 0:
        raise ValueError(f"{name} の width/height は 0 以上である必要がある")
    return Bounds(
        kind="rect",
        x=float(value.get("x", 0.0)),
        y=float(value.get("y", 0.0)),
        width=width,
        height=height,
    )


def sample_count(samples: int | None, default: int) -> int:
    """samples 引数を検証し、省略時は default を返す。"""
    n = default if samples is None else int(samples)
    if n < 1:
        raise ValueError(f"samples は 1 以上である必要がある: got={n}")
    return n


__all__ = ["BOUNDS_KINDS", "Bounds", "parse_bounds", "sample_count"]
