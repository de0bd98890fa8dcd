# src/geolet/core/elements.py
# 評価結果である要素ツリー（path/circle/rect/line/polyline/polygon/group）のモデル。
# 未解決の式を含まない不変値として serializer に渡す。

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, TypeAlias

import numpy as np


def as_points(points: Any) -> np.ndarray:
    """点列を float64 shape (N,2) の読み取り専用配列に正規化する。

    Raises
    ------
    ValueError
        shape が (N,2) にならない、または非有限値を含む場合。
    """
    arr = np.asarray(points, dtype=np.float64)
    if arr.size == 0:
        arr = np.zeros((0, 2), dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValueError(f"points は shape (N,2) である必要がある: got={arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise ValueError("points に非有限値（NaN/inf）が含まれている")
    if arr.flags.writeable:
        arr = arr.copy()
        arr.setflags(write=False)
    return arr


@dataclass(frozen=True, slots=True)
class _PointsElement:
    """点列を持つ要素の共通部分。points は __post_init__ で不変配列に固定する。"""

    points: np.ndarray
    fill: str
    stroke: str
    stroke_width: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", as_points(self.points))


@dataclass(frozen=True, slots=True)
class PathElement(_PointsElement):
    """moveto/lineto 列として描く path。closed なら末尾で閉じる。"""

    type: ClassVar[str] = "path"
    closed: bool = False


@dataclass(frozen=True, slots=True)
class PolylineElement(_PointsElement):
    type: ClassVar[str] = "polyline"


@dataclass(frozen=True, slots=True)
class PolygonElement(_PointsElement):
    type: ClassVar[str] = "polygon"


@dataclass(frozen=True, slots=True)
class CircleElement:
    type: ClassVar[str] = "circle"
    cx: float
    cy: float
    r: float
    fill: str
    stroke: str
    stroke_width: float


@dataclass(frozen=True, slots=True)
class RectElement:
    type: ClassVar[str] = "rect"
    x: float
    y: float
    width: float
    height: float
    fill: str
    stroke: str
    stroke_width: float


@dataclass(frozen=True, slots=True)
class LineElement:
    type: ClassVar[str] = "line"
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: str
    stroke_width: float


@dataclass(frozen=True, slots=True)
class GroupElement:
    """子要素列と任意の transform 文字列を束ねる group。"""

    type: ClassVar[str] = "group"
    children: tuple["Element", ...] = ()
    transform: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))


Element: TypeAlias = (
    PathElement
    | CircleElement
    | RectElement
    | LineElement
    | PolylineElement
    | PolygonElement
    | GroupElement
)


@dataclass(frozen=True, slots=True)
class EvaluatedSvg:
    """評価済みのルート。serializer はこれだけを受け取る。"""

    width: float
    height: float
    elements: tuple[Element, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "elements", tuple(self.elements))

    def to_dict(self) -> dict[str, Any]:
        """`{width, height, elements}` 形式の素の辞書へ変換する。"""
        return {
            "width": self.width,
            "height": self.height,
            "elements": [element_to_dict(e) for e in self.elements],
        }


def element_to_dict(element: Element) -> dict[str, Any]:
    """要素を `type` 判別子付きの辞書へ変換する。点列は [[x, y], ...] になる。"""
    if isinstance(element, GroupElement):
        out: dict[str, Any] = {
            "type": element.type,
            "children": [element_to_dict(c) for c in element.children],
        }
        if element.transform is not None:
            out["transform"] = element.transform
        return out

    out = {"type": element.type}
    for f in fields(element):
        value = getattr(element, f.name)
        if isinstance(value, np.ndarray):
            value = value.tolist()
        out[f.name] = value
    return out


def iter_elements(elements: tuple[Element, ...] | list[Element]):
    """group を再帰的に展開しながら要素を深さ優先で列挙する。"""
    for element in elements:
        yield element
        if isinstance(element, GroupElement):
            yield from iter_elements(element.children)


__all__ = [
    "CircleElement",
    "Element",
    "EvaluatedSvg",
    "GroupElement",
    "LineElement",
    "PathElement",
    "PolygonElement",
    "PolylineElement",
    "RectElement",
    "as_points",
    "element_to_dict",
    "iter_elements",
]
