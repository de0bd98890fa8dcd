"""
どこで: `src/geolet/export/svg.py`。
何を: 評価済みの要素ツリー EvaluatedSvg を SVG 文字列へ直列化し、ファイルへ保存する。
なぜ: 評価エンジンと出力形式を分離し、要素の順序と入れ子をそのまま保った木の走査だけにするため。
"""

from __future__ import annotations

from html import escape
from pathlib import Path

import numpy as np

from geolet.core.elements import (
    CircleElement,
    Element,
    EvaluatedSvg,
    GroupElement,
    LineElement,
    PathElement,
    PolygonElement,
    PolylineElement,
    RectElement,
)
from geolet.core.runtime_config import runtime_config

_SVG_NS = "http://www.w3.org/2000/svg"
_INDENT = "  "


def _fmt(value: float, *, decimals: int) -> str:
    """座標を固定小数点の文字列へ変換する（`-0.00` は `0.00` にする）。"""
    text = f"{float(value):.{int(decimals)}f}"
    if text.startswith("-") and float(text) == 0.0:
        return text[1:]
    return text


def _num(value: float) -> str:
    """属性値向けの最短表記（`40.0` → `40`）。"""
    v = float(value)
    if v.is_integer():
        return str(int(v))
    return repr(v)


def _attr(value: object) -> str:
    return escape(str(value), quote=True)


def path_d(points: np.ndarray, *, closed: bool, decimals: int = 2) -> str:
    """点列を `M x,y L x,y ... [Z]` の path データへ変換する。空なら空文字。"""
    if points.shape[0] == 0:
        return ""
    parts = [
        f"{'M' if k == 0 else 'L'}{_fmt(x, decimals=decimals)},{_fmt(y, decimals=decimals)}"
        for k, (x, y) in enumerate(points)
    ]
    if closed:
        parts.append("Z")
    return " ".join(parts)


def points_attr(points: np.ndarray, *, decimals: int = 2) -> str:
    """点列を polyline/polygon の `points` 属性（`x,y x,y ...`）へ変換する。"""
    return " ".join(f"{_fmt(x, decimals=decimals)},{_fmt(y, decimals=decimals)}" for x, y in points)


def _style(fill: str | None, stroke: str, stroke_width: float) -> str:
    parts = [] if fill is None else [f'fill="{_attr(fill)}"']
    parts.append(f'stroke="{_attr(stroke)}"')
    parts.append(f'stroke-width="{_num(stroke_width)}"')
    return " ".join(parts)


def _element_lines(element: Element, *, depth: int, decimals: int) -> list[str]:
    pad = _INDENT * depth
    if isinstance(element, GroupElement):
        head = f"{pad}<g>" if element.transform is None else f'{pad}<g transform="{_attr(element.transform)}">'
        lines = [head]
        for child in element.children:
            lines.extend(_element_lines(child, depth=depth + 1, decimals=decimals))
        lines.append(f"{pad}</g>")
        return lines
    if isinstance(element, PathElement):
        d = path_d(element.points, closed=element.closed, decimals=decimals)
        style = _style(element.fill, element.stroke, element.stroke_width)
        return [f'{pad}<path d="{d}" {style}/>']
    if isinstance(element, (PolylineElement, PolygonElement)):
        pts = points_attr(element.points, decimals=decimals)
        style = _style(element.fill, element.stroke, element.stroke_width)
        return [f'{pad}<{element.type} points="{pts}" {style}/>']
    if isinstance(element, CircleElement):
        style = _style(element.fill, element.stroke, element.stroke_width)
        return [f'{pad}<circle cx="{_num(element.cx)}" cy="{_num(element.cy)}" r="{_num(element.r)}" {style}/>']
    if isinstance(element, RectElement):
        style = _style(element.fill, element.stroke, element.stroke_width)
        return [
            f'{pad}<rect x="{_num(element.x)}" y="{_num(element.y)}" '
            f'width="{_num(element.width)}" height="{_num(element.height)}" {style}/>'
        ]
    if isinstance(element, LineElement):
        style = _style(None, element.stroke, element.stroke_width)
        return [
            f'{pad}<line x1="{_num(element.x1)}" y1="{_num(element.y1)}" '
            f'x2="{_num(element.x2)}" y2="{_num(element.y2)}" {style}/>'
        ]
    raise TypeError(f"未対応の要素: {type(element).__name__}")


def svg_string(svg: EvaluatedSvg, *, decimals: int | None = None) -> str:
    """EvaluatedSvg を SVG 文書の文字列へ変換する。

    Parameters
    ----------
    svg : EvaluatedSvg
        評価済みの要素ツリー。
    decimals : int or None, optional
        座標の小数桁数。None なら config の ``export.svg.decimals``（既定 2）。
    """
    digits = runtime_config().svg_decimals if decimals is None else int(decimals)
    w, h = _num(svg.width), _num(svg.height)
    lines = [f'<svg xmlns="{_SVG_NS}" width="{w}" height="{h}" viewBox="0 0 {w} {h}">']
    for element in svg.elements:
        lines.extend(_element_lines(element, depth=1, decimals=digits))
    lines.append("</svg>")
    return "\n".join(lines)


def export_svg(svg: EvaluatedSvg, path: str | Path) -> Path:
    """SVG 文字列をファイルへ保存し、保存先パスを返す。親ディレクトリは作成する。"""
    _path = Path(path)
    _path.parent.mkdir(parents=True, exist_ok=True)
    with _path.open("w", encoding="utf-8", newline="\n") as f:
        f.write(svg_string(svg) + "\n")
    return _path


__all__ = ["export_svg", "path_d", "points_attr", "svg_string"]
