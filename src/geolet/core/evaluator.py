# どこで: `src/geolet/core/evaluator.py`。
# 何を: 検証済みの定義ノードをスコープ付きで再帰評価し、要素ツリー EvaluatedSvg を組み立てる。
# なぜ: generator の駆動（逐次/一括）と shape 組み立て・modifier 適用を 1 か所に集約するため。

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

import numpy as np

from geolet.core.definition import (
    CollectDef,
    GeneratorSpec,
    NodeDef,
    ShapeDef,
    SvgDefinition,
    parse_definition,
)
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
from geolet.core.generator_registry import generator_registry, resolve_point
from geolet.core.modifier_registry import apply_modifiers
from geolet.core.runtime_config import runtime_config
from geolet.core.scope import Scope, eval_expr

_logger = logging.getLogger(__name__)

Point = tuple[float, float]


def evaluate(definition: Mapping[str, Any] | SvgDefinition) -> EvaluatedSvg:
    """定義ツリーを評価して要素ツリーを返す。

    Parameters
    ----------
    definition : Mapping[str, Any] or SvgDefinition
        dict 形式の定義、または `parse_definition` 済みの定義。

    Returns
    -------
    EvaluatedSvg
        式を含まない `{width, height, elements}`。

    Notes
    -----
    評価中の例外（循環参照・未知の variant・ユーザー式の例外など）はそのまま送出し、
    部分的な結果は返さない。
    """
    svg = definition if isinstance(definition, SvgDefinition) else parse_definition(definition)
    _logger.debug("evaluate: start size=%sx%s", svg.width, svg.height)
    root = svg.root
    elements = _evaluate_body(root, Scope(root.let))
    _logger.debug("evaluate: done elements=%d", len(elements))
    return EvaluatedSvg(width=svg.width, height=svg.height, elements=tuple(elements))


def stream_steps(spec: GeneratorSpec, scope: Scope) -> Iterator[Scope]:
    """generator を逐次駆動し、ステップごとのスコープを返す。

    引数は `scope` で 1 回だけ評価し、各ステップのスコープには generator 設定の
    `let` を重ねる。
    """
    steps = generator_registry.get(spec.name)(spec.params, scope)
    for step in steps:
        step_scope = scope.child(step)
        if spec.let:
            step_scope = step_scope.child(spec.let)
        yield step_scope


def collect_points(spec: GeneratorSpec, scope: Scope, *, point: Any = None) -> list[Point]:
    """generator を最後まで駆動し、各ステップの点を list に確定させる。

    point が None なら generator 設定の point、それも無ければステップの (x, y) を使う。
    """
    expr = point if point is not None else spec.point
    return [_step_point(expr, s) for s in stream_steps(spec, scope)]


def _step_point(expr: Any, scope: Scope) -> Point:
    if expr is None:
        return (float(scope["x"]), float(scope["y"]))
    return resolve_point(expr, scope)


def _evaluate_body(node: NodeDef, scope: Scope) -> list[Element]:
    """static shape → group → collect → generator の順で要素を並べる。"""
    out: list[Element] = [_evaluate_shape(shape, scope) for shape in node.shapes]
    out.extend(_evaluate_group(group, scope) for group in node.groups)
    for collect in node.collects:
        out.extend(_evaluate_collect(collect, scope))
    if node.generator is not None:
        for step_scope in stream_steps(node.generator, scope):
            out.extend(_evaluate_body(node.generator.body, step_scope))
    return out


def _evaluate_group(node: NodeDef, parent: Scope) -> GroupElement:
    scope = parent.child(node.let)
    children = _evaluate_body(node, scope)
    transform = eval_expr(node.transform, scope)
    return GroupElement(
        children=tuple(children),
        transform=None if transform is None else str(transform),
    )


def _evaluate_collect(collect: CollectDef, parent: Scope) -> list[Element]:
    points = collect_points(collect.source, parent)
    _logger.debug("collect: %s から %d 点", collect.source.name, len(points))
    scope = parent.child({"points": points})
    if collect.body.let:
        scope = scope.child(collect.body.let)
    return _evaluate_body(collect.body, scope)


def _evaluate_shape(shape: ShapeDef, parent: Scope) -> Element:
    scope = parent.child(shape.let) if shape.let else parent
    fields = shape.fields
    cfg = runtime_config()

    def value(key: str, default: Any = None) -> Any:
        return eval_expr(fields.get(key, default), scope)

    stroke = str(value("stroke", cfg.default_stroke))
    stroke_width = float(value("stroke_width", cfg.default_stroke_width))
    if shape.kind == "line":
        return LineElement(
            x1=float(value("x1")),
            y1=float(value("y1")),
            x2=float(value("x2")),
            y2=float(value("y2")),
            stroke=stroke,
            stroke_width=stroke_width,
        )

    fill = str(value("fill", cfg.default_fill))
    if shape.kind == "circle":
        return CircleElement(
            cx=float(value("cx")),
            cy=float(value("cy")),
            r=float(value("r")),
            fill=fill,
            stroke=stroke,
            stroke_width=stroke_width,
        )
    if shape.kind == "rect":
        return RectElement(
            x=float(value("x")),
            y=float(value("y")),
            width=float(value("width")),
            height=float(value("height")),
            fill=fill,
            stroke=stroke,
            stroke_width=stroke_width,
        )

    closed = bool(value("close", False)) if shape.kind == "path" else shape.kind == "polygon"
    points = _shape_points(shape, scope)
    if shape.modifiers:
        points = apply_modifiers(points, shape.modifiers, scope, closed=closed)
    if shape.kind == "path":
        return PathElement(points=points, fill=fill, stroke=stroke, stroke_width=stroke_width, closed=closed)
    if shape.kind == "polyline":
        return PolylineElement(points=points, fill=fill, stroke=stroke, stroke_width=stroke_width)
    return PolygonElement(points=points, fill=fill, stroke=stroke, stroke_width=stroke_width)


def _shape_points(shape: ShapeDef, scope: Scope) -> np.ndarray:
    """shape の点列を float64 (N,2) で返す。点の供給源が無ければ空配列。"""
    if shape.generator is not None:
        pts = collect_points(shape.generator, scope, point=shape.point)
    elif "points" in shape.fields:
        raw = eval_expr(shape.fields["points"], scope)
        pts = [resolve_point(p, scope) for p in (raw if raw is not None else ())]
    else:
        pts = []
    return np.asarray(pts, dtype=np.float64).reshape(-1, 2)


__all__ = ["collect_points", "evaluate", "stream_steps"]
