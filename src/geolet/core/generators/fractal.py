"""`fractal`: L-system を展開し、タートルグラフィクスで折れ線頂点を返す generator。"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator
from dataclasses import dataclass

from geolet.core.errors import GeneratorLimitError
from geolet.core.generator_registry import Step, generator, make_step
from geolet.core.meta import ParamMeta
from geolet.core.scope import Scope

_logger = logging.getLogger(__name__)

MAX_DEPTH = 16
MAX_SYMBOLS = 5_000_000


@dataclass(frozen=True, slots=True)
class LSystem:
    """公理・書き換え規則・回転角・描画記号と、深さごとの線分長の縮小則。"""

    axiom: str
    rules: dict[str, str]
    angle: float
    draw: frozenset[str]
    shrink: float
    hilbert: bool = False

    def segment_length(self, length: float, depth: int) -> float:
        if self.hilbert:
            # hilbert は 2^d - 1 個の区間で一辺を埋める。
            cells = 2**depth - 1
            return length / cells if cells > 0 else length
        return length / (self.shrink**depth)


L_SYSTEMS: dict[str, LSystem] = {
    "koch": LSystem("F", {"F": "F+F--F+F"}, 60.0, frozenset("F"), 3.0),
    "dragon": LSystem("FX", {"X": "X+YF+", "Y": "-FX-Y"}, 90.0, frozenset("F"), math.sqrt(2.0)),
    "hilbert": LSystem(
        "A", {"A": "+BF-AFA-FB+", "B": "-AF+BFB+FA-"}, 90.0, frozenset("F"), 2.0, hilbert=True
    ),
    "sierpinski": LSystem("A", {"A": "B-A-B", "B": "A+B+A"}, 60.0, frozenset("AB"), 2.0),
    "levy": LSystem("F", {"F": "+F--F+"}, 45.0, frozenset("F"), math.sqrt(2.0)),
}
FRACTAL_TYPES = tuple(L_SYSTEMS)

fractal_meta = {
    "type": ParamMeta(kind="choice", choices=FRACTAL_TYPES),
    "x": ParamMeta(kind="float"),
    "y": ParamMeta(kind="float"),
    "length": ParamMeta(kind="float"),
    "angle": ParamMeta(kind="float"),
    "depth": ParamMeta(kind="int"),
}


def expand(system: LSystem, depth: int) -> str:
    """公理を depth 回書き換えた記号列を返す。"""
    s = system.axiom
    for _ in range(depth):
        s = "".join(system.rules.get(c, c) for c in s)
        if len(s) > MAX_SYMBOLS:
            raise GeneratorLimitError(f"L-system の記号数が上限 {MAX_SYMBOLS} を超えた")
    return s


def turtle(
    symbols: str, *, x: float, y: float, heading: float, step: float, turn: float, draw: frozenset[str]
) -> list[tuple[float, float]]:
    """記号列をタートル命令として実行し、始点を含む頂点列を返す。

    F/A/B（draw に含まれるもの）で前進、+ で左回り、- で右回り、[ ] で状態の退避・復帰。
    角度は度数法。
    """
    vertices = [(x, y)]
    stack: list[tuple[float, float, float]] = []
    for c in symbols:
        if c in draw:
            rad = math.radians(heading)
            x += step * math.cos(rad)
            y += step * math.sin(rad)
            vertices.append((x, y))
        elif c == "+":
            heading += turn
        elif c == "-":
            heading -= turn
        elif c == "[":
            stack.append((x, y, heading))
        elif c == "]":
            x, y, heading = stack.pop()
            vertices.append((x, y))
    return vertices


@generator(meta=fractal_meta)
def fractal(
    scope: Scope,
    *,
    type: str,
    x: float = 0.0,
    y: float = 0.0,
    length: float = 100.0,
    angle: float = 0.0,
    depth: int = 3,
) -> Iterator[Step]:
    """L-system フラクタルの頂点を返す。

    Parameters
    ----------
    type : {"koch", "dragon", "hilbert", "sierpinski", "levy"}
        文法の種類。
    x, y : float
        タートルの始点。
    length : float
        深さ 0 での全長の目安。深さに応じて線分長を縮める。
    angle : float
        初期の進行方向（度）。
    depth : int
        書き換え回数。`MAX_DEPTH` を超える値は丸める。

    Notes
    -----
    各ステップは新しい頂点 ``x, y`` と、直前の頂点から今の頂点への線分 ``x1, y1, x2, y2``
    を持つ（最初のステップは長さ 0 の線分）。
    """
    d = int(depth)
    if d < 0:
        raise ValueError(f"fractal.depth は 0 以上である必要がある: got={d}")
    if d > MAX_DEPTH:
        _logger.warning("fractal の depth を %d に丸めます: got=%d", MAX_DEPTH, d)
        d = MAX_DEPTH

    system = L_SYSTEMS[type]
    symbols = expand(system, d)
    vertices = turtle(
        symbols,
        x=float(x),
        y=float(y),
        heading=float(angle),
        step=system.segment_length(float(length), d),
        turn=system.angle,
        draw=system.draw,
    )
    count = len(vertices)
    px, py = vertices[0]
    for i, (vx, vy) in enumerate(vertices):
        yield make_step(i, count, x=vx, y=vy, x1=px, y1=py, x2=vx, y2=vy)
        px, py = vx, vy


__all__ = ["FRACTAL_TYPES", "L_SYSTEMS", "LSystem", "expand", "fractal", "fractal_meta", "turtle"]
