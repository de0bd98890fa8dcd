"""`flowfield`: ベクトル場に沿って種点を移流させ、流線の点列を返す generator。"""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from geolet.core.generator_registry import Step, generator, make_step
from geolet.core.meta import ParamMeta
from geolet.core.scope import Scope, eval_expr
from geolet.core.generators.util import parse_bounds

flowfield_meta = {
    "field": ParamMeta(kind="expr"),
    "start": ParamMeta(kind="points"),
    "bounds": ParamMeta(kind="bounds"),
    "cols": ParamMeta(kind="int"),
    "rows": ParamMeta(kind="int"),
    "steps": ParamMeta(kind="int"),
    "step_size": ParamMeta(kind="float"),
    "normalize": ParamMeta(kind="bool"),
}


def _finite(v: Any) -> float:
    try:
        f = float(v)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"flowfield の field は数値ペアを返す必要がある: got={v!r}") from exc
    return f if math.isfinite(f) else 0.0


def _velocity(field: Any, scope: Scope, normalize: bool) -> tuple[float, float]:
    raw = eval_expr(field, scope)
    if isinstance(raw, Mapping):
        vx, vy = _finite(raw.get("x", 0.0)), _finite(raw.get("y", 0.0))
    else:
        try:
            rx, ry = raw
        except (TypeError, ValueError) as exc:
            raise ValueError(f"flowfield の field は [vx, vy] を返す必要がある: got={raw!r}") from exc
        vx, vy = _finite(rx), _finite(ry)
    if normalize:
        mag = math.hypot(vx, vy)
        if mag == 0.0:
            mag = 1.0
        vx, vy = vx / mag, vy / mag
    return vx, vy


def _grid_seeds(bounds: Any, cols: int, rows: int) -> list[tuple[float, float]]:
    b = parse_bounds(bounds)
    x0, y0, x1, y1 = b.box
    cw = (x1 - x0) / cols
    ch = (y1 - y0) / rows
    return [
        (x0 + (c + 0.5) * cw, y0 + (r + 0.5) * ch)
        for r in range(rows)
        for c in range(cols)
    ]


@generator(meta=flowfield_meta)
def flowfield(
    scope: Scope,
    *,
    field: Any,
    start: Sequence[tuple[float, float]] | None = None,
    bounds: Mapping[str, Any] | None = None,
    cols: int = 10,
    rows: int = 10,
    steps: int = 50,
    step_size: float = 1.0,
    normalize: bool = False,
) -> Iterator[Step]:
    """各種点を `steps` 回 ``position += velocity·step_size`` で進める。

    Parameters
    ----------
    field : expr
        ``x``/``y``（と ``seed``/``k``）を束縛したスコープを受けて ``[vx, vy]`` を返す式。
    start : list of point, optional
        種点の明示リスト。省略時は bounds 上の cols×rows グリッドのセル中心を使う。
    bounds : mapping, optional
        暗黙グリッドの領域。start も bounds も無い場合はエラー。
    steps : int
        1 種点あたりの前進回数。種点ごとに始点を含む steps+1 点を出す。
    step_size : float
        1 回の前進に掛ける係数。
    normalize : bool
        True なら速度を単位ベクトルに正規化する（大きさ 0 は 1 として扱う）。

    Notes
    -----
    ステップの ``i``/``t`` は全種点を連結した通し番号。非有限の速度成分は 0 に置き換える。
    """
    if start is not None:
        seeds = [(float(x), float(y)) for x, y in start]
    elif bounds is not None:
        if cols < 1 or rows < 1:
            raise ValueError("flowfield の cols/rows は 1 以上である必要がある")
        seeds = _grid_seeds(bounds, cols, rows)
    else:
        raise ValueError("flowfield には start か bounds のどちらかが必要")
    n_steps = int(steps)
    if n_steps < 0:
        raise ValueError(f"flowfield.steps は 0 以上である必要がある: got={n_steps}")

    per_seed = n_steps + 1
    count = len(seeds) * per_seed
    i = 0
    for seed_index, (px, py) in enumerate(seeds):
        for k in range(per_seed):
            local = scope.child({"x": px, "y": py, "seed": seed_index, "k": k})
            vx, vy = _velocity(field, local, normalize)
            yield make_step(i, count, x=px, y=py, vx=vx, vy=vy, seed=seed_index, k=k)
            i += 1
            px += vx * step_size
            py += vy * step_size


__all__ = ["flowfield", "flowfield_meta"]
