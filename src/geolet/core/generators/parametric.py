"""`parametric`: ユーザー定義の x(t), y(t) を区間 [t0, t1] でサンプリングする generator。"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from geolet.core.generator_registry import Step, generator, make_step
from geolet.core.meta import ParamMeta
from geolet.core.scope import Scope, eval_expr
from geolet.core.generators.util import sample_count

DEFAULT_SAMPLES = 100

parametric_meta = {
    "x": ParamMeta(kind="expr"),
    "y": ParamMeta(kind="expr"),
    "samples": ParamMeta(kind="int"),
}


@generator(meta=parametric_meta)
def parametric(
    scope: Scope,
    *,
    x: Any,
    y: Any,
    t: Any = (0.0, 1.0),
    samples: int | None = None,
) -> Iterator[Step]:
    """曲線パラメータ u を t0→t1 に等分し、x/y 式を評価する。

    Notes
    -----
    x/y 式から見えるスコープでは ``t`` が曲線パラメータ u の生値
    （例: 0..2π）に、``i`` がステップ番号に束縛される。
    出力ステップの ``t`` は他の generator と同じ 0..1 の進捗で、生値は ``u`` に入る。
    """
    try:
        t0, t1 = (float(v) for v in t)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"parametric の t は [t0, t1] である必要がある: got={t!r}") from exc
    n = sample_count(samples, DEFAULT_SAMPLES)
    count = n + 1
    for i in range(count):
        u = t0 + (t1 - t0) * (i / n)
        local = scope.child({"t": u, "i": i})
        yield make_step(
            i,
            count,
            x=float(eval_expr(x, local)),
            y=float(eval_expr(y, local)),
            u=u,
        )


__all__ = ["parametric", "parametric_meta"]
