"""`for`: 開始値から排他的上限 `to` まで整数 i を進める generator。"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from geolet.core.errors import GeneratorLimitError
from geolet.core.generator_registry import Step, generator, make_step
from geolet.core.meta import ParamMeta
from geolet.core.scope import Scope, eval_expr

MAX_FOR_ITERATIONS = 1_000_000

for_meta = {
    "i": ParamMeta(kind="int"),
    "to": ParamMeta(kind="expr"),
}


def _bound(to: Any, scope: Scope, i: int) -> float:
    return float(eval_expr(to, scope.child({"i": i})))


@generator(name="for", meta=for_meta)
def for_loop(scope: Scope, *, to: Any, i: int = 0) -> Iterator[Step]:
    """i を start から 1 ずつ増やし、`i >= to` になった時点で止める。

    Notes
    -----
    - `to` は i を束縛したスコープで毎反復評価する（i 依存の上限を許す）。
    - t を一貫させるため、先に件数だけを数えてから改めてステップを出す。
    - ステップの `i` はループ変数そのもの（start が 0 なら 0 始まりの添字と一致）。
    """
    start = int(i)

    count = 0
    k = start
    while k < _bound(to, scope, k):
        count += 1
        if count > MAX_FOR_ITERATIONS:
            raise GeneratorLimitError(f"for ループが上限 {MAX_FOR_ITERATIONS} 回を超えた")
        k += 1

    for n in range(count):
        step = make_step(n, count)
        step["i"] = start + n
        yield step


__all__ = ["MAX_FOR_ITERATIONS", "for_loop", "for_meta"]
