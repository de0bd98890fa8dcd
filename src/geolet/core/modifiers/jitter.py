"""各頂点へ一様乱数のオフセットを加える modifier。"""

from __future__ import annotations

import numpy as np

from geolet.core.meta import ParamMeta
from geolet.core.modifier_registry import modifier

jitter_meta = {
    "amount": ParamMeta(kind="float"),
    "seed": ParamMeta(kind="int"),
}


@modifier(meta=jitter_meta)
def jitter(
    points: np.ndarray,
    *,
    closed: bool = False,
    amount: float = 1.0,
    seed: int | None = None,
) -> np.ndarray:
    """各軸に [-amount, amount] の一様乱数を加える。

    seed を省略した場合は実行ごとに結果が変わる。
    """
    if points.shape[0] == 0 or float(amount) == 0.0:
        return points
    rng = np.random.default_rng(seed)
    a = abs(float(amount))
    return points + rng.uniform(-a, a, size=points.shape)


__all__ = ["jitter", "jitter_meta"]
