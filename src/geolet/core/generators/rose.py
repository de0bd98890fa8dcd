"""`rose`: 正弦花弁曲線 r = R·cos(kθ) の generator。"""

from __future__ import annotations

import math
from collections.abc import Iterator

from geolet.core.generator_registry import Step, generator, make_step
from geolet.core.meta import ParamMeta
from geolet.core.scope import Scope
from geolet.core.generators.util import sample_count

DEFAULT_SAMPLES = 200

rose_meta = {
    "cx": ParamMeta(kind="float"),
    "cy": ParamMeta(kind="float"),
    "r": ParamMeta(kind="float"),
    "k": ParamMeta(kind="float"),
    "samples": ParamMeta(kind="int"),
}


@generator(meta=rose_meta)
def rose(
    scope: Scope,
    *,
    cx: float = 0.0,
    cy: float = 0.0,
    r: float = 100.0,
    k: float = 4.0,
    samples: int | None = None,
) -> Iterator[Step]:
    """θ ∈ [0, 2π] で r(θ) = R·cos(kθ) を極座標から直交座標へ写す。"""
    n = sample_count(samples, DEFAULT_SAMPLES)
    count = n + 1
    for i in range(count):
        theta = (i / n) * 2.0 * math.pi
        radius = r * math.cos(k * theta)
        yield make_step(
            i,
            count,
            x=cx + radius * math.cos(theta),
            y=cy + radius * math.sin(theta),
            theta=theta,
            r=radius,
        )


__all__ = ["rose", "rose_meta"]
