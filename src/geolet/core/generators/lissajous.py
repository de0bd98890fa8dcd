"""`lissajous`: 2 軸の正弦振動を合成したリサジュー曲線の generator。"""

from __future__ import annotations

import math
from collections.abc import Iterator

from geolet.core.generator_registry import Step, generator, make_step
from geolet.core.meta import ParamMeta
from geolet.core.scope import Scope
from geolet.core.generators.util import sample_count

DEFAULT_SAMPLES = 200

lissajous_meta = {
    "cx": ParamMeta(kind="float"),
    "cy": ParamMeta(kind="float"),
    "ax": ParamMeta(kind="float"),
    "ay": ParamMeta(kind="float"),
    "fx": ParamMeta(kind="float"),
    "fy": ParamMeta(kind="float"),
    "delta": ParamMeta(kind="float"),
    "samples": ParamMeta(kind="int"),
}


@generator(meta=lissajous_meta)
def lissajous(
    scope: Scope,
    *,
    cx: float = 0.0,
    cy: float = 0.0,
    ax: float = 100.0,
    ay: float = 100.0,
    fx: float = 3.0,
    fy: float = 2.0,
    delta: float = math.pi / 2.0,
    samples: int | None = None,
) -> Iterator[Step]:
    """x = cx + ax·sin(fx·2πt + δ), y = cy + ay·sin(fy·2πt)。"""
    n = sample_count(samples, DEFAULT_SAMPLES)
    count = n + 1
    for i in range(count):
        phase = (i / n) * 2.0 * math.pi
        yield make_step(
            i,
            count,
            x=cx + ax * math.sin(fx * phase + delta),
            y=cy + ay * math.sin(fy * phase),
        )


__all__ = ["lissajous", "lissajous_meta"]
