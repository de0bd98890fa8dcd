"""`superformula`: Gielis のスーパーフォーミュラで有機的な閉曲線を作る generator。"""

from __future__ import annotations

import math
from collections.abc import Iterator

from geolet.core.generator_registry import Step, generator, make_step
from geolet.core.meta import ParamMeta
from geolet.core.scope import Scope
from geolet.core.generators.util import sample_count

DEFAULT_SAMPLES = 360

superformula_meta = {
    "cx": ParamMeta(kind="float"),
    "cy": ParamMeta(kind="float"),
    "scale": ParamMeta(kind="float"),
    "m": ParamMeta(kind="float"),
    "n1": ParamMeta(kind="float"),
    "n2": ParamMeta(kind="float"),
    "n3": ParamMeta(kind="float"),
    "a": ParamMeta(kind="float"),
    "b": ParamMeta(kind="float"),
    "samples": ParamMeta(kind="int"),
}


def superformula_radius(
    theta: float, m: float, n1: float, n2: float, n3: float, a: float = 1.0, b: float = 1.0
) -> float:
    """r(θ) = (|cos(mθ/4)/a|^n2 + |sin(mθ/4)/b|^n3)^(-1/n1)。

    底が 0 になる角度や n1=0 では 0 を返す。
    """
    if n1 == 0.0 or a == 0.0 or b == 0.0:
        return 0.0
    angle = m * theta / 4.0
    base = abs(math.cos(angle) / a) ** n2 + abs(math.sin(angle) / b) ** n3
    if base <= 0.0:
        return 0.0
    return base ** (-1.0 / n1)


@generator(meta=superformula_meta)
def superformula(
    scope: Scope,
    *,
    cx: float = 0.0,
    cy: float = 0.0,
    scale: float = 100.0,
    m: float = 6.0,
    n1: float = 1.0,
    n2: float = 1.0,
    n3: float = 1.0,
    a: float = 1.0,
    b: float = 1.0,
    samples: int | None = None,
) -> Iterator[Step]:
    """θ ∈ [0, 2π] で r = scale·r_sf(θ) の点を返す。"""
    n = sample_count(samples, DEFAULT_SAMPLES)
    count = n + 1
    for i in range(count):
        theta = (i / n) * 2.0 * math.pi
        r = scale * superformula_radius(theta, m, n1, n2, n3, a, b)
        yield make_step(
            i,
            count,
            x=cx + r * math.cos(theta),
            y=cy + r * math.sin(theta),
            theta=theta,
            r=r,
        )


__all__ = ["superformula", "superformula_meta", "superformula_radius"]
