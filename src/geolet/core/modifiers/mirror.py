"""点列を軸で反転した複製を逆順に連結し、左右（上下）対称な線を作る modifier。"""

from __future__ import annotations

import numpy as np

from geolet.core.meta import ParamMeta
from geolet.core.modifier_registry import modifier

MIRROR_AXES = ("x", "y", "both")

mirror_meta = {
    "axis": ParamMeta(kind="choice", choices=MIRROR_AXES),
    "cx": ParamMeta(kind="float"),
    "cy": ParamMeta(kind="float"),
}


def _reflect(points: np.ndarray, axis: str, cx: float, cy: float) -> np.ndarray:
    reflected = points[::-1].copy()
    if axis == "x":
        reflected[:, 0] = 2.0 * cx - reflected[:, 0]
    else:
        reflected[:, 1] = 2.0 * cy - reflected[:, 1]
    return np.concatenate([points, reflected], axis=0)


@modifier(meta=mirror_meta)
def mirror(
    points: np.ndarray,
    *,
    closed: bool = False,
    axis: str = "x",
    cx: float = 0.0,
    cy: float = 0.0,
) -> np.ndarray:
    """反転コピーを末尾へ連結する。

    Parameters
    ----------
    points : np.ndarray
        float64 shape (N,2) の点列。
    closed : bool
        未使用。
    axis : {"x", "y", "both"}, default "x"
        "x" は直線 x=cx に対して左右反転、"y" は y=cy に対して上下反転。
        "both" は x → y の順に 2 回適用する（点数は 4 倍）。
    cx, cy : float, default 0.0
        反転軸の位置。

    Returns
    -------
    np.ndarray
        元の点列 + 反転した点列（逆順）。
    """
    if points.shape[0] == 0:
        return points
    if axis == "both":
        return _reflect(_reflect(points, "x", cx, cy), "y", cx, cy)
    return _reflect(points, axis, cx, cy)


__all__ = ["MIRROR_AXES", "mirror", "mirror_meta"]
