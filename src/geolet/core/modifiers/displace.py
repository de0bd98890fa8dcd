"""Perlin ノイズ場に沿って各頂点をずらし、線を有機的に揺らす modifier。"""

from __future__ import annotations

import numpy as np

from geolet.core.meta import ParamMeta
from geolet.core.modifier_registry import modifier
from geolet.core.noise import sample_fbm

displace_meta = {
    "amplitude": ParamMeta(kind="float"),
    "frequency": ParamMeta(kind="float"),
    "octaves": ParamMeta(kind="int"),
    "seed": ParamMeta(kind="float"),
}

# y 方向の変位を x 方向と無相関にするための seed オフセット。
_Y_SEED_SHIFT = 101.0


@modifier(meta=displace_meta)
def displace(
    points: np.ndarray,
    *,
    closed: bool = False,
    amplitude: float = 5.0,
    frequency: float = 0.02,
    octaves: int = 1,
    seed: float = 0.0,
) -> np.ndarray:
    """2D Perlin ノイズで頂点を変位する。

    Parameters
    ----------
    points : np.ndarray
        float64 shape (N,2) の点列。
    closed : bool
        未使用（シグネチャ統一のため受け取る）。
    amplitude : float, default 5.0
        最大変位量（座標単位）。
    frequency : float, default 0.02
        空間周波数。
    octaves : int, default 1
        fBm のオクターブ数。
    seed : float, default 0.0
        ノイズ場のオフセット。

    Returns
    -------
    np.ndarray
        変位後の点列。
    """
    if points.shape[0] == 0 or float(amplitude) == 0.0:
        return points

    dx = sample_fbm(points, frequency=frequency, octaves=octaves, seed=seed)
    dy = sample_fbm(points, frequency=frequency, octaves=octaves, seed=seed + _Y_SEED_SHIFT)

    out = points.copy()
    out[:, 0] += dx * float(amplitude)
    out[:, 1] += dy * float(amplitude)
    return out


__all__ = ["displace", "displace_meta"]
