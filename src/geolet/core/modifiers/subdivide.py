"""中点挿入または Chaikin のコーナーカットを繰り返し、点列を細分化・平滑化する modifier。"""

from __future__ import annotations

import logging

import numpy as np
from numba import njit  # type: ignore[import-untyped]

from geolet.core.meta import ParamMeta
from geolet.core.modifier_registry import modifier

_logger = logging.getLogger(__name__)

MAX_ITERATIONS = 10
MIN_SEG_LEN = 0.01
MIN_SEG_LEN_SQ = float(MIN_SEG_LEN * MIN_SEG_LEN)
MAX_TOTAL_VERTICES = 1_000_000

SUBDIVIDE_METHODS = ("chaikin", "midpoint")

subdivide_meta = {
    "method": ParamMeta(kind="choice", choices=SUBDIVIDE_METHODS),
    "iterations": ParamMeta(kind="int"),
}


@modifier(meta=subdivide_meta)
def subdivide(
    points: np.ndarray,
    *,
    closed: bool = False,
    method: str = "chaikin",
    iterations: int = 1,
) -> np.ndarray:
    """点列を細分化する。

    Parameters
    ----------
    points : np.ndarray
        float64 shape (N,2) の点列。
    closed : bool
        True なら末尾→先頭の辺も細分対象にする。
    method : {"chaikin", "midpoint"}, default "chaikin"
        "chaikin" は各辺の 1/4・3/4 点で角を切り落とす平滑化。
        "midpoint" は元の頂点を保ったまま各辺の中点を挿入する。
    iterations : int, default 1
        反復回数。0 以下は no-op。上限は 10。

    Returns
    -------
    np.ndarray
        細分化後の点列。

    Notes
    -----
    - midpoint は最短セグメント長が `MIN_SEG_LEN` 未満になった時点で停止する。
    - 出力頂点数が `MAX_TOTAL_VERTICES` を超える反復は行わない。
    """
    n_iter = int(iterations)
    if n_iter <= 0 or points.shape[0] < 2:
        return points
    if n_iter > MAX_ITERATIONS:
        _logger.warning("subdivide の iterations を %d に丸めます: got=%d", MAX_ITERATIONS, n_iter)
        n_iter = MAX_ITERATIONS

    if method == "midpoint":
        return _midpoint_core(np.ascontiguousarray(points), n_iter, bool(closed), MAX_TOTAL_VERTICES)
    return _chaikin(points, n_iter, bool(closed))


def _chaikin(points: np.ndarray, iterations: int, closed: bool) -> np.ndarray:
    result = points
    for _ in range(iterations):
        n = result.shape[0]
        if n < 2:
            break
        new_n = 2 * n if closed else 2 * (n - 1) + 2
        if new_n > MAX_TOTAL_VERTICES:
            break
        a = result
        b = np.roll(result, -1, axis=0) if closed else result[1:]
        if not closed:
            a = result[:-1]
        q = 0.75 * a + 0.25 * b
        r = 0.25 * a + 0.75 * b
        cut = np.empty((q.shape[0] * 2, 2), dtype=np.float64)
        cut[0::2] = q
        cut[1::2] = r
        if not closed:
            # 開いた線は端点を保持する。
            cut = np.concatenate([result[:1], cut, result[-1:]], axis=0)
        result = cut
    return result


@njit(fastmath=True, cache=True)
def _midpoint_core(vertices: np.ndarray, iterations: int, closed: bool, max_vertices: int) -> np.ndarray:
    """単一点列の中点挿入（Numba 経路）。"""
    n0 = vertices.shape[0]
    if n0 < 2 or iterations <= 0:
        return vertices

    d0 = vertices[1:] - vertices[:-1]
    if d0.shape[0] > 0:
        dsq0 = d0[:, 0] * d0[:, 0] + d0[:, 1] * d0[:, 1]
        if np.min(dsq0) < MIN_SEG_LEN_SQ:
            return vertices

    result = vertices.copy()
    for _ in range(iterations):
        n = result.shape[0]
        new_n = 2 * n if closed else 2 * n - 1
        if max_vertices > 0 and new_n > max_vertices:
            break

        new_vertices = np.empty((new_n, 2), dtype=result.dtype)
        for k in range(n):
            new_vertices[2 * k] = result[k]
            if k + 1 < n:
                new_vertices[2 * k + 1] = (result[k] + result[k + 1]) / 2
            elif closed:
                new_vertices[2 * k + 1] = (result[k] + result[0]) / 2
        result = new_vertices

        d = result[1:] - result[:-1]
        if d.shape[0] > 0:
            dsq = d[:, 0] * d[:, 0] + d[:, 1] * d[:, 1]
            if np.min(dsq) < MIN_SEG_LEN_SQ:
                break

    return result


__all__ = ["SUBDIVIDE_METHODS", "subdivide", "subdivide_meta"]
