# どこで: `src/geolet/core/noise.py`。
# 何を: Perlin / value ノイズと fBm（オクターブ合成）の Numba カーネルを提供する。
# なぜ: noise generator と displace modifier で同一のノイズ場を共有するため。

from __future__ import annotations

import numpy as np
from numba import njit  # type: ignore[import-untyped]

# Perlin ノイズ用定数（Ken Perlin improved noise の標準テーブル）。
_PERM_256 = [
    151, 160, 137, 91, 90, 15, 131, 13, 201, 95, 96, 53, 194, 233, 7, 225,
    140, 36, 103, 30, 69, 142, 8, 99, 37, 240, 21, 10, 23, 190, 6, 148,
    247, 120, 234, 75, 0, 26, 197, 62, 94, 252, 219, 203, 117, 35, 11, 32,
    57, 177, 33, 88, 237, 149, 56, 87, 174, 20, 125, 136, 171, 168, 68, 175,
    74, 165, 71, 134, 139, 48, 27, 166, 77, 146, 158, 231, 83, 111, 229, 122,
    60, 211, 133, 230, 220, 105, 92, 41, 55, 46, 245, 40, 244, 102, 143, 54,
    65, 25, 63, 161, 1, 216, 80, 73, 209, 76, 132, 187, 208, 89, 18, 169,
    200, 196, 135, 130, 116, 188, 159, 86, 164, 100, 109, 198, 173, 186, 3, 64,
    52, 217, 226, 250, 124, 123, 5, 202, 38, 147, 118, 126, 255, 82, 85, 212,
    207, 206, 59, 227, 47, 16, 58, 17, 182, 189, 28, 42, 223, 183, 170, 213,
    119, 248, 152, 2, 44, 154, 163, 70, 221, 153, 101, 155, 167, 43, 172, 9,
    129, 22, 39, 253, 19, 98, 108, 110, 79, 113, 224, 232, 178, 185, 112, 104,
    218, 246, 97, 228, 251, 34, 242, 193, 238, 210, 144, 12, 191, 179, 162, 241,
    81, 51, 145, 235, 249, 14, 239, 107, 49, 192, 214, 31, 181, 199, 106, 157,
    184, 84, 204, 176, 115, 121, 50, 45, 127, 4, 150, 254, 138, 236, 205, 93,
    222, 114, 67, 29, 24, 72, 243, 141, 128, 195, 78, 66, 215, 61, 156, 180,
]

_GRAD3_12 = [
    [1, 1, 0],
    [-1, 1, 0],
    [1, -1, 0],
    [-1, -1, 0],
    [1, 0, 1],
    [-1, 0, 1],
    [1, 0, -1],
    [-1, 0, -1],
    [0, 1, 1],
    [0, -1, 1],
    [0, 1, -1],
    [0, -1, -1],
]

NOISE_PERMUTATION_TABLE = np.asarray(_PERM_256, dtype=np.int32)
NOISE_PERMUTATION_TABLE = np.concatenate(
    [NOISE_PERMUTATION_TABLE, NOISE_PERMUTATION_TABLE]
)
NOISE_GRADIENTS_3D = np.asarray(_GRAD3_12, dtype=np.float64)

NOISE_KINDS: tuple[str, ...] = ("perlin", "value")

# seed を入力空間の z 方向オフセットへ写す係数。
SEED_OFFSET: float = 17.31


@njit(fastmath=True, cache=True)
def fade(t):
    """Perlin ノイズ用のフェード関数。"""
    return t * t * t * (t * (t * 6 - 15) + 10)


@njit(fastmath=True, cache=True)
def lerp(a, b, t):
    """線形補間。"""
    return a + t * (b - a)


@njit(fastmath=True, cache=True)
def grad(hash_val, x, y, z, grad3_array):
    """勾配ベクトル計算。"""
    idx = int(hash_val) % 12
    g = grad3_array[idx]
    return g[0] * x + g[1] * y + g[2] * z


@njit(fastmath=True, cache=True)
def perlin_noise_3d(x, y, z, perm_table, grad3_array):
    """3 次元 Perlin ノイズ。おおよそ [-1, 1] を返す。"""
    X = int(np.floor(x)) & 255
    Y = int(np.floor(y)) & 255
    Z = int(np.floor(z)) & 255

    x -= np.floor(x)
    y -= np.floor(y)
    z -= np.floor(z)

    u = fade(x)
    v = fade(y)
    w = fade(z)

    A = perm_table[X] + Y
    AA = perm_table[A & 511] + Z
    AB = perm_table[(A + 1) & 511] + Z
    B = perm_table[(X + 1) & 255] + Y
    BA = perm_table[B & 511] + Z
    BB = perm_table[(B + 1) & 511] + Z

    gAA = grad(perm_table[AA & 511], x, y, z, grad3_array)
    gBA = grad(perm_table[BA & 511], x - 1, y, z, grad3_array)
    gAB = grad(perm_table[AB & 511], x, y - 1, z, grad3_array)
    gBB = grad(perm_table[BB & 511], x - 1, y - 1, z, grad3_array)
    gAA1 = grad(perm_table[(AA + 1) & 511], x, y, z - 1, grad3_array)
    gBA1 = grad(perm_table[(BA + 1) & 511], x - 1, y, z - 1, grad3_array)
    gAB1 = grad(perm_table[(AB + 1) & 511], x, y - 1, z - 1, grad3_array)
    gBB1 = grad(perm_table[(BB + 1) & 511], x - 1, y - 1, z - 1, grad3_array)

    return lerp(
        lerp(lerp(gAA, gBA, u), lerp(gAB, gBB, u), v),
        lerp(lerp(gAA1, gBA1, u), lerp(gAB1, gBB1, u), v),
        w,
    )


@njit(fastmath=True, cache=True)
def _lattice_value(ix, iy, iz, perm_table):
    """格子点のハッシュ値を [-1, 1] に写す。"""
    h = perm_table[(perm_table[(perm_table[ix & 255] + iy) & 511] + iz) & 511]
    return h / 127.5 - 1.0


@njit(fastmath=True, cache=True)
def value_noise_3d(x, y, z, perm_table):
    """3 次元 value ノイズ（格子値の三重線形補間）。[-1, 1] を返す。"""
    fx = np.floor(x)
    fy = np.floor(y)
    fz = np.floor(z)
    ix = int(fx)
    iy = int(fy)
    iz = int(fz)
    u = fade(x - fx)
    v = fade(y - fy)
    w = fade(z - fz)

    c000 = _lattice_value(ix, iy, iz, perm_table)
    c100 = _lattice_value(ix + 1, iy, iz, perm_table)
    c010 = _lattice_value(ix, iy + 1, iz, perm_table)
    c110 = _lattice_value(ix + 1, iy + 1, iz, perm_table)
    c001 = _lattice_value(ix, iy, iz + 1, perm_table)
    c101 = _lattice_value(ix + 1, iy, iz + 1, perm_table)
    c011 = _lattice_value(ix, iy + 1, iz + 1, perm_table)
    c111 = _lattice_value(ix + 1, iy + 1, iz + 1, perm_table)

    return lerp(
        lerp(lerp(c000, c100, u), lerp(c010, c110, u), v),
        lerp(lerp(c001, c101, u), lerp(c011, c111, u), v),
        w,
    )


@njit(fastmath=True, cache=True)
def fbm_2d(
    xs: np.ndarray,
    ys: np.ndarray,
    z: float,
    frequency: float,
    octaves: int,
    persistence: float,
    lacunarity: float,
    kind: int,
    perm_table: np.ndarray,
    grad3_array: np.ndarray,
) -> np.ndarray:
    """2 次元座標列で fBm ノイズをサンプリングする。

    kind は 0=perlin, 1=value。出力は振幅の総和で正規化しておおよそ [-1, 1]。
    """
    n = xs.shape[0]
    out = np.zeros(n, dtype=np.float64)
    if octaves < 1:
        return out

    norm = 0.0
    amp = 1.0
    for _ in range(octaves):
        norm += amp
        amp *= persistence
    if norm <= 0.0:
        norm = 1.0

    for i in range(n):
        total = 0.0
        amp = 1.0
        freq = frequency
        for _ in range(octaves):
            px = xs[i] * freq
            py = ys[i] * freq
            if kind == 0:
                total += amp * perlin_noise_3d(px, py, z, perm_table, grad3_array)
            else:
                total += amp * value_noise_3d(px, py, z, perm_table)
            amp *= persistence
            freq *= lacunarity
        out[i] = total / norm
    return out


def sample_fbm(
    points: np.ndarray,
    *,
    frequency: float,
    octaves: int = 1,
    persistence: float = 0.5,
    lacunarity: float = 2.0,
    kind: str = "perlin",
    seed: float = 0.0,
) -> np.ndarray:
    """shape (N,2) の点列で fBm ノイズ値（shape (N,)）を返す。"""
    pts = np.asarray(points, dtype=np.float64)
    if pts.shape[0] == 0:
        return np.zeros((0,), dtype=np.float64)
    kind_i = NOISE_KINDS.index(kind)
    # 格子点ちょうどでは Perlin が 0 になるため、seed オフセットに端数を混ぜる。
    z = float(seed) * SEED_OFFSET + 0.5
    return fbm_2d(
        np.ascontiguousarray(pts[:, 0]),
        np.ascontiguousarray(pts[:, 1]),
        z,
        float(frequency),
        int(octaves),
        float(persistence),
        float(lacunarity),
        kind_i,
        NOISE_PERMUTATION_TABLE,
        NOISE_GRADIENTS_3D,
    )


__all__ = [
    "NOISE_GRADIENTS_3D",
    "NOISE_KINDS",
    "NOISE_PERMUTATION_TABLE",
    "perlin_noise_3d",
    "sample_fbm",
    "value_noise_3d",
]
