# src/geolet/core/modifier_registry.py
# 点列 modifier（displace/jitter/subdivide/mirror）のレジストリ。
# 適用順は MODIFIER_ORDER で固定し、定義ツリー上のキー順には依存しない。

from __future__ import annotations

import inspect
from collections.abc import ItemsView, Mapping
from typing import Any, Callable

import numpy as np

from geolet.core.errors import DefinitionError
from geolet.core.meta import ParamMeta, coerce_value
from geolet.core.scope import Scope, eval_expr

ModifierFunc = Callable[[np.ndarray, bool, Mapping[str, Any]], np.ndarray]

MODIFIER_ORDER: tuple[str, ...] = ("displace", "jitter", "subdivide", "mirror")
"""modifier の固定適用順。"""


class ModifierRegistry:
    """modifier 名と点列変換関数を対応付けるレジストリ。

    Notes
    -----
    登録された関数のシグネチャは
    ``func(points: np.ndarray, *, closed: bool, <params>) -> np.ndarray`` を想定する。
    points は float64 shape (N,2)。
    """

    def __init__(self) -> None:
        """空のレジストリを初期化する。"""
        self._items: dict[str, ModifierFunc] = {}
        self._meta: dict[str, dict[str, ParamMeta]] = {}
        self._accepted: dict[str, frozenset[str]] = {}

    def _register(
        self,
        name: str,
        func: ModifierFunc,
        *,
        overwrite: bool = True,
        meta: dict[str, ParamMeta],
        accepted: frozenset[str],
    ) -> None:
        """modifier を登録する（内部用）。"""
        if name not in MODIFIER_ORDER:
            raise ValueError(f"modifier '{name}' は適用順序表に存在しない")
        if not overwrite and name in self._items:
            raise ValueError(f"modifier '{name}' は既に登録されている")
        self._items[name] = func
        self._meta[name] = meta
        self._accepted[name] = accepted

    def get(self, name: str) -> ModifierFunc:
        return self._items[name]

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __getitem__(self, name: str) -> ModifierFunc:
        return self.get(name)

    def items(self) -> ItemsView[str, ModifierFunc]:
        return self._items.items()

    def get_meta(self, name: str) -> dict[str, ParamMeta]:
        return dict(self._meta.get(name, {}))

    def validate(self, name: str, params: Mapping[str, Any]) -> None:
        """定義時点で未知の引数を検出する。"""
        unknown = sorted(str(k) for k in params if k not in self._accepted[name])
        if unknown:
            raise DefinitionError(f"modifier '{name}' の未知の引数: {', '.join(unknown)}")


modifier_registry = ModifierRegistry()
"""グローバルな modifier レジストリインスタンス。"""


def modifier(
    func: Callable[..., np.ndarray] | None = None,
    *,
    overwrite: bool = True,
    meta: dict[str, ParamMeta] | None = None,
):
    """グローバル modifier レジストリ用デコレータ。関数名を modifier 名として登録する。"""

    def decorator(f: Callable[..., np.ndarray]) -> Callable[..., np.ndarray]:
        param_meta = dict(meta or {})
        sig = inspect.signature(f)
        accepted = frozenset(
            p.name for p in list(sig.parameters.values())[1:] if p.name != "closed"
        )

        def wrapper(points: np.ndarray, closed: bool, params: Mapping[str, Any]) -> np.ndarray:
            return f(points, closed=closed, **params)

        modifier_registry._register(
            f.__name__,
            wrapper,
            overwrite=overwrite,
            meta=param_meta,
            accepted=accepted,
        )
        return f

    if func is None:
        return decorator
    return decorator(func)


def apply_modifiers(
    points: np.ndarray,
    modifiers: Mapping[str, Mapping[str, Any]],
    scope: Scope,
    *,
    closed: bool = False,
) -> np.ndarray:
    """点列へ modifier を固定順で適用する。

    Parameters
    ----------
    points : np.ndarray
        float64 shape (N,2) の点列。
    modifiers : Mapping[str, Mapping[str, Any]]
        modifier 名から引数辞書への写像。引数は式でもよい。
    scope : Scope
        引数の式を評価するスコープ（shape 自身のスコープ）。
    closed : bool, optional
        閉じた図形として扱うか（subdivide の端点処理に使う）。

    Returns
    -------
    np.ndarray
        変換後の点列。
    """
    out = np.asarray(points, dtype=np.float64)
    for name in MODIFIER_ORDER:
        raw = modifiers.get(name)
        if raw is None or out.shape[0] == 0:
            continue
        meta = modifier_registry.get_meta(name)
        params = {
            str(k): coerce_value(f"{name}.{k}", eval_expr(v, scope), meta.get(str(k)))
            for k, v in raw.items()
        }
        out = modifier_registry.get(name)(out, closed, params)
    return out


__all__ = [
    "MODIFIER_ORDER",
    "ModifierFunc",
    "ModifierRegistry",
    "apply_modifiers",
    "modifier",
    "modifier_registry",
]
