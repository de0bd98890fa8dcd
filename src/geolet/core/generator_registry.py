# src/geolet/core/generator_registry.py
# generator 名からステップ列生成関数を引けるレジストリ。
# 定義ツリーのジェネレータキーの優先順位と引数検証もここで管理する。

from __future__ import annotations

import inspect
from collections.abc import ItemsView, Iterator, Mapping
from typing import Any, Callable

from geolet.core.errors import DefinitionError, MissingParameterError
from geolet.core.meta import ParamMeta, coerce_value
from geolet.core.scope import Scope, eval_expr

Step = dict[str, Any]
"""generator が 1 反復ごとに返すスコープ拡張（最低限 `i` と `t` を持つ）。"""

GeneratorFunc = Callable[[Mapping[str, Any], Scope], Iterator[Step]]

GENERATOR_PRIORITY: tuple[str, ...] = (
    "for",
    "grid",
    "spiral",
    "lissajous",
    "rose",
    "parametric",
    "superformula",
    "epitrochoid",
    "hypotrochoid",
    "fractal",
    "attractor",
    "flowfield",
    "random",
    "poisson",
    "noise",
    "voronoi",
    "delaunay",
    "tile",
    "pack",
    "distribute",
)
"""ジェネレータキーの固定優先順位。"""


def progress(i: int, count: int) -> float:
    """i 番目（0 始まり）のステップの正規化進捗 t を返す。count<=1 では 0。"""
    if count <= 1:
        return 0.0
    return float(i) / float(count - 1)


def make_step(i: int, count: int, **fields: Any) -> Step:
    """`i` と `t` を埋めたステップ辞書を作る。"""
    step: Step = {"i": i, "t": progress(i, count)}
    step.update(fields)
    return step


class GeneratorRegistry:
    """generator 名とステップ列生成関数を対応付けるレジストリ。

    Notes
    -----
    登録された関数のシグネチャは
    ``func(scope: Scope, *, <params>) -> Iterator[Step]`` を想定する。
    meta で kind="expr" とした引数以外は、呼び出し前に親スコープで 1 回だけ評価する。
    """

    def __init__(self) -> None:
        """空のレジストリを初期化する。"""
        self._items: dict[str, GeneratorFunc] = {}
        self._meta: dict[str, dict[str, ParamMeta]] = {}
        self._required: dict[str, tuple[str, ...]] = {}
        self._accepted: dict[str, frozenset[str]] = {}

    def _register(
        self,
        name: str,
        func: GeneratorFunc,
        *,
        overwrite: bool = True,
        meta: dict[str, ParamMeta],
        required: tuple[str, ...],
        accepted: frozenset[str],
    ) -> None:
        """generator を登録する（内部用）。

        Notes
        -----
        登録は `@generator` デコレータ経由に統一する。
        """
        if name not in GENERATOR_PRIORITY:
            raise ValueError(f"generator '{name}' は優先順位表に存在しない")
        if not overwrite and name in self._items:
            raise ValueError(f"generator '{name}' は既に登録されている")
        self._items[name] = func
        self._meta[name] = meta
        self._required[name] = required
        self._accepted[name] = accepted

    def get(self, name: str) -> GeneratorFunc:
        """generator 名に対応するステップ列生成関数を取得する。

        Raises
        ------
        KeyError
            未登録の generator 名が指定された場合。
        """
        return self._items[name]

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __getitem__(self, name: str) -> GeneratorFunc:
        return self.get(name)

    def items(self) -> ItemsView[str, GeneratorFunc]:
        return self._items.items()

    def get_meta(self, name: str) -> dict[str, ParamMeta]:
        return dict(self._meta.get(name, {}))

    def accepted_params(self, name: str) -> frozenset[str]:
        """generator が受け付ける引数名の集合を返す。"""
        return self._accepted[name]

    def validate(self, name: str, params: Mapping[str, Any]) -> None:
        """定義時点で引数の過不足を検証する。

        Raises
        ------
        DefinitionError
            未知の引数が含まれる場合。
        MissingParameterError
            必須引数が欠けている場合。
        """
        accepted = self._accepted[name]
        unknown = sorted(str(k) for k in params if k not in accepted)
        if unknown:
            raise DefinitionError(f"generator '{name}' の未知の引数: {', '.join(unknown)}")
        for param in self._required[name]:
            if param not in params:
                raise MissingParameterError(name, param)


generator_registry = GeneratorRegistry()
"""グローバルな generator レジストリインスタンス。"""


def _resolve_nested(value: Any, scope: Scope, meta: ParamMeta | None) -> Any:
    """bounds / point / points / mapping 型の内側に含まれる式を評価する。"""
    if meta is None:
        return value
    kind = meta.kind
    if kind in ("bounds", "mapping") and isinstance(value, Mapping):
        return {str(k): eval_expr(v, scope) for k, v in value.items()}
    if kind == "point":
        return resolve_point(value, scope)
    if kind == "points" and value is not None:
        return [resolve_point(p, scope) for p in value]
    return value


def resolve_point(value: Any, scope: Scope) -> tuple[float, float]:
    """`[x, y]` または `{"x": ..., "y": ...}` 形式の点を数値ペアに評価する。"""
    value = eval_expr(value, scope)
    if isinstance(value, Mapping):
        x = eval_expr(value["x"], scope)
        y = eval_expr(value["y"], scope)
    else:
        try:
            x_expr, y_expr = value
        except (TypeError, ValueError) as exc:
            raise ValueError(f"点は [x, y] または {{x, y}} である必要がある: got={value!r}") from exc
        x = eval_expr(x_expr, scope)
        y = eval_expr(y_expr, scope)
    return (float(x), float(y))


def generator(
    func: Callable[..., Iterator[Step]] | None = None,
    *,
    name: str | None = None,
    overwrite: bool = True,
    meta: dict[str, ParamMeta] | None = None,
):
    """グローバル generator レジストリ用デコレータ。

    関数名（`for` のような予約語は name 引数）を generator 名として登録する。

    Examples
    --------
    @generator(meta={"cx": ParamMeta(kind="float")})
    def spiral(scope, *, cx=0.0):
        ...
    """

    def decorator(f: Callable[..., Iterator[Step]]) -> Callable[..., Iterator[Step]]:
        op = name or f.__name__
        param_meta = dict(meta or {})
        sig = inspect.signature(f)
        params = list(sig.parameters.values())[1:]
        accepted = frozenset(p.name for p in params)
        required = tuple(p.name for p in params if p.default is inspect.Parameter.empty)
        for arg in param_meta:
            if arg not in accepted:
                raise ValueError(f"generator '{op}' の meta 引数がシグネチャに存在しない: {arg!r}")

        def wrapper(raw: Mapping[str, Any], scope: Scope) -> Iterator[Step]:
            resolved: dict[str, Any] = {}
            for key, value in raw.items():
                m = param_meta.get(key)
                if m is not None and m.lazy:
                    resolved[key] = value
                    continue
                value = _resolve_nested(eval_expr(value, scope), scope, m)
                resolved[key] = coerce_value(f"{op}.{key}", value, m)
            return f(scope, **resolved)

        generator_registry._register(
            op,
            wrapper,
            overwrite=overwrite,
            meta=param_meta,
            required=required,
            accepted=accepted,
        )
        return f

    if func is None:
        return decorator
    return decorator(func)


__all__ = [
    "GENERATOR_PRIORITY",
    "GeneratorFunc",
    "GeneratorRegistry",
    "Step",
    "generator",
    "generator_registry",
    "make_step",
    "progress",
    "resolve_point",
]
