# どこで: `src/geolet/core/scope.py`。
# 何を: 遅延評価・メモ化・循環検出付きのスコープ（let 束縛の環境）を実装する。
# なぜ: 束縛同士が宣言順に依らず参照し合えるようにしつつ、各式の評価を 1 回に抑えるため。

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Callable, TypeVar, Union

from geolet.core.errors import CircularReferenceError, DefinitionError

T = TypeVar("T")

Expr = Union[T, Callable[["Scope"], T]]
"""リテラル値、またはスコープを受け取って値を返す関数。"""


class Scope(Mapping[str, Any]):
    """親スコープへフォールバックする遅延評価環境。

    Parameters
    ----------
    bindings : Mapping[str, Any] or None, optional
        このスコープで新たに束縛する名前と値（リテラルまたは式）。
    parent : Scope or None, optional
        ローカルに無い名前の解決先。読み取り専用で参照する。

    Notes
    -----
    - 式（callable）はこのスコープ自身を引数に呼ばれるため、兄弟束縛を
      前方・後方どちらの順でも参照できる。
    - 評価結果はスコープインスタンスごとのメモ表に保存され、同じ束縛が
      2 回評価されることはない。
    - 評価中の名前を再び読むと `CircularReferenceError` を送出する。
    - `s.items` や `s.parent` のようにメソッド・属性名と衝突する名前は属性アクセスで
      束縛に届かないため、束縛名としては受け付けない（`RESERVED_NAMES`）。
    """

    __slots__ = ("_bindings", "_parent", "_cache", "_resolving")

    def __init__(
        self,
        bindings: Mapping[str, Any] | None = None,
        parent: Scope | None = None,
    ) -> None:
        self._bindings: dict[str, Any] = dict(bindings) if bindings else {}
        check_binding_names(self._bindings)
        self._parent = parent
        self._cache: dict[str, Any] = {}
        self._resolving: set[str] = set()

    @property
    def parent(self) -> Scope | None:
        return self._parent

    def child(self, bindings: Mapping[str, Any] | None = None) -> Scope:
        """このスコープを親に持つ子スコープを返す。"""
        return Scope(bindings, parent=self)

    def is_local(self, key: str) -> bool:
        return key in self._bindings

    def resolve(self, key: str) -> Any:
        """名前を解決して値を返す。

        Raises
        ------
        CircularReferenceError
            評価中の束縛を再帰的に読んだ場合。
        KeyError
            自身にも祖先にも束縛が無い場合。
        """
        if key in self._cache:
            return self._cache[key]

        if key not in self._bindings:
            if self._parent is None:
                raise KeyError(f"未定義の名前: {key!r}")
            return self._parent.resolve(key)

        value = self._bindings[key]
        if not callable(value):
            self._cache[key] = value
            return value

        if key in self._resolving:
            raise CircularReferenceError(key)
        self._resolving.add(key)
        try:
            result = value(self)
        finally:
            self._resolving.discard(key)
        self._cache[key] = result
        return result

    def __getitem__(self, key: str) -> Any:
        return self.resolve(key)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__"):
            raise AttributeError(name)
        try:
            return self.resolve(name)
        except KeyError:
            raise AttributeError(f"未定義の名前: {name!r}") from None

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        if key in self._bindings:
            return True
        return self._parent is not None and key in self._parent

    def _keys(self) -> list[str]:
        keys = list(self._parent._keys()) if self._parent is not None else []
        seen = set(keys)
        for k in self._bindings:
            if k not in seen:
                keys.append(k)
        return keys

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys())

    def __len__(self) -> int:
        return len(self._keys())

    def __repr__(self) -> str:
        return f"Scope(keys={list(self._bindings)!r}, parent={self._parent is not None})"


RESERVED_NAMES: frozenset[str] = frozenset(n for n in dir(Scope) if not n.startswith("__"))
"""属性アクセスで束縛より先に見つかる名前（Mapping API と Scope 自身のメンバ）。"""


def check_binding_names(names: Iterable[str], *, where: str = "let") -> None:
    """束縛名が RESERVED_NAMES と衝突していれば DefinitionError を送出する。"""
    clashes = sorted(str(n) for n in names if n in RESERVED_NAMES)
    if clashes:
        raise DefinitionError(
            f"{where}: 予約名は束縛名に使えない（s.<name> で参照できないため）: {', '.join(clashes)}"
        )


def eval_expr(expr: Expr[T], scope: Scope) -> T:
    """式をスコープに対して評価する。callable 以外はそのまま返す。"""
    if callable(expr):
        return expr(scope)
    return expr


__all__ = ["Expr", "RESERVED_NAMES", "Scope", "check_binding_names", "eval_expr"]
