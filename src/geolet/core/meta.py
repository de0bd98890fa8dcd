# どこで: `src/geolet/core/meta.py`。
# 何を: generator / modifier 引数の型メタ情報 ParamMeta を提供する。
# なぜ: 引数の型変換・選択肢検証・遅延評価の要否をレジストリで一元管理するため。

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from geolet.core.errors import UnknownVariantError


@dataclass(frozen=True, slots=True)
class ParamMeta:
    """パラメータの型メタ情報。

    kind が "expr" の引数は親スコープで事前評価せず、式のまま generator に渡す
    （ステップごとに再評価する `for` の `to` など）。
    """

    kind: str  # "float" | "int" | "bool" | "str" | "choice" | "point" | "points" | "bounds" | "mapping" | "expr"
    choices: Sequence[str] | None = None

    @property
    def lazy(self) -> bool:
        return self.kind == "expr"


def coerce_value(name: str, value: Any, meta: ParamMeta | None) -> Any:
    """評価済みの値を meta.kind に従って正規化する。

    Raises
    ------
    UnknownVariantError
        choice 型で選択肢に無い値が渡された場合。
    ValueError
        数値型へ変換できない場合。
    """
    if meta is None or value is None:
        return value
    kind = meta.kind
    if kind == "float":
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{name} は数値である必要がある: got={value!r}") from exc
    if kind == "int":
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{name} は整数である必要がある: got={value!r}") from exc
    if kind == "bool":
        return bool(value)
    if kind == "choice":
        choices = tuple(meta.choices or ())
        text = str(value).strip().lower()
        if text not in choices:
            raise UnknownVariantError(name, value, choices)
        return text
    return value


__all__ = ["ParamMeta", "coerce_value"]
