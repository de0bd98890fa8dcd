# どこで: `src/geolet/core/errors.py`。
# 何を: 評価エンジン全体で共有する例外階層を定義する。
# なぜ: 呼び出し側が「定義の誤り」と「評価時の失敗」を型で区別できるようにするため。

from __future__ import annotations


class GeoletError(RuntimeError):
    """geolet の評価で発生する例外の基底クラス。"""


class CircularReferenceError(GeoletError):
    """スコープ束縛が解決中の自分自身を参照した。

    Parameters
    ----------
    key : str
        循環を検出した束縛名。
    """

    def __init__(self, key: str) -> None:
        super().__init__(f"循環参照を検出した: {key}")
        self.key = key


class DefinitionError(GeoletError):
    """定義ツリーの構造が不正（評価前の検証で検出）。"""


class MissingParameterError(DefinitionError):
    """generator の必須パラメータが指定されていない。"""

    def __init__(self, generator: str, param: str) -> None:
        super().__init__(f"generator '{generator}' の必須パラメータがない: {param!r}")
        self.generator = generator
        self.param = param


class UnknownVariantError(GeoletError, ValueError):
    """choice 型パラメータ（attractor の type など）に未知の値が渡された。"""

    def __init__(self, name: str, value: object, choices: tuple[str, ...]) -> None:
        super().__init__(f"未知の {name}: {value!r}（選択肢: {', '.join(choices)}）")
        self.name = name
        self.value = value
        self.choices = choices


class GeneratorLimitError(GeoletError):
    """generator の反復が安全上限を超えた。"""


__all__ = [
    "CircularReferenceError",
    "DefinitionError",
    "GeneratorLimitError",
    "GeoletError",
    "MissingParameterError",
    "UnknownVariantError",
]
