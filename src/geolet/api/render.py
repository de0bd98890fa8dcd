"""
どこで: `src/geolet/api/render.py`。
何を: 定義ツリーを評価し、SVG/HTML 文字列と保存導線をまとめた RenderResult を返す。
なぜ: 評価エンジンと serializer を 1 回の呼び出しで使えるようにするため。
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from functools import cached_property
from pathlib import Path
from typing import Any

from geolet.core.elements import EvaluatedSvg
from geolet.core.evaluator import evaluate
from geolet.core.runtime_config import output_root_dir
from geolet.export.html import html_page
from geolet.export.svg import svg_string


def _sanitize_name(name: str) -> str:
    """name をファイル名として使える形に正規化して返す。"""
    sanitized = re.sub(r"[^A-Za-z0-9._-]+", "_", str(name).strip())
    if not sanitized:
        raise ValueError(f"出力名が空になる: {name!r}")
    return sanitized


class RenderResult:
    """評価結果 `ast` と、その SVG/HTML 表現。

    文字列化は初回アクセス時に 1 回だけ行う。
    """

    def __init__(self, ast: EvaluatedSvg) -> None:
        self.ast = ast

    @cached_property
    def _svg(self) -> str:
        return svg_string(self.ast)

    def svg_string(self) -> str:
        return self._svg

    def html(self, *, title: str = "SVG Output") -> str:
        return html_page(self._svg, title=title)

    def save(self, name: str, *, directory: str | Path | None = None) -> tuple[Path, Path]:
        """`<directory>/<name>.svg` と `<name>.html` を書き出し、両パスを返す。

        directory が None なら config の ``paths.output_dir`` を使う。
        """
        stem = _sanitize_name(name)
        root = output_root_dir() if directory is None else Path(directory)
        root.mkdir(parents=True, exist_ok=True)
        svg_path = root / f"{stem}.svg"
        html_path = root / f"{stem}.html"
        svg_path.write_text(self._svg + "\n", encoding="utf-8")
        html_path.write_text(self.html(title=stem), encoding="utf-8")
        return svg_path, html_path


def render(definition: Mapping[str, Any]) -> RenderResult:
    """定義ツリーを評価して RenderResult を返す。"""
    return RenderResult(evaluate(definition))


__all__ = ["RenderResult", "render"]
