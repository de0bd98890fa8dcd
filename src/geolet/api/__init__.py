# どこで: `src/geolet/api/__init__.py`。
# 何を: 公開 API（evaluate/render/RenderResult と設定・エクスポート関数）を再エクスポートする。
# なぜ: ユーザーコードからシンプルに API を import できるようにするため。

from __future__ import annotations

from geolet.api.render import RenderResult, render
from geolet.core.evaluator import evaluate
from geolet.core.runtime_config import set_config_path
from geolet.export.svg import export_svg, svg_string

__all__ = ["RenderResult", "evaluate", "export_svg", "render", "set_config_path", "svg_string"]
