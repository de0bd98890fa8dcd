# どこで: `src/geolet/__init__.py`。
# 何を: ルート `geolet` パッケージを定義する。
# なぜ: import 起点を `geolet` に統一するため。

from __future__ import annotations

from geolet.api import RenderResult, evaluate, export_svg, render, set_config_path, svg_string
from geolet.core.errors import (
    CircularReferenceError,
    DefinitionError,
    GeneratorLimitError,
    GeoletError,
    MissingParameterError,
    UnknownVariantError,
)
from geolet.core.scope import Scope

__all__ = [
    "CircularReferenceError",
    "DefinitionError",
    "GeneratorLimitError",
    "GeoletError",
    "MissingParameterError",
    "RenderResult",
    "Scope",
    "UnknownVariantError",
    "evaluate",
    "export_svg",
    "render",
    "set_config_path",
    "svg_string",
]
