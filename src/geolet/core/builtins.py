# どこで: `src/geolet/core/builtins.py`。
# 何を: 組み込み generator / modifier のモジュールを import してレジストリへ登録させる。
# なぜ: 定義の検証と評価の前に、全ジェネレータキーと modifier が揃っていることを保証するため。

from __future__ import annotations

from geolet.core.generators import for_loop as _generator_for  # noqa: F401
from geolet.core.generators import grid as _generator_grid  # noqa: F401
from geolet.core.generators import spiral as _generator_spiral  # noqa: F401
from geolet.core.generators import lissajous as _generator_lissajous  # noqa: F401
from geolet.core.generators import rose as _generator_rose  # noqa: F401
from geolet.core.generators import parametric as _generator_parametric  # noqa: F401
from geolet.core.generators import superformula as _generator_superformula  # noqa: F401
from geolet.core.generators import trochoid as _generator_trochoid  # noqa: F401
from geolet.core.generators import fractal as _generator_fractal  # noqa: F401
from geolet.core.generators import attractor as _generator_attractor  # noqa: F401
from geolet.core.generators import flowfield as _generator_flowfield  # noqa: F401
from geolet.core.generators import random_points as _generator_random  # noqa: F401
from geolet.core.generators import poisson as _generator_poisson  # noqa: F401
from geolet.core.generators import noise_grid as _generator_noise  # noqa: F401
from geolet.core.generators import voronoi as _generator_voronoi  # noqa: F401
from geolet.core.generators import delaunay as _generator_delaunay  # noqa: F401
from geolet.core.generators import tile as _generator_tile  # noqa: F401
from geolet.core.generators import pack as _generator_pack  # noqa: F401
from geolet.core.generators import distribute as _generator_distribute  # noqa: F401
from geolet.core.modifiers import displace as _modifier_displace  # noqa: F401
from geolet.core.modifiers import jitter as _modifier_jitter  # noqa: F401
from geolet.core.modifiers import subdivide as _modifier_subdivide  # noqa: F401
from geolet.core.modifiers import mirror as _modifier_mirror  # noqa: F401
