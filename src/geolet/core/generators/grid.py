"""`grid`: cols × rows のセル中心を行優先で走査する generator。"""

from __future__ import annotations

from collections.abc import Iterator

from geolet.core.generator_registry import Step, generator, make_step
from geolet.core.meta import ParamMeta
from geolet.core.scope import Scope

grid_meta = {
    "cols": ParamMeta(kind="int"),
    "rows": ParamMeta(kind="int"),
    "cell_width": ParamMeta(kind="float"),
    "cell_height": ParamMeta(kind="float"),
    "x": ParamMeta(kind="float"),
    "y": ParamMeta(kind="float"),
}


@generator(meta=grid_meta)
def grid(
    scope: Scope,
    *,
    cols: int,
    rows: int,
    cell_width: float = 1.0,
    cell_height: float | None = None,
    x: float = 0.0,
    y: float = 0.0,
) -> Iterator[Step]:
    """セル中心 (x, y) と row/col を返す。

    Parameters
    ----------
    cols, rows : int
        列数・行数。負値はエラー、0 なら空。
    cell_width : float, default 1.0
        セル幅。
    cell_height : float or None, optional
        セル高さ。省略時は cell_width と同じ。
    x, y : float, default 0.0
        グリッド左上のオフセット。

    Notes
    -----
    ステップ番号は ``i = row * cols + col``。
    """
    if cols < 0 or rows < 0:
        raise ValueError("grid の cols/rows は 0 以上である必要がある")
    cw = float(cell_width)
    ch = cw if cell_height is None else float(cell_height)
    count = cols * rows
    for row in range(rows):
        for col in range(cols):
            yield make_step(
                row * cols + col,
                count,
                x=x + col * cw + cw / 2.0,
                y=y + row * ch + ch / 2.0,
                row=row,
                col=col,
            )


__all__ = ["grid", "grid_meta"]
