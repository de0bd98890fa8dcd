# どこで: `src/geolet/core/definition.py`。
# 何を: dict 形式の定義ツリーを検証し、型付きノード（SvgDefinition/NodeDef/ShapeDef/...）へ変換する。
# なぜ: ジェネレータキーの選択や引数検証を評価前に 1 回だけ確定させ、評価器を単純に保つため。

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from geolet.core import builtins as _builtins  # noqa: F401
from geolet.core.errors import DefinitionError
from geolet.core.generator_registry import GENERATOR_PRIORITY, generator_registry
from geolet.core.modifier_registry import MODIFIER_ORDER, modifier_registry
from geolet.core.scope import check_binding_names

STYLE_KEYS = ("fill", "stroke", "stroke_width")

# shape 種別ごとの必須フィールドと任意フィールド（style を除く）。
SHAPE_FIELDS: dict[str, tuple[tuple[str, ...], tuple[str, ...]]] = {
    "circle": (("cx", "cy", "r"), ()),
    "rect": (("x", "y", "width", "height"), ()),
    "line": (("x1", "y1", "x2", "y2"), ()),
    "path": ((), ("points", "close")),
    "polyline": ((), ("points",)),
    "polygon": ((), ("points",)),
}
SHAPE_KINDS = tuple(SHAPE_FIELDS)
POINT_SHAPES = ("path", "polyline", "polygon")
NO_FILL_SHAPES = ("line",)

NODE_KEYS = frozenset(("let", "group", "collect", *SHAPE_KINDS))


@dataclass(frozen=True, slots=True)
class GeneratorSpec:
    """解決済みのアクティブ generator。

    params は未評価の引数、body はステップごとに評価し直すノード、
    point/let はステップスコープで評価する点式と束縛。
    """

    name: str
    params: Mapping[str, Any]
    body: NodeDef
    point: Any = None
    let: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ShapeDef:
    kind: str
    fields: Mapping[str, Any]
    generator: GeneratorSpec | None = None
    point: Any = None
    let: Mapping[str, Any] = field(default_factory=dict)
    modifiers: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class CollectDef:
    """source を先に最後まで駆動し、その点列を `points` としてから body を評価する。"""

    source: GeneratorSpec
    body: NodeDef


@dataclass(frozen=True, slots=True)
class NodeDef:
    let: Mapping[str, Any] = field(default_factory=dict)
    shapes: tuple[ShapeDef, ...] = ()
    groups: tuple[NodeDef, ...] = ()
    collects: tuple[CollectDef, ...] = ()
    generator: GeneratorSpec | None = None
    transform: Any = None

    @property
    def is_empty(self) -> bool:
        return not (self.shapes or self.groups or self.collects or self.generator)


@dataclass(frozen=True, slots=True)
class SvgDefinition:
    width: float
    height: float
    root: NodeDef


def parse_definition(definition: Mapping[str, Any]) -> SvgDefinition:
    """ルート定義を検証して SvgDefinition を返す。

    Parameters
    ----------
    definition : Mapping[str, Any]
        ``size: [width, height]`` を持つ定義ツリー。

    Raises
    ------
    DefinitionError
        構造・キー・引数が不正な場合。
    """
    if not isinstance(definition, Mapping):
        raise DefinitionError(f"定義は mapping である必要がある: got={type(definition).__name__}")
    width, height = _parse_size(definition.get("size"))
    body = {k: v for k, v in definition.items() if k != "size"}
    root = _parse_node(body, path="root", allow_transform=False)
    return SvgDefinition(width=width, height=height, root=root)


def _parse_size(value: Any) -> tuple[float, float]:
    if value is None:
        raise DefinitionError("ルートに size: [width, height] がない")
    try:
        w, h = value
        width, height = float(w), float(h)
    except (TypeError, ValueError) as exc:
        raise DefinitionError(f"size は [width, height] である必要がある: got={value!r}") from exc
    if width <= 0 or height <= 0:
        raise DefinitionError(f"size は正の値である必要がある: got={value!r}")
    return width, height


def _as_list(value: Any, *, path: str) -> list[Mapping[str, Any]]:
    items = value if isinstance(value, Sequence) and not isinstance(value, (str, bytes)) else [value]
    out = []
    for k, item in enumerate(items):
        if not isinstance(item, Mapping):
            raise DefinitionError(f"{path}[{k}] は mapping である必要がある: got={item!r}")
        out.append(item)
    return out


def _as_let(value: Any, *, path: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise DefinitionError(f"{path}.let は mapping である必要がある")
    let = {str(k): v for k, v in value.items()}
    check_binding_names(let, where=f"{path}.let")
    return let


def _pick_generator(keys: Sequence[str], *, path: str) -> str | None:
    """ノード内のジェネレータキーを 1 つに確定する。複数あれば定義エラー。"""
    found = [name for name in GENERATOR_PRIORITY if name in keys]
    if len(found) > 1:
        raise DefinitionError(f"{path}: ジェネレータキーは 1 つまで: {', '.join(found)}")
    return found[0] if found else None


def _parse_node(node: Mapping[str, Any], *, path: str, allow_transform: bool = True) -> NodeDef:
    keys = [str(k) for k in node]
    gen_name = _pick_generator(keys, path=path)
    allowed = NODE_KEYS | ({"transform"} if allow_transform else set())
    for key in keys:
        if key not in allowed and key != gen_name:
            raise DefinitionError(f"{path}: 未知のキー {key!r}")

    shapes: list[ShapeDef] = []
    for key in keys:
        if key in SHAPE_FIELDS:
            for k, item in enumerate(_as_list(node[key], path=f"{path}.{key}")):
                shapes.append(_parse_shape(key, item, path=f"{path}.{key}[{k}]"))

    groups = tuple(
        _parse_node(item, path=f"{path}.group[{k}]")
        for k, item in enumerate(_as_list(node["group"], path=f"{path}.group"))
    ) if "group" in node else ()

    collects = tuple(
        _parse_collect(item, path=f"{path}.collect[{k}]")
        for k, item in enumerate(_as_list(node["collect"], path=f"{path}.collect"))
    ) if "collect" in node else ()

    generator = None
    if gen_name is not None:
        generator = _parse_generator(gen_name, node[gen_name], path=f"{path}.{gen_name}", with_body=True)

    return NodeDef(
        let=_as_let(node.get("let"), path=path),
        shapes=tuple(shapes),
        groups=groups,
        collects=collects,
        generator=generator,
        transform=node.get("transform"),
    )


def _parse_generator(name: str, config: Any, *, path: str, with_body: bool) -> GeneratorSpec:
    """generator 設定を引数・本体・point・let に仕分ける。

    このジェネレータの引数名に一致するキーは常に引数として扱う
    （`parametric` の `x`/`y` や `for` の `i` など）。
    """
    if not isinstance(config, Mapping):
        raise DefinitionError(f"{path} は mapping である必要がある: got={config!r}")
    accepted = generator_registry.accepted_params(name)
    params: dict[str, Any] = {}
    body: dict[str, Any] = {}
    for raw_key, value in config.items():
        key = str(raw_key)
        if key in accepted:
            params[key] = value
        elif key == "point" and with_body:
            # ノード直下の generator は点列を作らないため point は効かない。
            raise DefinitionError(f"{path}: point は shape 内または collect の generator でのみ使える")
        elif key in ("let", "point"):
            continue
        elif key in NODE_KEYS or key in GENERATOR_PRIORITY:
            if not with_body:
                raise DefinitionError(f"{path}: この位置の generator は本体 {key!r} を持てない")
            body[key] = value
        else:
            params[key] = value
    generator_registry.validate(name, params)

    point = config.get("point")
    if point is not None:
        _check_point(point, path=f"{path}.point")

    return GeneratorSpec(
        name=name,
        params=params,
        body=_parse_node(body, path=path, allow_transform=False) if body else NodeDef(),
        point=point,
        let=_as_let(config.get("let"), path=path),
    )


def _check_point(point: Any, *, path: str) -> None:
    if callable(point) or isinstance(point, Mapping):
        return
    if isinstance(point, Sequence) and not isinstance(point, (str, bytes)) and len(point) == 2:
        return
    raise DefinitionError(f"{path} は [x, y]・{{x, y}}・式のいずれかである必要がある: got={point!r}")


def _parse_shape(kind: str, template: Mapping[str, Any], *, path: str) -> ShapeDef:
    required, optional = SHAPE_FIELDS[kind]
    style = ("stroke", "stroke_width") if kind in NO_FILL_SHAPES else STYLE_KEYS
    keys = [str(k) for k in template]

    gen_name = _pick_generator(keys, path=path) if kind in POINT_SHAPES else None
    fields: dict[str, Any] = {}
    modifiers: dict[str, Mapping[str, Any]] = {}
    for key in keys:
        value = template[key]
        if key in required or key in optional or key in style:
            fields[key] = value
        elif key in ("let", "point") or key == gen_name:
            continue
        elif kind in POINT_SHAPES and key in MODIFIER_ORDER:
            if not isinstance(value, Mapping):
                raise DefinitionError(f"{path}.{key} は mapping である必要がある")
            modifier_registry.validate(key, value)
            modifiers[key] = dict(value)
        else:
            raise DefinitionError(f"{path}: {kind} の未知のキー {key!r}")

    missing = [k for k in required if k not in fields]
    if missing:
        raise DefinitionError(f"{path}: {kind} の必須フィールドがない: {', '.join(missing)}")

    point = template.get("point")
    if point is not None:
        if kind not in POINT_SHAPES:
            raise DefinitionError(f"{path}: {kind} は point を持てない")
        _check_point(point, path=f"{path}.point")

    generator = None
    if gen_name is not None:
        if "points" in fields:
            raise DefinitionError(f"{path}: points と generator {gen_name!r} は同時に指定できない")
        generator = _parse_generator(gen_name, template[gen_name], path=f"{path}.{gen_name}", with_body=False)

    return ShapeDef(
        kind=kind,
        fields=fields,
        generator=generator,
        point=point,
        let=_as_let(template.get("let"), path=path),
        modifiers=modifiers,
    )


def _parse_collect(config: Mapping[str, Any], *, path: str) -> CollectDef:
    source_node = config.get("points")
    if not isinstance(source_node, Mapping):
        raise DefinitionError(f"{path}: collect には points: {{<generator>: ...}} が必要")
    source_keys = [str(k) for k in source_node]
    gen_name = _pick_generator(source_keys, path=f"{path}.points")
    if gen_name is None:
        raise DefinitionError(f"{path}.points にジェネレータキーがない")
    extra = [k for k in source_keys if k != gen_name]
    if extra:
        raise DefinitionError(f"{path}.points: 未知のキー {', '.join(extra)}")
    source = _parse_generator(gen_name, source_node[gen_name], path=f"{path}.points.{gen_name}", with_body=False)

    body = {k: v for k, v in config.items() if k != "points"}
    return CollectDef(source=source, body=_parse_node(body, path=path, allow_transform=False))


__all__ = [
    "CollectDef",
    "GeneratorSpec",
    "NodeDef",
    "POINT_SHAPES",
    "SHAPE_KINDS",
    "ShapeDef",
    "SvgDefinition",
    "parse_definition",
]
