"""定義ツリーの検証と型付きノードへの変換のテスト群。"""

from __future__ import annotations

import pytest

from geolet.core.definition import parse_definition
from geolet.core.errors import DefinitionError, MissingParameterError


def test_root_is_parsed_into_typed_nodes() -> None:
    svg = parse_definition(
        {
            "size": [200, 100],
            "let": {"cx": 100},
            "circle": {"cx": lambda s: s.cx, "cy": 50, "r": 10},
            "group": [{"rect": {"x": 0, "y": 0, "width": 10, "height": 10}}],
        }
    )

    assert (svg.width, svg.height) == (200.0, 100.0)
    assert set(svg.root.let) == {"cx"}
    assert [s.kind for s in svg.root.shapes] == ["circle"]
    assert len(svg.root.groups) == 1
    assert svg.root.groups[0].shapes[0].kind == "rect"
    assert svg.root.generator is None


def test_generator_config_is_split_into_params_body_point_and_let() -> None:
    svg = parse_definition(
        {
            "size": [100, 100],
            "path": {
                "for": {
                    "i": 0,
                    "to": 10,
                    "let": {"a": lambda s: s.i},
                    "point": [lambda s: s.a, 0],
                },
                "close": True,
            },
        }
    )
    shape = svg.root.shapes[0]
    spec = shape.generator

    assert spec is not None and spec.name == "for"
    assert dict(spec.params) == {"i": 0, "to": 10}
    assert set(spec.let) == {"a"}
    assert spec.point is not None
    assert spec.body.is_empty
    assert shape.fields["close"] is True


def test_node_generator_body_holds_repeated_shapes() -> None:
    svg = parse_definition(
        {
            "size": [100, 100],
            "spiral": {"samples": 4, "circle": {"cx": 0, "cy": 0, "r": 1}},
        }
    )
    spec = svg.root.generator

    assert spec is not None and spec.name == "spiral"
    assert dict(spec.params) == {"samples": 4}
    assert [s.kind for s in spec.body.shapes] == ["circle"]


def test_multiple_generator_keys_are_rejected() -> None:
    with pytest.raises(DefinitionError, match="grid"):
        parse_definition(
            {
                "size": [100, 100],
                "grid": {"cols": 2, "rows": 2},
                "spiral": {"samples": 3},
            }
        )


def test_unknown_generator_parameter_is_rejected() -> None:
    with pytest.raises(DefinitionError, match="turnz"):
        parse_definition({"size": [100, 100], "path": {"spiral": {"turnz": 3}}})


def test_missing_required_parameter_is_rejected() -> None:
    with pytest.raises(MissingParameterError) as excinfo:
        parse_definition({"size": [100, 100], "grid": {"cols": 3}})

    assert excinfo.value.generator == "grid"
    assert excinfo.value.param == "rows"


def test_unknown_node_and_shape_keys_are_rejected() -> None:
    with pytest.raises(DefinitionError, match="ellipse"):
        parse_definition({"size": [100, 100], "ellipse": {}})
    with pytest.raises(DefinitionError, match="radius"):
        parse_definition({"size": [100, 100], "circle": {"cx": 0, "cy": 0, "r": 1, "radius": 2}})


def test_missing_shape_field_is_rejected() -> None:
    with pytest.raises(DefinitionError, match="r"):
        parse_definition({"size": [100, 100], "circle": {"cx": 0, "cy": 0}})


@pytest.mark.parametrize("size", [None, [100], [0, 100], "big", [-1, 5]])
def test_malformed_size_is_rejected(size: object) -> None:
    definition = {} if size is None else {"size": size}
    with pytest.raises(DefinitionError):
        parse_definition(definition)


def test_collect_requires_generator_source() -> None:
    with pytest.raises(DefinitionError):
        parse_definition({"size": [100, 100], "collect": {"voronoi": {"points": []}}})
    with pytest.raises(DefinitionError):
        parse_definition({"size": [100, 100], "collect": {"points": {"circle": {}}}})


def test_collect_source_and_body_are_parsed() -> None:
    svg = parse_definition(
        {
            "size": [100, 100],
            "collect": {
                "points": {"random": {"count": 5, "bounds": {"width": 10, "height": 10}}},
                "voronoi": {"points": lambda s: s.points, "polygon": {"points": lambda s: s.vertices}},
            },
        }
    )
    collect = svg.root.collects[0]

    assert collect.source.name == "random"
    assert collect.body.generator is not None
    assert collect.body.generator.name == "voronoi"


def test_modifiers_are_validated_on_point_shapes() -> None:
    svg = parse_definition(
        {
            "size": [100, 100],
            "polyline": {"points": [[0, 0], [1, 1]], "mirror": {"axis": "y"}},
        }
    )
    assert dict(svg.root.shapes[0].modifiers) == {"mirror": {"axis": "y"}}

    with pytest.raises(DefinitionError, match="strength"):
        parse_definition(
            {"size": [100, 100], "path": {"points": [], "jitter": {"strength": 1}}}
        )
    with pytest.raises(DefinitionError, match="jitter"):
        parse_definition(
            {"size": [100, 100], "circle": {"cx": 0, "cy": 0, "r": 1, "jitter": {"amount": 1}}}
        )


def test_shape_lists_keep_source_order() -> None:
    svg = parse_definition(
        {
            "size": [100, 100],
            "circle": [{"cx": 0, "cy": 0, "r": 1}, {"cx": 1, "cy": 1, "r": 2}],
            "line": {"x1": 0, "y1": 0, "x2": 1, "y2": 1},
        }
    )
    assert [s.kind for s in svg.root.shapes] == ["circle", "circle", "line"]


def test_points_and_generator_cannot_both_feed_a_shape() -> None:
    with pytest.raises(DefinitionError):
        parse_definition(
            {"size": [100, 100], "path": {"points": [[0, 0]], "spiral": {"samples": 3}}}
        )


def test_let_names_clashing_with_scope_members_are_rejected() -> None:
    with pytest.raises(DefinitionError, match=r"root\.let.*items"):
        parse_definition({"size": [10, 10], "let": {"items": 3}})
    with pytest.raises(DefinitionError, match="parent"):
        parse_definition(
            {"size": [10, 10], "group": {"let": {"parent": 1}, "circle": {"cx": 0, "cy": 0, "r": 1}}}
        )


def test_point_on_node_generator_is_rejected() -> None:
    with pytest.raises(DefinitionError, match="point"):
        parse_definition(
            {
                "size": [10, 10],
                "grid": {"cols": 2, "rows": 2, "point": [0, 0], "circle": {"cx": 0, "cy": 0, "r": 1}},
            }
        )
    # shape 内の generator では従来どおり有効。
    svg = parse_definition({"size": [10, 10], "polyline": {"grid": {"cols": 2, "rows": 2, "point": [0, 0]}}})
    assert svg.root.shapes[0].generator.point == [0, 0]
