"""Scope（遅延評価・メモ化・循環検出）のテスト群。"""

from __future__ import annotations

import pytest

from geolet.core.errors import CircularReferenceError, DefinitionError
from geolet.core.scope import RESERVED_NAMES, Scope, eval_expr


def test_expression_is_evaluated_once_per_scope() -> None:
    calls = []

    def expensive(s: Scope) -> int:
        calls.append(1)
        return 42

    scope = Scope({"v": expensive})
    assert scope["v"] == 42
    assert scope.v == 42
    assert len(calls) == 1


def test_cycle_is_reported_with_key_name() -> None:
    scope = Scope({"a": lambda s: s.b, "b": lambda s: s.a})

    with pytest.raises(CircularReferenceError) as excinfo:
        scope["a"]

    assert excinfo.value.key in ("a", "b")
    assert excinfo.value.key in str(excinfo.value)


def test_forward_reference_without_cycle_resolves() -> None:
    scope = Scope({"a": lambda s: s.b * 2, "b": 5})
    assert scope.a == 10


def test_self_reference_is_a_cycle() -> None:
    scope = Scope({"a": lambda s: s.a + 1})
    with pytest.raises(CircularReferenceError):
        scope.a


def test_failed_resolution_does_not_leave_key_marked() -> None:
    state = {"fail": True}

    def flaky(s: Scope) -> int:
        if state["fail"]:
            raise ZeroDivisionError("boom")
        return 1

    scope = Scope({"v": flaky})
    with pytest.raises(ZeroDivisionError):
        scope.v
    state["fail"] = False
    assert scope.v == 1


def test_child_falls_back_to_parent_and_shadows() -> None:
    parent = Scope({"cx": 100, "r": 10})
    child = parent.child({"r": lambda s: s.cx / 2})

    assert child.cx == 100
    assert child.r == 50
    assert parent.r == 10
    assert "cx" in child
    assert child.is_local("r")
    assert not child.is_local("cx")
    assert list(child) == ["cx", "r"]
    assert len(child) == 2


def test_parent_expression_sees_parent_scope_only() -> None:
    parent = Scope({"double": lambda s: s.i * 2, "i": 1})
    child = parent.child({"i": 10})

    assert child.double == 2


def test_missing_name_raises_key_and_attribute_errors() -> None:
    scope = Scope({"a": 1})

    with pytest.raises(KeyError, match="missing"):
        scope["missing"]
    with pytest.raises(AttributeError, match="missing"):
        scope.missing
    assert getattr(scope, "missing", None) is None


def test_eval_expr_handles_literals_and_callables() -> None:
    scope = Scope({"x": 3})
    assert eval_expr(7, scope) == 7
    assert eval_expr("red", scope) == "red"
    assert eval_expr(lambda s: s.x + 1, scope) == 4


@pytest.mark.parametrize("name", ["items", "keys", "values", "get", "parent", "child", "resolve", "is_local"])
def test_names_shadowed_by_scope_members_are_rejected(name: str) -> None:
    assert name in RESERVED_NAMES
    with pytest.raises(DefinitionError, match=name):
        Scope({name: 3})
    with pytest.raises(DefinitionError, match=name):
        Scope().child({"ok": 1, name: 4})


def test_attribute_access_reaches_every_accepted_binding() -> None:
    scope = Scope({"item": 1, "value": 2, "parents": 3, "size": 4})

    assert (scope.item, scope.value, scope.parents, scope.size) == (1, 2, 3, 4)
