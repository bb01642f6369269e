"""
Tests for factkit Metavariables and MetavarBinder

Tests cover:
- metavar() declarations
- Memoized binding within one evaluation, fresh values across evaluations
- Substitution into clauses, assertions, and nested structures
"""
from collections import namedtuple

import pytest

from factkit.engine import MetavarBinder
from factkit.models import (
    Metavariable,
    MetavarRef,
    call,
    check,
    in_any_order,
    metavar,
    provided,
)

from tests.fixtures.sweet import g, inc


Point = namedtuple("Point", ["x", "y"])


class TestMetavarDeclaration:
    """Tests for metavar()."""

    def test_creates_reference(self):
        assert metavar("cell") == MetavarRef("cell")

    def test_dots_are_stripped(self):
        assert metavar("...cell...") == metavar("cell")

    @pytest.mark.parametrize("name", ["", "...", None])
    def test_empty_name_rejected(self, name):
        with pytest.raises(ValueError):
            metavar(name)


class TestBinding:
    """Tests for MetavarBinder.bind."""

    def test_same_name_same_value(self):
        binder = MetavarBinder()
        assert binder.bind("cell") is binder.bind("cell")
        assert binder.bind("cell") is binder.bind("...cell...")

    def test_different_names_differ(self):
        binder = MetavarBinder()
        assert binder.bind("a") != binder.bind("b")

    def test_fresh_per_evaluation(self):
        """Two evaluations never share a metavariable."""
        first = MetavarBinder().bind("cell")
        second = MetavarBinder().bind("cell")
        assert first != second
        assert first.name == second.name == "cell"

    def test_metavariable_is_opaque(self):
        value = MetavarBinder().bind("cell")
        assert isinstance(value, Metavariable)
        assert repr(value) == "...cell..."
        assert value != "cell"
        assert len({value, value}) == 1

    def test_bound_snapshot(self):
        binder = MetavarBinder()
        binder.bind("x")
        assert list(binder.bound) == ["x"]


class TestResolution:
    """Tests for MetavarBinder.resolve and friends."""

    @pytest.fixture
    def binder(self):
        return MetavarBinder("eval-1")

    def test_plain_values_unchanged(self, binder):
        for value in (1, "a", None, inc):
            assert binder.resolve(value) is value

    def test_nested_structures(self, binder):
        resolved = binder.resolve({"cells": [metavar("a"), (metavar("b"), 2)], "n": {metavar("a")}})
        a, b = binder.bind("a"), binder.bind("b")
        assert resolved["cells"][0] is a
        assert resolved["cells"][1][0] is b
        assert resolved["cells"][1][1] == 2
        assert a in resolved["n"]

    def test_namedtuple_keeps_type(self, binder):
        resolved = binder.resolve(Point(metavar("x"), 1))
        assert isinstance(resolved, Point)
        assert resolved.x is binder.bind("x")

    def test_checkers_are_resolved(self, binder):
        checker = binder.resolve(in_any_order([metavar("a"), 1]))
        assert checker.expected == (binder.bind("a"), 1)

    def test_resolve_clause(self, binder):
        clause = provided(g, metavar("cell"), returns=metavar("result"), kwargs={"k": metavar("cell")})
        resolved = binder.resolve_clause(clause)
        assert resolved.args == (binder.bind("cell"),)
        assert resolved.kwargs["k"] is binder.bind("cell")
        assert resolved.returns is binder.bind("result")
        assert resolved.target is g
        # The declaration is untouched
        assert clause.args == (MetavarRef("cell"),)

    def test_resolve_assertion(self, binder):
        assertion = check(call(g, metavar("cell")), metavar("cell"))
        resolved = binder.resolve_assertion(assertion)
        assert resolved.actual.args == (binder.bind("cell"),)
        assert resolved.expected is binder.bind("cell")

    def test_callable_actual_left_alone(self, binder):
        actual = lambda: 1  # noqa: E731
        resolved = binder.resolve_assertion(check(actual, 1))
        assert resolved.actual is actual
