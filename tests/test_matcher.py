"""
Tests for factkit argument matching

Tests cover:
- Arity and keyword-name eligibility
- First-declared clause wins
- Signature checks against real implementations
"""
from factkit.engine import clause_accepts, select_clause, signature_mismatch
from factkit.models import anything, exactly, provided

from tests.fixtures.sweet import (
    another_subfunction,
    first_subfunction,
    g,
    inc,
    increment,
    is_even,
    is_odd,
    lookup,
    neighbor_count,
)


class TestClauseAccepts:
    """Tests for clause_accepts."""

    def test_literal_arguments(self):
        clause = provided(g, 2, returns=4)
        assert clause_accepts(clause, (2,), {})
        assert not clause_accepts(clause, (3,), {})

    def test_predicates_and_wildcards(self):
        clause = provided(first_subfunction, is_odd, is_even, anything, returns=1)
        assert clause_accepts(clause, (1, 2, ("a", "b", "c")), {})
        assert not clause_accepts(clause, (2, 2, None), {})

    def test_arity_must_match(self):
        clause = provided(g, anything, returns=4)
        assert not clause_accepts(clause, (), {})
        assert not clause_accepts(clause, (1, 2), {})

    def test_keyword_names_must_match(self):
        clause = provided(lookup, "b", kwargs={"default": 0}, returns=5)
        assert clause_accepts(clause, ("b",), {"default": 0})
        assert not clause_accepts(clause, ("b",), {})
        assert not clause_accepts(clause, ("b",), {"default": 0, "extra": 1})
        assert not clause_accepts(clause, ("b",), {"default": 1})

    def test_function_arguments_need_exactly(self):
        clause = provided(another_subfunction, exactly(inc), returns=10)
        assert clause_accepts(clause, (inc,), {})
        assert not clause_accepts(clause, (increment,), {})


class TestSelectClause:
    """Tests for select_clause."""

    def test_first_match_wins(self):
        clauses = [
            provided(g, is_odd, returns="odd"),
            provided(g, anything, returns="any"),
        ]
        assert select_clause(clauses, (3,), {}) == 0
        assert select_clause(clauses, (4,), {}) == 1

    def test_no_match(self):
        clauses = [provided(g, 2, returns=4)]
        assert select_clause(clauses, (5,), {}) is None

    def test_empty(self):
        assert select_clause([], (1,), {}) is None


class TestSignatureMismatch:
    """Tests for signature_mismatch."""

    def test_fitting_clause(self):
        assert signature_mismatch(provided(g, 1), g.implementation) is None
        assert signature_mismatch(
            provided(lookup, "a", kwargs={"default": 1}), lookup.implementation
        ) is None

    def test_too_many_arguments(self):
        problem = signature_mismatch(provided(g, 1, 2), g.implementation)
        assert problem is not None
        assert "tests.fixtures.sweet.g" in problem

    def test_unknown_keyword(self):
        assert signature_mismatch(provided(g, 1, kwargs={"nope": 1}), g.implementation)

    def test_placeholder_accepts_any_arity(self):
        assert signature_mismatch(provided(neighbor_count, 1, 2, 3), None) is None
