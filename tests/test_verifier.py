"""
Tests for factkit Verification Engine

Tests cover:
- Default "at least once" expectations
- times as int, range, and predicate
- Declaration order of results
- UnsatisfiedExpectation messages
"""
import pytest

from factkit.engine import StubBinding, times_satisfied, unsatisfied, verify
from factkit.models import anything, provided

from tests.fixtures.sweet import g, neighbor_count


def make_binding(*clauses, positions=()):
    """Create a StubBinding for g with the given clauses."""
    return StubBinding(g.function_id, tuple(clauses), positions=tuple(positions))


class TestTimesSatisfied:
    """Tests for times_satisfied."""

    @pytest.mark.parametrize("times,count,expected", [
        (None, 0, False),
        (None, 1, True),
        (None, 5, True),
        (0, 0, True),
        (2, 2, True),
        (2, 3, False),
        (range(1, 3), 2, True),
        (range(1, 3), 3, False),
    ])
    def test_counts(self, times, count, expected):
        assert times_satisfied(times, count) is expected

    def test_predicate(self):
        assert times_satisfied(lambda n: n >= 2, 2)
        assert not times_satisfied(lambda n: n >= 2, 1)


class TestVerify:
    """Tests for verify()."""

    def test_untriggered_clause_is_unsatisfied(self):
        binding = make_binding(provided(g, 2, returns=4))
        [result] = verify([binding])
        assert result.function_id == "tests.fixtures.sweet.g"
        assert result.matchers == ["2"]
        assert result.arg_matchers == (2,)
        assert result.kwarg_matchers == {}
        assert result.triggered is False
        assert result.trigger_count == 0
        assert result.satisfied is False

    def test_triggered_clause_is_satisfied(self):
        binding = make_binding(provided(g, 2, returns=4), provided(g, 3, returns=7))
        binding.recorder.record(0, (2,), {})
        results = verify([binding])
        assert [r.satisfied for r in results] == [True, False]

    def test_times(self):
        binding = make_binding(provided(g, anything, returns=1, times=2))
        binding.recorder.record(0, (1,), {})
        [result] = verify([binding])
        assert result.satisfied is False
        assert result.times == "2"
        binding.recorder.record(0, (1,), {})
        assert verify([binding])[0].satisfied is True

    def test_zero_times_forbids_calls(self):
        binding = make_binding(provided(g, 1, returns=1, times=0))
        assert verify([binding])[0].satisfied is True
        binding.recorder.record(0, (1,), {})
        assert verify([binding])[0].satisfied is False

    def test_results_follow_declaration_order(self):
        first = make_binding(provided(g, 1, returns=1), provided(g, 2, returns=2), positions=(0, 2))
        second = StubBinding(
            neighbor_count.function_id,
            (provided(neighbor_count, anything, returns=3),),
            positions=(1,),
        )
        results = verify([first, second])
        assert [r.clause_index for r in results] == [0, 1, 2]
        assert [r.function_id for r in results] == [
            "tests.fixtures.sweet.g",
            "tests.fixtures.sweet.neighbor_count",
            "tests.fixtures.sweet.g",
        ]


class TestUnsatisfiedMessages:
    """Tests for UnsatisfiedExpectation."""

    def test_at_least_once_message(self):
        binding = make_binding(provided(g, 2, returns=4))
        [expectation] = unsatisfied([binding])
        assert expectation.message == "(tests.fixtures.sweet.g 2) should be called at least once."

    def test_times_message(self):
        binding = make_binding(provided(g, 2, returns=4, times=3))
        binding.recorder.record(0, (2,), {})
        [expectation] = unsatisfied([binding])
        assert expectation.message == (
            "(tests.fixtures.sweet.g 2) should be called 3 times, was called 1."
        )

    def test_no_arguments(self):
        binding = StubBinding(neighbor_count.function_id, (provided(neighbor_count, returns=1),))
        [expectation] = unsatisfied([binding])
        assert expectation.message == "(tests.fixtures.sweet.neighbor_count) should be called at least once."
