"""
factkit Verification Engine

After a fact's assertions have been checked, every provided clause is
verified against its trigger count:

- no times expectation: the clause must have been selected at least once
- int: exactly that many times
- range: a count inside the range
- anything else: matched against the count like an expected value
  (e.g. a predicate such as lambda n: n >= 2)
"""
from __future__ import annotations

import logging
from typing import Any, Iterable

from ..models import ExpectationResult, UnsatisfiedExpectation, matches
from .mock_registry import StubBinding

logger = logging.getLogger(__name__)


def times_satisfied(times: Any, count: int) -> bool:
    """Check a trigger count against a clause's times expectation."""
    if times is None:
        return count > 0
    if isinstance(times, int) and not isinstance(times, bool):
        return count == times
    if isinstance(times, range):
        return count in times
    return matches(count, times)


def verify(bindings: Iterable[StubBinding]) -> list[ExpectationResult]:
    """
    Verify every clause of the given bindings.

    Returns:
        One ExpectationResult per clause, in the fact's declaration order
    """
    positioned: list[tuple[int, ExpectationResult]] = []
    for binding in bindings:
        for index, clause in enumerate(binding.clauses):
            count = binding.recorder.count(index)
            satisfied = times_satisfied(clause.times, count)
            result = ExpectationResult(
                function_id=binding.function_id,
                clause_index=binding.positions[index],
                matchers=clause.describe_matchers(),
                triggered=count > 0,
                trigger_count=count,
                satisfied=satisfied,
                times=clause.describe_times(),
                arg_matchers=tuple(clause.args),
                kwarg_matchers=dict(clause.kwargs),
            )
            if not satisfied:
                logger.debug(
                    "Unsatisfied expectation: %s",
                    result.as_unsatisfied().message,
                    extra={"function_id": binding.function_id},
                )
            positioned.append((binding.positions[index], result))

    positioned.sort(key=lambda item: item[0])
    return [result for _, result in positioned]


def unsatisfied(bindings: Iterable[StubBinding]) -> list[UnsatisfiedExpectation]:
    """Clauses of the given bindings whose call expectation was not met."""
    return [r.as_unsatisfied() for r in verify(bindings) if not r.satisfied]
