"""
factkit Provided Clauses

A provided clause declares how a collaborator is expected to be called
while a fact runs and what it returns:

    provided(neighbor_count, metavar("cell"), returns=3)

reads as "neighbor_count(...cell...) => 3".

Arguments are ArgMatchers: anything matches() accepts as an expected value
(literals, predicates, anything, exactly(f)). Return values are literals and
are never called or re-evaluated.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .checkers import describe_expected


@dataclass(frozen=True)
class ProvidedClause:
    """
    Expected interaction with a mockable function.

    Attributes:
        target: Mockable object or its function_id
        args: Positional ArgMatchers
        kwargs: Keyword ArgMatchers (names must equal the call's)
        returns: Literal value returned when the clause is selected
        times: Optional call-count expectation (int, range, or any expected
            value matched against the trigger count). None means "at least once".
        description: Optional human-readable note
    """
    target: Any
    args: tuple[Any, ...] = ()
    kwargs: Mapping[str, Any] = field(default_factory=dict)
    returns: Any = None
    times: Any = None
    description: Optional[str] = None

    @property
    def function_id(self) -> str:
        if isinstance(self.target, str):
            return self.target
        function_id = getattr(self.target, "function_id", None)
        if function_id:
            return function_id
        return getattr(self.target, "__qualname__", repr(self.target))

    @property
    def arity(self) -> int:
        return len(self.args)

    def describe_matchers(self) -> list[str]:
        described = [describe_expected(arg) for arg in self.args]
        described.extend(
            f"{name}={describe_expected(value)}"
            for name, value in sorted(self.kwargs.items())
        )
        return described

    def describe_times(self) -> Optional[str]:
        if self.times is None:
            return None
        if isinstance(self.times, range):
            return f"range({self.times.start}, {self.times.stop})"
        return describe_expected(self.times)

    def describe(self) -> str:
        """Render as 'fn(args) => returns'."""
        return f"{self.function_id}({', '.join(self.describe_matchers())}) => {self.returns!r}"

    def __repr__(self) -> str:
        return f"ProvidedClause({self.describe()})"


def provided(
    target: Any,
    *args: Any,
    returns: Any = None,
    times: Any = None,
    kwargs: Optional[Mapping[str, Any]] = None,
    description: Optional[str] = None,
) -> ProvidedClause:
    """
    Declare a provided clause.

    Args:
        target: Mockable function (or its function_id)
        *args: Positional ArgMatchers
        returns: Literal return value
        times: Optional call-count expectation
        kwargs: Keyword ArgMatchers
        description: Optional note

    Example:
        >>> provided(g, 2, returns=4)
        >>> provided(first_subfunction, is_odd, is_even, anything, returns=1)
        >>> provided(another_subfunction, exactly(inc), returns=10)
    """
    return ProvidedClause(
        target=target,
        args=tuple(args),
        kwargs=dict(kwargs or {}),
        returns=returns,
        times=times,
        description=description,
    )
