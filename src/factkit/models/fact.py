"""
factkit Fact Definitions

Data-first declarations of facts.

Key components:
- DeferredCall: a call expression evaluated inside the fact (call())
- Assertion: (actual, expected) pair (check())
- FactDefinition: assertions + provided clauses (fact() / facts())

Example:
    definition = fact(
        "g-adder sums collaborator results",
        check(call(g_adder, 2, 3), 11),
        provided=[
            provided(g, 2, returns=4),
            provided(g, 3, returns=7),
        ],
    )

An assertion's actual may be:
- a DeferredCall: arguments are resolved (metavariables) then called
- a zero-argument callable: called as is
- a one-argument callable: called with the FactScope, which exposes
  metavariables, shared bindings, and the body's result
"""
from __future__ import annotations

import inspect
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable, Mapping, Optional

from .checkers import describe_expected
from .clauses import ProvidedClause


# =============================================================================
# Deferred Calls
# =============================================================================

class DeferredCall:
    """A function call to be made while the fact runs."""

    def __init__(self, fn: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        if not callable(fn):
            raise TypeError(f"call() needs a callable, got {fn!r}")
        self.fn = fn
        self.args = args
        self.kwargs = kwargs

    def __call__(self) -> Any:
        return self.fn(*self.args, **self.kwargs)

    def map_values(self, mapper: Callable[[Any], Any]) -> DeferredCall:
        return DeferredCall(
            self.fn,
            tuple(mapper(arg) for arg in self.args),
            {name: mapper(value) for name, value in self.kwargs.items()},
        )

    def describe(self) -> str:
        name = getattr(self.fn, "function_id", None) or getattr(self.fn, "__name__", repr(self.fn))
        parts = [repr(arg) for arg in self.args]
        parts.extend(f"{k}={v!r}" for k, v in self.kwargs.items())
        return f"{name}({', '.join(parts)})"

    def __repr__(self) -> str:
        return f"call({self.describe()})"


def call(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> DeferredCall:
    """Declare a call evaluated inside the fact."""
    return DeferredCall(fn, tuple(args), dict(kwargs))


def accepts_scope(fn: Callable[..., Any]) -> bool:
    """True if fn takes exactly one positional parameter (the FactScope)."""
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return False
    positional = [
        p for p in signature.parameters.values()
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
        and p.default is p.empty
    ]
    return len(positional) == 1


# =============================================================================
# Assertions
# =============================================================================

@dataclass(frozen=True)
class Assertion:
    """
    One (actual, expected) pair.

    Attributes:
        actual: DeferredCall or callable producing the actual value
        expected: Literal, predicate, or Checker
        description: Optional label for reports
    """
    actual: Any
    expected: Any
    description: Optional[str] = None

    def describe(self) -> str:
        if self.description:
            return self.description
        if isinstance(self.actual, DeferredCall):
            actual = self.actual.describe()
        else:
            actual = getattr(self.actual, "__name__", repr(self.actual))
        return f"{actual} => {describe_expected(self.expected)}"


def check(actual: Any, expected: Any, description: Optional[str] = None) -> Assertion:
    """Declare an assertion: actual => expected."""
    return Assertion(actual=actual, expected=expected, description=description)


# =============================================================================
# Fact Definition
# =============================================================================

@dataclass(frozen=True)
class FactDefinition:
    """
    A fact: assertions that hold provided its collaborators behave as declared.

    Attributes:
        name: Fact name (the doc string of the fact)
        assertions: Assertions, checked top to bottom
        provided: Provided clauses, active for the whole fact
        body: Optional callable run first with the FactScope; its return
            value is available to assertions as scope.result. Nested facts
            are usually evaluated from here.
        bindings: Shared named values, visible to nested facts
        description: Optional longer description
        tags: Free-form labels for external runners
    """
    name: str
    assertions: tuple[Assertion, ...] = ()
    provided: tuple[ProvidedClause, ...] = ()
    body: Optional[Callable[..., Any]] = None
    bindings: Mapping[str, Any] = field(default_factory=dict)
    description: Optional[str] = None
    tags: frozenset[str] = frozenset()

    def with_assertions(self, *assertions: Assertion) -> FactDefinition:
        return replace(self, assertions=self.assertions + tuple(assertions))

    def with_provided(self, *clauses: ProvidedClause) -> FactDefinition:
        return replace(self, provided=self.provided + tuple(clauses))

    def __repr__(self) -> str:
        return f"FactDefinition({self.name!r}, assertions={len(self.assertions)}, provided={len(self.provided)})"


def fact(
    name: str,
    *assertions: Assertion,
    provided: Iterable[ProvidedClause] = (),
    body: Optional[Callable[..., Any]] = None,
    bindings: Optional[Mapping[str, Any]] = None,
    description: Optional[str] = None,
    tags: Iterable[str] = (),
) -> FactDefinition:
    """
    Declare a fact.

    Example:
        >>> fact("arithmetic", check(lambda: 1 + 1, 2), check(lambda: 1 + 0, 1))
    """
    return FactDefinition(
        name=name,
        assertions=tuple(assertions),
        provided=tuple(provided),
        body=body,
        bindings=dict(bindings or {}),
        description=description,
        tags=frozenset(tags),
    )


# Alias for those who prefer the plural
facts = fact
