"""
factkit Checkers

Value comparison shared by assertion checking and argument matching.

Key components:
- matches(actual, expected): the single matching algorithm
- Checker: base class for reusable comparators
- Built-in checkers: anything, truthy, falsey, exactly(), in_any_order(),
  roughly(), contains(), throws()
- CheckerRegistry: open name -> checker mapping

Matching rules for matches(actual, expected):
    Checker instance       -> expected.matches(actual)
    callable (not a class) -> predicate, truthy result matches
    anything else          -> actual == expected

Truthiness follows the "anything but False or None" rule, so a predicate
returning 0 or "" still counts as a match.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, Union

from ..exceptions import (
    CheckerRegistrationError,
    FatalFactError,
    UnknownCheckerError,
)
from .enums import CheckerKind

logger = logging.getLogger(__name__)


def is_truthy(value: Any) -> bool:
    """Anything other than False or None."""
    return value is not None and value is not False


# =============================================================================
# Thrown Exceptions
# =============================================================================

@dataclass(frozen=True)
class ThrownException:
    """
    Stand-in actual value for an assertion whose expression raised.

    Only throws() matches it; every other expected value fails.
    """
    exception: BaseException

    def __repr__(self) -> str:
        return f"<raised {self.exception!r}>"


# =============================================================================
# Checker Base
# =============================================================================

class Checker(ABC):
    """Reusable, stateless comparator."""

    kind: CheckerKind

    @abstractmethod
    def matches(self, actual: Any) -> bool:
        """Return True if actual satisfies this checker."""

    @abstractmethod
    def describe(self) -> str:
        """Short description used in reports."""

    def map_values(self, fn: Callable[[Any], Any]) -> Checker:
        """Return a copy with fn applied to nested expected values."""
        return self

    def __repr__(self) -> str:
        return self.describe()


class EqualityCheck(Checker):
    """Structural equality against a literal value."""

    kind = CheckerKind.EQUALITY

    def __init__(self, expected: Any) -> None:
        self.expected = expected

    def matches(self, actual: Any) -> bool:
        return _equal(actual, self.expected)

    def describe(self) -> str:
        return repr(self.expected)

    def map_values(self, fn: Callable[[Any], Any]) -> Checker:
        return EqualityCheck(fn(self.expected))


class PredicateCheck(Checker):
    """Single-argument predicate; any truthy result is a match."""

    kind = CheckerKind.PREDICATE

    def __init__(self, predicate: Callable[[Any], Any], name: Optional[str] = None) -> None:
        if not callable(predicate):
            raise TypeError(f"predicate must be callable, got {predicate!r}")
        self.predicate = predicate
        self.name = name or _callable_name(predicate)

    def matches(self, actual: Any) -> bool:
        return _call_predicate(self.predicate, actual)

    def describe(self) -> str:
        return self.name


class ExactReferenceCheck(Checker):
    """
    Identity match.

    Two functions with the same behavior are still different values; use
    exactly() wherever a function is the expected value rather than a
    predicate.
    """

    kind = CheckerKind.EXACT_REFERENCE

    def __init__(self, target: Any) -> None:
        self.target = target

    def matches(self, actual: Any) -> bool:
        return actual is self.target

    def describe(self) -> str:
        return f"exactly({_value_name(self.target)})"

    def map_values(self, fn: Callable[[Any], Any]) -> Checker:
        return ExactReferenceCheck(fn(self.target))


class TruthyCheck(Checker):
    kind = CheckerKind.TRUTHY

    def matches(self, actual: Any) -> bool:
        return is_truthy(actual)

    def describe(self) -> str:
        return "truthy"


class FalseyCheck(Checker):
    kind = CheckerKind.FALSEY

    def matches(self, actual: Any) -> bool:
        return not is_truthy(actual)

    def describe(self) -> str:
        return "falsey"


class AnythingCheck(Checker):
    """Wildcard."""

    kind = CheckerKind.ANYTHING

    def matches(self, actual: Any) -> bool:
        return True

    def describe(self) -> str:
        return "anything"


class InAnyOrderCheck(Checker):
    """
    Order-insensitive collection match.

    Compares element multiplicities, not distinct elements: [3, 3, 1, 2]
    does not match in_any_order([1, 2, 3]). Expected elements may be
    checkers or predicates.
    """

    kind = CheckerKind.COMPOSITE

    def __init__(self, expected: Iterable[Any]) -> None:
        self.expected = tuple(expected)

    def matches(self, actual: Any) -> bool:
        if not _is_collection(actual):
            return False
        actual_items = list(actual)
        if len(actual_items) != len(self.expected):
            return False
        return _max_pairing(actual_items, self.expected) == len(self.expected)

    def describe(self) -> str:
        return f"in_any_order({list(self.expected)!r})"

    def map_values(self, fn: Callable[[Any], Any]) -> Checker:
        return InAnyOrderCheck(fn(item) for item in self.expected)


class RoughlyCheck(Checker):
    """Numeric match within an absolute tolerance."""

    kind = CheckerKind.ROUGHLY

    def __init__(self, expected: float, delta: Optional[float] = None) -> None:
        self.expected = expected
        # Default tolerance is one thousandth of the expected value
        self.delta = abs(expected) * 0.001 if delta is None else delta

    def matches(self, actual: Any) -> bool:
        if isinstance(actual, bool) or not isinstance(actual, (int, float)):
            return False
        return abs(actual - self.expected) <= self.delta

    def describe(self) -> str:
        return f"roughly({self.expected!r}, {self.delta!r})"


class ContainsCheck(Checker):
    """
    Containment.

    - str actual: each expected item is a substring
    - dict actual: expected dict items are present with matching values
    - other collections: each expected item matches a distinct element
    """

    kind = CheckerKind.COMPOSITE

    def __init__(self, items: Iterable[Any]) -> None:
        self.items = tuple(items)

    def matches(self, actual: Any) -> bool:
        if isinstance(actual, str):
            return all(isinstance(item, str) and item in actual for item in self.items)
        if isinstance(actual, dict):
            for item in self.items:
                if not isinstance(item, dict):
                    return False
                for key, expected in item.items():
                    if key not in actual or not matches(actual[key], expected):
                        return False
            return True
        if not _is_collection(actual):
            return False
        return _max_pairing(list(actual), self.items) == len(self.items)

    def describe(self) -> str:
        inner = ", ".join(repr(item) for item in self.items)
        return f"contains({inner})"

    def map_values(self, fn: Callable[[Any], Any]) -> Checker:
        return ContainsCheck(fn(item) for item in self.items)


class ThrowsCheck(Checker):
    """
    Matches an assertion whose expression raised.

    message, when given, is itself an expected value matched against str()
    of the exception (a literal, predicate, or checker).
    """

    kind = CheckerKind.THROWS

    def __init__(
        self,
        exc_type: type[BaseException] = Exception,
        message: Any = None,
    ) -> None:
        self.exc_type = exc_type
        self.message = message

    def matches(self, actual: Any) -> bool:
        if not isinstance(actual, ThrownException):
            return False
        if not isinstance(actual.exception, self.exc_type):
            return False
        if self.message is None:
            return True
        return matches(str(actual.exception), self.message)

    def describe(self) -> str:
        if self.message is None:
            return f"throws({self.exc_type.__name__})"
        return f"throws({self.exc_type.__name__}, {describe_expected(self.message)})"

    def map_values(self, fn: Callable[[Any], Any]) -> Checker:
        return ThrowsCheck(self.exc_type, fn(self.message))


# =============================================================================
# Checker Constructors
# =============================================================================

anything = AnythingCheck()
truthy = TruthyCheck()
falsey = FalseyCheck()


def exactly(target: Any) -> ExactReferenceCheck:
    """Match only the very same object (used for function values)."""
    return ExactReferenceCheck(target)


def in_any_order(expected: Iterable[Any]) -> InAnyOrderCheck:
    """Match a collection with the same elements and multiplicities."""
    return InAnyOrderCheck(expected)


def roughly(expected: float, delta: Optional[float] = None) -> RoughlyCheck:
    """Match a number within delta of expected."""
    return RoughlyCheck(expected, delta)


def contains(*items: Any) -> ContainsCheck:
    """Match a container that includes every item."""
    return ContainsCheck(items)


def throws(exc_type: type[BaseException] = Exception, message: Any = None) -> ThrowsCheck:
    """Match an expression that raised exc_type."""
    return ThrowsCheck(exc_type, message)


# =============================================================================
# Matching
# =============================================================================

def matches(actual: Any, expected: Any) -> bool:
    """
    Check an actual value against an expected value.

    Used both for assertion results and for provided-clause arguments.

    Args:
        actual: The value produced (or passed)
        expected: A literal, a single-argument predicate, or a Checker

    Returns:
        True if actual satisfies expected
    """
    if isinstance(actual, ThrownException) and not isinstance(expected, ThrowsCheck):
        return False
    if isinstance(expected, Checker):
        return _call_checker(expected, actual)
    if _is_predicate(expected):
        return _call_predicate(expected, actual)
    return _equal(actual, expected)


def describe_expected(expected: Any) -> str:
    """Describe an expected value the way reports show it."""
    if isinstance(expected, Checker):
        return expected.describe()
    if _is_predicate(expected):
        return _callable_name(expected)
    return repr(expected)


def as_checker(expected: Any) -> Checker:
    """Wrap an expected value in the Checker that matches() would apply."""
    if isinstance(expected, Checker):
        return expected
    if _is_predicate(expected):
        return PredicateCheck(expected)
    return EqualityCheck(expected)


def _is_predicate(value: Any) -> bool:
    # Classes are callable but compare as literals
    return callable(value) and not isinstance(value, type)


def _call_predicate(predicate: Callable[[Any], Any], actual: Any) -> bool:
    try:
        return is_truthy(predicate(actual))
    except FatalFactError:
        raise
    except Exception as e:
        logger.debug(
            "Predicate %s raised %r; treating as no match",
            _callable_name(predicate), e,
        )
        return False


def _call_checker(checker: Checker, actual: Any) -> bool:
    try:
        return is_truthy(checker.matches(actual))
    except FatalFactError:
        raise
    except Exception as e:
        logger.debug(
            "Checker %s raised %r; treating as no match",
            type(checker).__name__, e,
        )
        return False


def _equal(actual: Any, expected: Any) -> bool:
    try:
        return bool(actual == expected)
    except (TypeError, ValueError):
        # Comparison failed (incompatible types)
        return False


def _is_collection(value: Any) -> bool:
    if isinstance(value, (str, bytes, dict)):
        return False
    try:
        iter(value)
    except TypeError:
        return False
    return True


def _max_pairing(actuals: list[Any], expecteds: tuple[Any, ...]) -> int:
    """
    Size of the largest one-to-one pairing of expected to actual elements.

    Expected elements can be predicates that accept several actual elements,
    so a greedy pass can miss a valid pairing; augmenting paths cannot.
    """
    candidates = [
        [i for i, a in enumerate(actuals) if matches(a, e)]
        for e in expecteds
    ]
    owner: dict[int, int] = {}

    def assign(e_index: int, visited: set[int]) -> bool:
        for a_index in candidates[e_index]:
            if a_index in visited:
                continue
            visited.add(a_index)
            if a_index not in owner or assign(owner[a_index], visited):
                owner[a_index] = e_index
                return True
        return False

    return sum(1 for e_index in range(len(expecteds)) if assign(e_index, set()))


def _callable_name(fn: Any) -> str:
    name = getattr(fn, "function_id", None) or getattr(fn, "__name__", None)
    return name if name else repr(fn)


def _value_name(value: Any) -> str:
    if callable(value):
        return _callable_name(value)
    return repr(value)


# =============================================================================
# Checker Registry
# =============================================================================

CheckerFactory = Callable[..., Checker]


@dataclass
class CheckerRegistry:
    """
    Open mapping from checker name to a checker.

    Entries are either ready checkers (truthy, anything, or a plain
    predicate wrapped as PredicateCheck) or factories taking arguments
    (exactly, in_any_order, ...). New checkers can be registered without
    touching the matching core.

    Usage:
        registry = CheckerRegistry.with_defaults()
        registry.register("even", lambda n: n % 2 == 0)
        registry.register_factory("between", lambda lo, hi: PredicateCheck(
            lambda v: lo <= v <= hi, name=f"between({lo}, {hi})"))

        registry.build("in_any_order", [1, 2, 3])
    """

    _checkers: dict[str, Checker] = field(default_factory=dict)
    _factories: dict[str, CheckerFactory] = field(default_factory=dict)

    @classmethod
    def with_defaults(cls) -> CheckerRegistry:
        registry = cls()
        registry.register("anything", anything)
        registry.register("truthy", truthy)
        registry.register("falsey", falsey)
        registry.register_factory("exactly", exactly)
        registry.register_factory("in_any_order", in_any_order)
        registry.register_factory("roughly", roughly)
        registry.register_factory("contains", contains)
        registry.register_factory("throws", throws)
        return registry

    def register(
        self,
        name: str,
        checker: Union[Checker, Callable[[Any], Any]],
        replace: bool = False,
    ) -> Checker:
        """
        Register a ready checker or a single-argument predicate.

        Raises:
            CheckerRegistrationError: If name is taken and replace is False
        """
        self._check_free(name, replace)
        if not isinstance(checker, Checker):
            checker = PredicateCheck(checker, name=name)
        self._factories.pop(name, None)
        self._checkers[name] = checker
        return checker

    def register_factory(
        self,
        name: str,
        factory: CheckerFactory,
        replace: bool = False,
    ) -> None:
        """Register a parameterized checker factory."""
        self._check_free(name, replace)
        if not callable(factory):
            raise CheckerRegistrationError(
                message=f"Checker factory for '{name}' is not callable",
                details={"name": name},
            )
        self._checkers.pop(name, None)
        self._factories[name] = factory

    def _check_free(self, name: str, replace: bool) -> None:
        if not replace and name in self:
            raise CheckerRegistrationError(
                message=f"Checker '{name}' is already registered",
                details={"name": name},
            )

    def get(self, name: str) -> Union[Checker, CheckerFactory]:
        """Get the checker or factory registered under name."""
        if name in self._checkers:
            return self._checkers[name]
        if name in self._factories:
            return self._factories[name]
        raise UnknownCheckerError(
            message=f"Unknown checker '{name}'",
            details={"name": name, "available": self.names()},
        )

    def build(self, name: str, *args: Any, **kwargs: Any) -> Checker:
        """
        Build a checker by name.

        Ready checkers take no arguments; factories receive args/kwargs.
        """
        entry = self.get(name)
        if isinstance(entry, Checker):
            if args or kwargs:
                raise UnknownCheckerError(
                    message=f"Checker '{name}' takes no arguments",
                    details={"name": name},
                )
            return entry
        checker = entry(*args, **kwargs)
        if not isinstance(checker, Checker):
            checker = as_checker(checker)
        return checker

    def names(self) -> list[str]:
        return sorted(set(self._checkers) | set(self._factories))

    def __contains__(self, name: object) -> bool:
        return name in self._checkers or name in self._factories


default_registry = CheckerRegistry.with_defaults()
