"""
factkit Result Models

Structured outcome of one fact evaluation, for external runners.

- AssertionResult: pass/fail of one assertion (AssertionFailure when failed)
- ExpectationResult: whether one provided clause was satisfied
- UnsatisfiedExpectation: a provided clause that was never (or not enough) called
- ErrorDescriptor: the fatal error that aborted a fact, if any
- FactResult: everything above, plus nested fact results and state trail
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from ..exceptions import FactKitError
from .enums import FactState, FailureKind


@dataclass
class AssertionResult:
    """Outcome of checking one assertion."""
    index: int
    passed: bool
    expected: Any
    actual: Any
    checker_description: str
    description: Optional[str] = None

    @property
    def failure_kind(self) -> Optional[FailureKind]:
        return None if self.passed else FailureKind.ASSERTION_FAILURE

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "passed": self.passed,
            "expected": repr(self.expected),
            "actual": repr(self.actual),
            "checker_description": self.checker_description,
            "description": self.description,
        }


@dataclass
class UnsatisfiedExpectation:
    """
    A provided clause whose call expectation was not met.

    matchers holds the report descriptions; arg_matchers and kwarg_matchers
    hold the matcher values themselves.
    """
    function_id: str
    matchers: list[str]
    trigger_count: int = 0
    times: Optional[str] = None
    arg_matchers: tuple[Any, ...] = ()
    kwarg_matchers: dict[str, Any] = field(default_factory=dict)

    @property
    def message(self) -> str:
        call_text = f"({self.function_id} {' '.join(self.matchers)})".replace(" )", ")")
        if self.times is None:
            return f"{call_text} should be called at least once."
        return f"{call_text} should be called {self.times} times, was called {self.trigger_count}."


@dataclass
class ExpectationResult:
    """Verification outcome of one provided clause."""
    function_id: str
    clause_index: int
    matchers: list[str]
    triggered: bool
    trigger_count: int
    satisfied: bool
    times: Optional[str] = None
    arg_matchers: tuple[Any, ...] = ()
    kwarg_matchers: dict[str, Any] = field(default_factory=dict)

    @property
    def failure_kind(self) -> Optional[FailureKind]:
        return None if self.satisfied else FailureKind.UNSATISFIED_EXPECTATION

    def as_unsatisfied(self) -> UnsatisfiedExpectation:
        return UnsatisfiedExpectation(
            function_id=self.function_id,
            matchers=list(self.matchers),
            trigger_count=self.trigger_count,
            times=self.times,
            arg_matchers=self.arg_matchers,
            kwarg_matchers=dict(self.kwarg_matchers),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "function_id": self.function_id,
            "clause_index": self.clause_index,
            "matchers": list(self.matchers),
            "triggered": self.triggered,
            "trigger_count": self.trigger_count,
            "satisfied": self.satisfied,
            "times": self.times,
        }


_FAILURE_KINDS = {
    "UnexpectedCall": FailureKind.UNEXPECTED_CALL,
    "UndefinedFunctionCalled": FailureKind.UNDEFINED_FUNCTION_CALLED,
    "MalformedDeclaration": FailureKind.MALFORMED_DECLARATION,
    "FactBodyError": FailureKind.BODY_ERROR,
    "StubLeakError": FailureKind.STUB_LEAK,
}


@dataclass
class ErrorDescriptor:
    """Fatal error that aborted a fact."""
    kind: str
    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: FactKitError) -> ErrorDescriptor:
        return cls(
            kind=type(exc).__name__,
            code=exc.code,
            message=exc.message,
            details=dict(exc.details),
        )

    @property
    def failure_kind(self) -> Optional[FailureKind]:
        return _FAILURE_KINDS.get(self.kind)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "code": self.code,
            "message": self.message,
            "details": {k: repr(v) for k, v in self.details.items()},
        }


@dataclass
class FactResult:
    """
    Outcome of evaluating one fact.

    A fact passes when every assertion passed, every provided clause was
    satisfied, no fatal error occurred, and every nested fact passed.
    """
    name: str
    assertion_results: list[AssertionResult] = field(default_factory=list)
    expectation_results: list[ExpectationResult] = field(default_factory=list)
    fatal_error: Optional[ErrorDescriptor] = None
    nested: list[FactResult] = field(default_factory=list)
    states: list[FactState] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return (
            self.fatal_error is None
            and all(r.passed for r in self.assertion_results)
            and all(r.satisfied for r in self.expectation_results)
            and all(n.passed for n in self.nested)
        )

    @property
    def aborted(self) -> bool:
        return FactState.ABORTED in self.states

    @property
    def assertion_failures(self) -> list[AssertionResult]:
        return [r for r in self.assertion_results if not r.passed]

    @property
    def unsatisfied_expectations(self) -> list[UnsatisfiedExpectation]:
        return [r.as_unsatisfied() for r in self.expectation_results if not r.satisfied]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "passed": self.passed,
            "assertion_results": [r.to_dict() for r in self.assertion_results],
            "expectation_results": [r.to_dict() for r in self.expectation_results],
            "fatal_error": self.fatal_error.to_dict() if self.fatal_error else None,
            "nested": [n.to_dict() for n in self.nested],
            "states": [s.value for s in self.states],
        }

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)
