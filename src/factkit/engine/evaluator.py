"""
factkit Fact Evaluator

Runs one fact through its lifecycle and produces a FactResult.

Lifecycle:
    INIT -> METAVARS_BOUND -> MOCKS_INSTALLED -> BODY_EXECUTING
    -> RESULTS_CHECKED -> EXPECTATIONS_VERIFIED -> MOCKS_RESTORED -> REPORTED

A fatal error (UnexpectedCall, UndefinedFunctionCalled, an exception from
the body, a stub left installed by code under test) moves the fact to
ABORTED: remaining assertions are skipped, expectations are not verified,
mocks are still restored. A malformed declaration aborts before anything
is installed and passes through MOCKS_RESTORED with nothing to restore.

Assertion failures and unsatisfied expectations are recoverable: every
assertion is checked and every clause verified, and all failures reported.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from ..config import FACTKIT_LOG_RESULTS
from ..exceptions import (
    FactBodyError,
    FactKitError,
    FatalFactError,
    MalformedDeclaration,
    StubLeakError,
)
from ..models import (
    FACT_TRANSITIONS,
    Assertion,
    AssertionResult,
    DeferredCall,
    ErrorDescriptor,
    FactDefinition,
    FactResult,
    FactState,
    ProvidedClause,
    ThrownException,
    describe_expected,
    matches,
)
from ..models.fact import accepts_scope
from .binder import MetavarBinder
from .mock_registry import active_context, clause_problems, leaked_ids, stub_scope
from .scope import FactScope, current_scope
from .verifier import verify

logger = logging.getLogger(__name__)


class _StateTrail:
    """Records lifecycle states, rejecting transitions the lifecycle forbids."""

    def __init__(self, fact_name: str) -> None:
        self.fact_name = fact_name
        self.states: list[FactState] = [FactState.INIT]

    @property
    def current(self) -> FactState:
        return self.states[-1]

    def advance(self, state: FactState) -> None:
        if state not in FACT_TRANSITIONS[self.current]:
            raise FactKitError(
                message=f"Invalid fact state transition {self.current.value} -> {state.value}",
                code="FK_INVALID_TRANSITION",
                fact_name=self.fact_name,
            )
        self.states.append(state)
        logger.debug(
            "Fact %r -> %s", self.fact_name, state.value,
            extra={"fact": self.fact_name, "state": state.value},
        )


@dataclass
class FactEvaluator:
    """
    Evaluates fact definitions.

    Usage:
        evaluator = FactEvaluator()
        result = evaluator.evaluate(definition)
        if not result.passed:
            for failure in result.assertion_failures: ...

    Facts evaluated while another fact runs (from its body or an assertion)
    are nested: they inherit the enclosing fact's bindings and stubs, and
    their results are attached to the enclosing result.
    """
    log_results: bool = FACTKIT_LOG_RESULTS

    def validate(self, definition: FactDefinition) -> list[str]:
        """
        Check a declaration's structure without running it.

        Returns:
            List of problems (empty if executable)
        """
        problems = []
        if not isinstance(definition.name, str) or not definition.name.strip():
            problems.append("fact name must be a non-empty string")
        if definition.body is not None and not callable(definition.body):
            problems.append(f"body must be callable, got {definition.body!r}")
        for index, assertion in enumerate(definition.assertions):
            if not isinstance(assertion, Assertion):
                problems.append(f"assertion {index} is not an Assertion: {assertion!r}")
        for index, clause in enumerate(definition.provided):
            if not isinstance(clause, ProvidedClause):
                problems.append(f"provided clause {index} is not a ProvidedClause: {clause!r}")
                continue
            problems.extend(clause_problems(clause))
        return problems

    def evaluate(self, definition: FactDefinition) -> FactResult:
        """
        Evaluate one fact.

        Fatal errors are reported in the result, never raised.

        Args:
            definition: The fact to run

        Returns:
            FactResult with assertion, expectation, and nested results
        """
        trail = _StateTrail(definition.name)
        result = FactResult(name=definition.name, states=trail.states)
        parent = current_scope()

        problems = self.validate(definition)
        if problems:
            exc = MalformedDeclaration(
                message=f"Malformed fact declaration: {'; '.join(problems)}",
                details={"problems": problems},
                fact_name=definition.name,
            )
            trail.advance(FactState.ABORTED)
            result.fatal_error = ErrorDescriptor.from_exception(exc)
            trail.advance(FactState.MOCKS_RESTORED)
            logger.warning(
                "Fact %r not run: %s", definition.name, exc.message,
                extra={"fact": definition.name, "code": exc.code},
            )
            trail.advance(FactState.REPORTED)
            return self._report(result, parent)

        binder = MetavarBinder()
        scope = FactScope(definition, binder, parent)
        scope.activate()
        try:
            try:
                clauses = [binder.resolve_clause(clause) for clause in definition.provided]
                assertions = [binder.resolve_assertion(a) for a in definition.assertions]
                trail.advance(FactState.METAVARS_BOUND)

                with stub_scope(clauses, owner=scope) as bindings:
                    scope.mock_context = active_context()
                    trail.advance(FactState.MOCKS_INSTALLED)
                    trail.advance(FactState.BODY_EXECUTING)
                    self._run_body(scope)
                    for index, assertion in enumerate(assertions):
                        result.assertion_results.append(self._check(index, assertion, scope))
                    trail.advance(FactState.RESULTS_CHECKED)
                    result.expectation_results = verify(bindings)
                    trail.advance(FactState.EXPECTATIONS_VERIFIED)
            except FactKitError as exc:
                if FactState.ABORTED not in FACT_TRANSITIONS[trail.current]:
                    raise
                # a fatal error swallowed earlier takes precedence
                first = scope.fatal_errors[0] if scope.fatal_errors else exc
                if first.fact_name is None:
                    first.fact_name = definition.name
                result.fatal_error = ErrorDescriptor.from_exception(first)
                trail.advance(FactState.ABORTED)
                logger.warning(
                    "Fact %r aborted: %s", definition.name, first.message,
                    extra={"fact": definition.name, "code": first.code},
                )
            trail.advance(FactState.MOCKS_RESTORED)
        finally:
            scope.deactivate()

        result.nested = list(scope.nested_results)
        trail.advance(FactState.REPORTED)
        return self._report(result, parent)

    def _run_body(self, scope: FactScope) -> None:
        body = scope.definition.body
        if body is None:
            return
        try:
            scope.result = body(scope) if accepts_scope(body) else body()
        except FatalFactError:
            raise
        except Exception as e:
            raise FactBodyError(
                message=f"Fact body raised {type(e).__name__}: {e}",
                details={"exception": e},
                fact_name=scope.name,
            ) from e
        self._raise_swallowed(scope)

    def _actual_value(self, actual: Any, scope: FactScope) -> Any:
        try:
            if isinstance(actual, DeferredCall):
                return actual()
            if callable(actual):
                return actual(scope) if accepts_scope(actual) else actual()
            return actual
        except FatalFactError:
            raise
        except Exception as e:
            return ThrownException(e)

    def _check(self, index: int, assertion: Assertion, scope: FactScope) -> AssertionResult:
        value = self._actual_value(assertion.actual, scope)
        self._raise_swallowed(scope)
        passed = matches(value, assertion.expected)
        self._raise_swallowed(scope)
        if not passed:
            logger.debug(
                "Assertion %d of %r failed: %s, got %r",
                index, scope.name, assertion.describe(), value,
                extra={"fact": scope.name},
            )
        return AssertionResult(
            index=index,
            passed=passed,
            expected=assertion.expected,
            actual=value,
            checker_description=describe_expected(assertion.expected),
            description=assertion.description,
        )

    @staticmethod
    def _raise_swallowed(scope: FactScope) -> None:
        # fatal errors caught by code under test still abort the fact
        if scope.fatal_errors:
            raise scope.fatal_errors[0]
        leaked = leaked_ids(scope.mock_context)
        if leaked:
            exc = StubLeakError(
                message=f"Stubs left active by code under test: {', '.join(leaked)}",
                details={"function_ids": leaked},
            )
            scope.record_fatal(exc)
            raise exc

    def _report(self, result: FactResult, parent: Optional[FactScope]) -> FactResult:
        if parent is not None:
            parent.nested_results.append(result)
        if self.log_results:
            logger.info(
                "Fact %r %s", result.name, "passed" if result.passed else "FAILED",
                extra={"fact": result.name, "passed": result.passed},
            )
        return result


def evaluate_fact(definition: FactDefinition, **kwargs: Any) -> FactResult:
    """Evaluate a fact with a default FactEvaluator."""
    return FactEvaluator(**kwargs).evaluate(definition)
