"""
factkit - Facts about functions, checked against mocked collaborators

factkit evaluates facts: assertions about a function's results that hold
provided its collaborators behave as declared. Collaborators are replaced
by stubs for the duration of the fact, every call is checked against the
declared clauses, and clauses that were never used are reported.

Key Features:
- Data-first declarations (fact, check, provided, call, metavar)
- Checkers: equality, predicates, exactly, truthy/falsey, in_any_order,
  anything, roughly, contains, throws
- Scoped stubs isolated per thread and asyncio task, stacked by nested facts
- Placeholders for functions that are not written yet (only_mocked)
- Structured results for external runners
- Fact packs: facts declared in YAML or JSON

Quick Start:
    from factkit import (
        fact, check, call, provided, metavar,
        mockable, only_mocked, evaluate_fact, truthy,
    )

    alive, neighbor_count = only_mocked("alive", "neighbor_count", module=__name__)

    @mockable
    def alive_in_next_generation(cell):
        return alive(cell) and neighbor_count(cell) == 2

    result = evaluate_fact(fact(
        "a live cell with two neighbors survives",
        check(call(alive_in_next_generation, metavar("cell")), truthy),
        provided=[
            provided(alive, metavar("cell"), returns=True),
            provided(neighbor_count, metavar("cell"), returns=2),
        ],
    ))
    assert result.passed

Version: 0.1.0
"""
from __future__ import annotations

__version__ = "0.1.0"

# =============================================================================
# Declarations and Checkers (Re-exported for convenience)
# =============================================================================
from .models import (
    # Enums
    FactState,
    FailureKind,
    CheckerKind,
    # Checkers
    Checker,
    CheckerRegistry,
    ThrownException,
    anything,
    contains,
    default_registry,
    describe_expected,
    exactly,
    falsey,
    in_any_order,
    is_truthy,
    matches,
    roughly,
    throws,
    truthy,
    # Metavariables
    Metavariable,
    metavar,
    # Declarations
    Assertion,
    FactDefinition,
    ProvidedClause,
    call,
    check,
    fact,
    facts,
    provided,
    # Results
    AssertionResult,
    ErrorDescriptor,
    ExpectationResult,
    FactResult,
    UnsatisfiedExpectation,
)

# =============================================================================
# Engine
# =============================================================================
from .engine import (
    FactEvaluator,
    FactScope,
    Mockable,
    current_scope,
    evaluate_fact,
    get_mockable,
    mockable,
    only_mocked,
    placeholder,
    stub_scope,
)

# =============================================================================
# Configuration
# =============================================================================
from .config import configure_logging

# =============================================================================
# Exceptions
# =============================================================================
from .exceptions import (
    FactKitError,
    FatalFactError,
    UnexpectedCall,
    UndefinedFunctionCalled,
    MalformedDeclaration,
    FactBodyError,
    StubLeakError,
    MockScopeError,
    CheckerRegistrationError,
    UnknownCheckerError,
    FactPackLoadError,
    FactPackValidationError,
    FactPackVersionMismatch,
)

# =============================================================================
# Public API
# =============================================================================
__all__ = [
    # Version
    "__version__",
    # Enums
    "FactState",
    "FailureKind",
    "CheckerKind",
    # Checkers
    "Checker",
    "CheckerRegistry",
    "ThrownException",
    "anything",
    "contains",
    "default_registry",
    "describe_expected",
    "exactly",
    "falsey",
    "in_any_order",
    "is_truthy",
    "matches",
    "roughly",
    "throws",
    "truthy",
    # Metavariables
    "Metavariable",
    "metavar",
    # Declarations
    "Assertion",
    "FactDefinition",
    "ProvidedClause",
    "call",
    "check",
    "fact",
    "facts",
    "provided",
    # Results
    "AssertionResult",
    "ErrorDescriptor",
    "ExpectationResult",
    "FactResult",
    "UnsatisfiedExpectation",
    # Engine
    "FactEvaluator",
    "FactScope",
    "Mockable",
    "current_scope",
    "evaluate_fact",
    "get_mockable",
    "mockable",
    "only_mocked",
    "placeholder",
    "stub_scope",
    # Configuration
    "configure_logging",
    # Exceptions
    "FactKitError",
    "FatalFactError",
    "UnexpectedCall",
    "UndefinedFunctionCalled",
    "MalformedDeclaration",
    "FactBodyError",
    "StubLeakError",
    "MockScopeError",
    "CheckerRegistrationError",
    "UnknownCheckerError",
    "FactPackLoadError",
    "FactPackValidationError",
    "FactPackVersionMismatch",
]
