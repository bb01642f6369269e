"""
factkit Models

Declarations (facts, assertions, provided clauses, metavariables),
checkers, and results.
"""
from __future__ import annotations

from .enums import (
    FACT_TRANSITIONS,
    CheckerKind,
    FactState,
    FailureKind,
)
from .checkers import (
    AnythingCheck,
    Checker,
    CheckerRegistry,
    ContainsCheck,
    EqualityCheck,
    ExactReferenceCheck,
    FalseyCheck,
    InAnyOrderCheck,
    PredicateCheck,
    RoughlyCheck,
    ThrownException,
    ThrowsCheck,
    TruthyCheck,
    anything,
    as_checker,
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
)
from .metavars import Metavariable, MetavarRef, metavar
from .clauses import ProvidedClause, provided
from .fact import (
    Assertion,
    DeferredCall,
    FactDefinition,
    call,
    check,
    fact,
    facts,
)
from .results import (
    AssertionResult,
    ErrorDescriptor,
    ExpectationResult,
    FactResult,
    UnsatisfiedExpectation,
)

__all__ = [
    # Enums
    "FACT_TRANSITIONS",
    "CheckerKind",
    "FactState",
    "FailureKind",
    # Checkers
    "Checker",
    "CheckerRegistry",
    "AnythingCheck",
    "ContainsCheck",
    "EqualityCheck",
    "ExactReferenceCheck",
    "FalseyCheck",
    "InAnyOrderCheck",
    "PredicateCheck",
    "RoughlyCheck",
    "ThrowsCheck",
    "TruthyCheck",
    "ThrownException",
    "anything",
    "as_checker",
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
    "MetavarRef",
    "metavar",
    # Declarations
    "ProvidedClause",
    "provided",
    "Assertion",
    "DeferredCall",
    "FactDefinition",
    "call",
    "check",
    "fact",
    "facts",
    # Results
    "AssertionResult",
    "ErrorDescriptor",
    "ExpectationResult",
    "FactResult",
    "UnsatisfiedExpectation",
]
