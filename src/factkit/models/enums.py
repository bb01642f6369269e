"""
factkit Enumerations

All enums inherit from (str, Enum) for JSON serialization compatibility.
"""
from __future__ import annotations

from enum import Enum


# =============================================================================
# Fact Evaluation States
# =============================================================================

class FactState(str, Enum):
    """
    States of a single fact evaluation.

    Normal path:
        INIT -> METAVARS_BOUND -> MOCKS_INSTALLED -> BODY_EXECUTING
        -> RESULTS_CHECKED -> EXPECTATIONS_VERIFIED -> MOCKS_RESTORED -> REPORTED

    Fatal path:
        ... -> ABORTED -> MOCKS_RESTORED -> REPORTED
    """
    INIT = "init"
    METAVARS_BOUND = "metavars_bound"
    MOCKS_INSTALLED = "mocks_installed"
    BODY_EXECUTING = "body_executing"
    RESULTS_CHECKED = "results_checked"
    EXPECTATIONS_VERIFIED = "expectations_verified"
    MOCKS_RESTORED = "mocks_restored"
    REPORTED = "reported"
    ABORTED = "aborted"


# Allowed transitions (source -> targets)
FACT_TRANSITIONS: dict[FactState, frozenset[FactState]] = {
    FactState.INIT: frozenset({FactState.METAVARS_BOUND, FactState.ABORTED}),
    FactState.METAVARS_BOUND: frozenset({FactState.MOCKS_INSTALLED, FactState.ABORTED}),
    FactState.MOCKS_INSTALLED: frozenset({FactState.BODY_EXECUTING, FactState.ABORTED}),
    FactState.BODY_EXECUTING: frozenset({FactState.RESULTS_CHECKED, FactState.ABORTED}),
    FactState.RESULTS_CHECKED: frozenset({FactState.EXPECTATIONS_VERIFIED, FactState.ABORTED}),
    FactState.EXPECTATIONS_VERIFIED: frozenset({FactState.MOCKS_RESTORED}),
    FactState.ABORTED: frozenset({FactState.MOCKS_RESTORED}),
    FactState.MOCKS_RESTORED: frozenset({FactState.REPORTED}),
    FactState.REPORTED: frozenset(),
}


# =============================================================================
# Failure Kinds
# =============================================================================

class FailureKind(str, Enum):
    """Taxonomy of fact failures."""
    ASSERTION_FAILURE = "assertion_failure"              # recoverable
    UNSATISFIED_EXPECTATION = "unsatisfied_expectation"  # recoverable
    UNEXPECTED_CALL = "unexpected_call"                  # fatal
    UNDEFINED_FUNCTION_CALLED = "undefined_function_called"  # fatal
    MALFORMED_DECLARATION = "malformed_declaration"      # fatal, before execution
    BODY_ERROR = "body_error"                            # fatal
    STUB_LEAK = "stub_leak"                              # fatal


# =============================================================================
# Checker Kinds
# =============================================================================

class CheckerKind(str, Enum):
    """Variants of the Checker abstraction."""
    EQUALITY = "equality"
    PREDICATE = "predicate"
    EXACT_REFERENCE = "exact_reference"
    TRUTHY = "truthy"
    FALSEY = "falsey"
    ANYTHING = "anything"
    COMPOSITE = "composite"
    ROUGHLY = "roughly"
    THROWS = "throws"
