"""
factkit Engine

Evaluation components.

Key components:
- MetavarBinder: fresh metavariable values per evaluation
- Mock registry: @mockable, only_mocked(), scoped stubs
- Argument matcher: clause selection for stub calls
- CallRecorder: per-clause trigger counts
- Verifier: call-count expectations after the body runs
- FactEvaluator: the fact lifecycle
"""
from __future__ import annotations

from .binder import MetavarBinder
from .evaluator import FactEvaluator, evaluate_fact
from .matcher import clause_accepts, select_clause, signature_mismatch
from .mock_registry import (
    MockContext,
    Mockable,
    StubBinding,
    StubHandle,
    active_context,
    clause_problems,
    get_mockable,
    install,
    leaked_ids,
    mockable,
    only_mocked,
    placeholder,
    registered_mockables,
    resolve_target,
    stub_scope,
)
from .recorder import CallRecord, CallRecorder
from .scope import FactScope, current_scope
from .verifier import times_satisfied, unsatisfied, verify

__all__ = [
    # Binder
    "MetavarBinder",
    # Evaluator
    "FactEvaluator",
    "evaluate_fact",
    # Matcher
    "clause_accepts",
    "select_clause",
    "signature_mismatch",
    # Mock registry
    "MockContext",
    "Mockable",
    "StubBinding",
    "StubHandle",
    "active_context",
    "clause_problems",
    "get_mockable",
    "install",
    "leaked_ids",
    "mockable",
    "only_mocked",
    "placeholder",
    "registered_mockables",
    "resolve_target",
    "stub_scope",
    # Recorder
    "CallRecord",
    "CallRecorder",
    # Scope
    "FactScope",
    "current_scope",
    # Verifier
    "times_satisfied",
    "unsatisfied",
    "verify",
]
