"""
Pytest configuration and fixtures for factkit tests.

Provides factory helpers for declarations and a guard that no stub
outlives the test that installed it.
"""
import pytest

from factkit.engine import FactEvaluator, FactScope, MetavarBinder, active_context
from factkit.models import (
    Assertion,
    FactDefinition,
    ProvidedClause,
    check,
    fact,
)


# =============================================================================
# Factory Helpers
# =============================================================================

def make_definition(
    name: str = "a fact",
    assertions: tuple[Assertion, ...] = (),
    provided: tuple[ProvidedClause, ...] = (),
    body=None,
    bindings=None,
) -> FactDefinition:
    """Create a FactDefinition; defaults to one passing assertion."""
    if not assertions:
        assertions = (check(lambda: 1, 1),)
    return fact(name, *assertions, provided=provided, body=body, bindings=bindings)


def make_scope(definition: FactDefinition = None, parent: FactScope = None) -> FactScope:
    """Create a FactScope with its own binder."""
    return FactScope(definition or make_definition(), MetavarBinder("test-eval"), parent)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def evaluator():
    """Create a fact evaluator that logs a summary line per fact."""
    return FactEvaluator(log_results=True)


@pytest.fixture
def scope():
    """A FactScope that is not activated."""
    return make_scope()


@pytest.fixture(autouse=True)
def no_leaked_stubs():
    """Every test must leave the mock context as it found it."""
    yield
    assert active_context().active_ids() == []
