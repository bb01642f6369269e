"""
factkit Metavariable Binder

Binds metavariable names to fresh opaque values for one fact evaluation and
substitutes them into declarations.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Any, Optional
from uuid import uuid4

from ..models import (
    Assertion,
    Checker,
    DeferredCall,
    Metavariable,
    MetavarRef,
    ProvidedClause,
)


class MetavarBinder:
    """
    Memoized name -> Metavariable mapping.

    One binder per fact evaluation: every mention of "cell" inside that
    evaluation resolves to the same value, and a second evaluation of the
    same fact gets a different one.
    """

    def __init__(self, evaluation_id: Optional[str] = None) -> None:
        self.evaluation_id = evaluation_id or uuid4().hex
        self._bound: dict[str, Metavariable] = {}

    def bind(self, name: str) -> Metavariable:
        name = name.strip(".")
        if name not in self._bound:
            self._bound[name] = Metavariable(name, self.evaluation_id)
        return self._bound[name]

    @property
    def bound(self) -> dict[str, Metavariable]:
        return dict(self._bound)

    def resolve(self, value: Any) -> Any:
        """Replace MetavarRefs inside value with bound metavariables."""
        if isinstance(value, MetavarRef):
            return self.bind(value.name)
        if isinstance(value, (Checker, DeferredCall)):
            return value.map_values(self.resolve)
        if isinstance(value, list):
            return [self.resolve(item) for item in value]
        if isinstance(value, tuple):
            items = [self.resolve(item) for item in value]
            if hasattr(value, "_fields"):
                # namedtuple
                return type(value)(*items)
            return tuple(items)
        if isinstance(value, dict):
            return {key: self.resolve(item) for key, item in value.items()}
        if isinstance(value, (set, frozenset)):
            return type(value)(self.resolve(item) for item in value)
        return value

    def resolve_clause(self, clause: ProvidedClause) -> ProvidedClause:
        return replace(
            clause,
            args=tuple(self.resolve(arg) for arg in clause.args),
            kwargs={name: self.resolve(value) for name, value in clause.kwargs.items()},
            returns=self.resolve(clause.returns),
            times=self.resolve(clause.times),
        )

    def resolve_assertion(self, assertion: Assertion) -> Assertion:
        actual = assertion.actual
        if isinstance(actual, DeferredCall):
            actual = self.resolve(actual)
        return replace(assertion, actual=actual, expected=self.resolve(assertion.expected))
