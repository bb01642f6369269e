"""
factkit Fact Scope

Per-evaluation state visible to a running fact: metavariables, shared
bindings (inherited by nested facts), the body's result, nested results,
and fatal errors raised inside the fact.

The scope of the running fact is tracked in a ContextVar, so nested facts
find their parent and concurrently running facts never see each other.
"""
from __future__ import annotations

from collections import ChainMap
from contextvars import ContextVar, Token
from typing import TYPE_CHECKING, Any, Optional

from ..exceptions import FatalFactError
from ..models import FactDefinition, Metavariable

if TYPE_CHECKING:
    from ..models import FactResult
    from .binder import MetavarBinder


_CURRENT_SCOPE: ContextVar[Optional["FactScope"]] = ContextVar(
    "factkit_current_scope",
    default=None,
)


class FactScope:
    """
    State of one running fact.

    Callable actuals and bodies taking one argument receive the scope:

        check(lambda scope: alive_in_next_generation(scope.metavar("cell")), truthy)
        check(lambda scope: scope["a"] + scope["b"], 36)
    """

    def __init__(
        self,
        definition: FactDefinition,
        binder: "MetavarBinder",
        parent: Optional[FactScope] = None,
    ) -> None:
        self.definition = definition
        self.binder = binder
        self.parent = parent
        if parent is not None:
            self.bindings: ChainMap[str, Any] = parent.bindings.new_child(dict(definition.bindings))
        else:
            self.bindings = ChainMap(dict(definition.bindings))
        self.result: Any = None
        self.nested_results: list["FactResult"] = []
        self.fatal_errors: list[FatalFactError] = []
        # stubs visible right after this fact installed its own
        self.mock_context: Any = None
        self._token: Optional[Token] = None

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def depth(self) -> int:
        return 0 if self.parent is None else self.parent.depth + 1

    def metavar(self, name: str) -> Metavariable:
        """The metavariable bound to name in this evaluation."""
        return self.binder.bind(name)

    def __getitem__(self, name: str) -> Any:
        return self.bindings[name]

    def __contains__(self, name: object) -> bool:
        return name in self.bindings

    def get(self, name: str, default: Any = None) -> Any:
        return self.bindings.get(name, default)

    def record_fatal(self, exc: FatalFactError) -> None:
        """Remember a fatal error even if the fact body swallows it."""
        if exc.fact_name is None:
            exc.fact_name = self.name
        if all(existing is not exc for existing in self.fatal_errors):
            self.fatal_errors.append(exc)

    def activate(self) -> None:
        self._token = _CURRENT_SCOPE.set(self)

    def deactivate(self) -> None:
        if self._token is not None:
            _CURRENT_SCOPE.reset(self._token)
        self._token = None

    def __repr__(self) -> str:
        return f"FactScope({self.name!r}, depth={self.depth})"


def current_scope() -> Optional[FactScope]:
    """The scope of the fact running in this context, if any."""
    return _CURRENT_SCOPE.get()
