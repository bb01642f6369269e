"""
factkit Mock Registry

Scoped substitution of mockable functions.

Key components:
- Mockable / @mockable: a function whose calls consult the active stubs first
- only_mocked() / placeholder(): mockables with no implementation; calling
  one without an active stub raises UndefinedFunctionCalled
- MockContext: immutable function_id -> stack of StubBindings
- install() / StubHandle: push a binding, release restores the prior context
- stub_scope(): install all of a fact's clauses, release on every exit path

The active MockContext lives in a ContextVar. Installing a stub sets a new
context rather than mutating a shared table, so each thread and asyncio task
sees only its own stubs, and nested facts stack and unstack in LIFO order.
"""
from __future__ import annotations

import functools
import logging
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Mapping, Optional, Sequence, Union

from ..exceptions import (
    MalformedDeclaration,
    MockScopeError,
    UndefinedFunctionCalled,
    UnexpectedCall,
)
from ..models import ProvidedClause
from .matcher import select_clause, signature_mismatch
from .recorder import CallRecorder
from .scope import FactScope, current_scope

logger = logging.getLogger(__name__)


# =============================================================================
# Mockable Functions
# =============================================================================

# function_id -> Mockable, for lookups by identifier
_MOCKABLES: dict[str, "Mockable"] = {}


class Mockable:
    """
    A named function that can be stubbed by provided clauses.

    Calls go to the innermost active stub for function_id when there is one,
    otherwise to the real implementation. A Mockable without implementation
    is a placeholder.
    """

    def __init__(
        self,
        implementation: Optional[Callable[..., Any]],
        function_id: str,
    ) -> None:
        self.implementation = implementation
        self.function_id = function_id
        if implementation is not None:
            functools.update_wrapper(self, implementation)
        else:
            self.__name__ = function_id.rsplit(".", 1)[-1]
            self.__qualname__ = self.__name__
            self.__doc__ = f"Placeholder for {function_id}; only callable while mocked."

    @property
    def is_placeholder(self) -> bool:
        return self.implementation is None

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        binding = active_context().lookup(self.function_id)
        if binding is not None:
            return binding.dispatch(args, kwargs)
        if self.implementation is None:
            exc = UndefinedFunctionCalled(
                message=(
                    f"{self.function_id} has no implementation and no provided "
                    f"clause mocks it in this fact"
                ),
                details={"function_id": self.function_id, "args": args, "kwargs": kwargs},
            )
            scope = current_scope()
            if scope is not None:
                scope.record_fatal(exc)
            logger.warning(
                "Placeholder %s called without an active stub",
                self.function_id,
                extra={"function_id": self.function_id, "code": exc.code},
            )
            raise exc
        return self.implementation(*args, **kwargs)

    def __get__(self, instance: Any, owner: Any = None) -> Any:
        if instance is None:
            return self
        return functools.partial(self, instance)

    def __repr__(self) -> str:
        kind = "placeholder" if self.is_placeholder else "mockable"
        return f"<{kind} {self.function_id}>"


def _register(mock: Mockable) -> Mockable:
    if mock.function_id in _MOCKABLES:
        logger.debug("Replacing mockable %s", mock.function_id)
    _MOCKABLES[mock.function_id] = mock
    return mock


def mockable(
    fn: Optional[Callable[..., Any]] = None,
    *,
    name: Optional[str] = None,
) -> Any:
    """
    Make a function stubbable by provided clauses.

    Usage:
        @mockable
        def neighbor_count(cell): ...

        @mockable(name="life.alive?")
        def is_alive(cell): ...
    """
    def decorate(func: Callable[..., Any]) -> Mockable:
        function_id = name or f"{func.__module__}.{func.__qualname__}"
        return _register(Mockable(func, function_id))

    if fn is not None:
        return decorate(fn)
    return decorate


def placeholder(name: str, module: Optional[str] = None) -> Mockable:
    """Create a mockable with no implementation."""
    function_id = f"{module}.{name}" if module else name
    return _register(Mockable(None, function_id))


def only_mocked(*names: str, module: Optional[str] = None) -> tuple[Mockable, ...]:
    """
    Declare functions that exist only to be mocked.

    They raise UndefinedFunctionCalled if called outside a fact that
    provides them, which doubles as a to-do list of unwritten functions.

    Usage:
        is_alive, neighbor_count = only_mocked("is_alive", "neighbor_count", module=__name__)
    """
    return tuple(placeholder(name, module=module) for name in names)


def get_mockable(function_id: str) -> Optional[Mockable]:
    """Look up a registered mockable by identifier."""
    return _MOCKABLES.get(function_id)


def registered_mockables() -> list[str]:
    return sorted(_MOCKABLES)


def resolve_target(target: Union[Mockable, str]) -> Mockable:
    """
    Resolve a clause target to its Mockable.

    Raises:
        MalformedDeclaration: If target is unknown or not mockable
    """
    if isinstance(target, Mockable):
        return target
    if isinstance(target, str):
        mock = get_mockable(target)
        if mock is None:
            raise MalformedDeclaration(
                message=f"No mockable function registered as '{target}'",
                details={"function_id": target},
            )
        return mock
    raise MalformedDeclaration(
        message=f"{target!r} is not mockable; decorate it with @mockable or use only_mocked()",
        details={"target": repr(target)},
    )


def clause_problems(clause: ProvidedClause) -> list[str]:
    """Structural problems with a provided clause (empty if valid)."""
    try:
        mock = resolve_target(clause.target)
    except MalformedDeclaration as e:
        return [e.message]

    problems = []
    mismatch = signature_mismatch(clause, mock.implementation)
    if mismatch:
        problems.append(mismatch)

    times = clause.times
    if isinstance(times, bool):
        problems.append(f"{clause.describe()}: times must be a count, got {times!r}")
    elif isinstance(times, int) and times < 0:
        problems.append(f"{clause.describe()}: times must not be negative, got {times}")
    return problems


# =============================================================================
# Stub Bindings
# =============================================================================

@dataclass
class StubBinding:
    """
    The clauses standing in for one function during one fact.

    Attributes:
        function_id: Mocked function identifier
        clauses: Clauses in declaration order (metavariables resolved)
        positions: Each clause's position in the fact's provided list
        owner: Scope of the fact that declared the clauses
        recorder: Trigger counts and call log
    """
    function_id: str
    clauses: tuple[ProvidedClause, ...]
    positions: tuple[int, ...] = ()
    owner: Optional[FactScope] = None
    recorder: CallRecorder = field(init=False)

    def __post_init__(self) -> None:
        if not self.positions:
            self.positions = tuple(range(len(self.clauses)))
        self.recorder = CallRecorder(self.function_id, len(self.clauses))

    def dispatch(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        """Route a call to the first matching clause and return its value."""
        index = select_clause(self.clauses, args, kwargs)
        if index is None:
            exc = UnexpectedCall(
                message=(
                    f"{self.function_id} was called with arguments matching no provided clause: "
                    f"{_describe_call(self.function_id, args, kwargs)}"
                ),
                details={
                    "function_id": self.function_id,
                    "args": args,
                    "kwargs": kwargs,
                    "clauses": [clause.describe() for clause in self.clauses],
                },
                fact_name=self.owner.name if self.owner else None,
            )
            if self.owner is not None:
                self.owner.record_fatal(exc)
            logger.warning(
                "Unexpected call %s",
                _describe_call(self.function_id, args, kwargs),
                extra={"function_id": self.function_id, "code": exc.code},
            )
            raise exc

        self.recorder.record(index, args, kwargs)
        logger.debug(
            "Stub %s selected clause %d for %s",
            self.function_id, index, _describe_call(self.function_id, args, kwargs),
        )
        return self.clauses[index].returns


def _describe_call(function_id: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> str:
    parts = [repr(arg) for arg in args]
    parts.extend(f"{k}={v!r}" for k, v in kwargs.items())
    return f"{function_id}({', '.join(parts)})"


# =============================================================================
# Mock Context
# =============================================================================

@dataclass(frozen=True)
class MockContext:
    """
    Immutable view of the active stubs.

    Each function_id maps to a stack of bindings; the last one shadows the
    others. push() returns a new context.
    """
    stacks: Mapping[str, tuple[StubBinding, ...]] = field(default_factory=dict)

    def lookup(self, function_id: str) -> Optional[StubBinding]:
        stack = self.stacks.get(function_id)
        return stack[-1] if stack else None

    def push(self, binding: StubBinding) -> MockContext:
        stacks = dict(self.stacks)
        stacks[binding.function_id] = stacks.get(binding.function_id, ()) + (binding,)
        return MockContext(stacks)

    def depth(self, function_id: str) -> int:
        return len(self.stacks.get(function_id, ()))

    def active_ids(self) -> list[str]:
        return sorted(fid for fid, stack in self.stacks.items() if stack)


_ACTIVE_CONTEXT: ContextVar[MockContext] = ContextVar(
    "factkit_mock_context",
    default=MockContext(),
)


def active_context() -> MockContext:
    """The stubs visible in the current execution context."""
    return _ACTIVE_CONTEXT.get()


class StubHandle:
    """
    Release handle for one installed binding.

    Usable as a context manager. Releasing restores the context that was
    active before install(); handles must be released in LIFO order.
    """

    def __init__(self, binding: StubBinding, context: MockContext, token: Token) -> None:
        self.binding = binding
        self.context = context
        self._token = token
        self.released = False

    def release(self) -> None:
        if self.released:
            return
        if _ACTIVE_CONTEXT.get() is not self.context:
            raise MockScopeError(
                message=f"Stub for {self.binding.function_id} released out of order",
                details={"function_id": self.binding.function_id},
            )
        _ACTIVE_CONTEXT.reset(self._token)
        self.released = True
        logger.debug("Released stub for %s", self.binding.function_id)

    def __enter__(self) -> StubBinding:
        return self.binding

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


def install(
    function_id: str,
    clauses: Sequence[ProvidedClause],
    owner: Optional[FactScope] = None,
    positions: Sequence[int] = (),
) -> StubHandle:
    """
    Stack a stub for function_id on top of any existing binding.

    Args:
        function_id: Function to stub
        clauses: Its provided clauses, in declaration order
        owner: Scope of the declaring fact
        positions: Position of each clause in the fact's provided list

    Returns:
        StubHandle whose release restores the prior binding
    """
    binding = StubBinding(
        function_id=function_id,
        clauses=tuple(clauses),
        positions=tuple(positions),
        owner=owner,
    )
    context = active_context().push(binding)
    token = _ACTIVE_CONTEXT.set(context)
    logger.debug(
        "Installed stub for %s (%d clauses, depth %d)",
        function_id, len(binding.clauses), context.depth(function_id),
        extra={"function_id": function_id},
    )
    return StubHandle(binding, context, token)


def group_clauses(
    clauses: Sequence[ProvidedClause],
) -> dict[str, list[tuple[int, ProvidedClause]]]:
    """Group clauses by function, keeping declaration order and positions."""
    groups: dict[str, list[tuple[int, ProvidedClause]]] = {}
    for position, clause in enumerate(clauses):
        function_id = resolve_target(clause.target).function_id
        groups.setdefault(function_id, []).append((position, clause))
    return groups


def leaked_ids(expected: MockContext) -> list[str]:
    """Functions whose stub stack differs from expected in the active context."""
    current = active_context()
    if current is expected:
        return []
    leaked = []
    for function_id in set(current.stacks) | set(expected.stacks):
        ours = expected.stacks.get(function_id, ())
        theirs = current.stacks.get(function_id, ())
        if len(ours) != len(theirs) or any(a is not b for a, b in zip(ours, theirs)):
            leaked.append(function_id)
    return sorted(leaked)


@contextmanager
def stub_scope(
    clauses: Sequence[ProvidedClause],
    owner: Optional[FactScope] = None,
) -> Iterator[list[StubBinding]]:
    """
    Install stubs for all clauses; release them on exit, however it happens.

    Exit rewinds the context to what it was on entry, so stubs installed
    and never released inside the block are dropped too.

    Yields:
        The installed bindings, one per mocked function
    """
    entry_token = _ACTIVE_CONTEXT.set(active_context())
    handles: list[StubHandle] = []
    try:
        for function_id, entries in group_clauses(clauses).items():
            handles.append(install(
                function_id,
                [clause for _, clause in entries],
                owner=owner,
                positions=[position for position, _ in entries],
            ))
        yield [handle.binding for handle in handles]
    finally:
        expected = handles[-1].context if handles else None
        if expected is not None and active_context() is not expected:
            logger.warning(
                "Dropping stubs left active for %s",
                ", ".join(leaked_ids(expected)),
                extra={"fact": owner.name if owner else None},
            )
        for handle in handles:
            handle.released = True
        _ACTIVE_CONTEXT.reset(entry_token)
