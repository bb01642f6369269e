"""
factkit Argument Matcher

Selects the provided clause that a stub call satisfies.

A clause is eligible only if its positional arity equals the call's and its
keyword names equal the call's; it is selected if every argument matches its
ArgMatcher under the same rules as assertion checking (matches()). Clauses
are scanned in declaration order and the first match wins.
"""
from __future__ import annotations

import inspect
from typing import Any, Callable, Optional, Sequence

from ..models import ProvidedClause, matches


def clause_accepts(
    clause: ProvidedClause,
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> bool:
    """Check whether a call's arguments satisfy one clause."""
    if len(args) != clause.arity:
        return False
    if set(kwargs) != set(clause.kwargs):
        return False
    for actual, expected in zip(args, clause.args):
        if not matches(actual, expected):
            return False
    for name, expected in clause.kwargs.items():
        if not matches(kwargs[name], expected):
            return False
    return True


def select_clause(
    clauses: Sequence[ProvidedClause],
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> Optional[int]:
    """
    Find the first clause accepting the call.

    Returns:
        Index of the selected clause, or None if no clause matches
    """
    for index, clause in enumerate(clauses):
        if clause_accepts(clause, args, kwargs):
            return index
    return None


def signature_mismatch(
    clause: ProvidedClause,
    implementation: Optional[Callable[..., Any]],
) -> Optional[str]:
    """
    Check a clause's arity against the real implementation's signature.

    Placeholders have no signature, so any arity is accepted for them.

    Returns:
        Description of the mismatch, or None if the clause fits
    """
    if implementation is None:
        return None
    try:
        signature = inspect.signature(implementation)
    except (TypeError, ValueError):
        # Builtins without introspectable signatures
        return None
    try:
        signature.bind(*clause.args, **dict(clause.kwargs))
    except TypeError as e:
        return f"{clause.describe()} does not fit signature {signature}: {e}"
    return None
