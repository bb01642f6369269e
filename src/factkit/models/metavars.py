"""
factkit Metavariables

A metavariable stands in for "some value" whose characteristics don't matter
to a fact beyond the ones its provided clauses define. Written ...cell... in
reports.

- MetavarRef: declaration-time token produced by metavar("cell")
- Metavariable: the opaque value a MetavarRef resolves to during one fact
  evaluation. Equal only to itself.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MetavarRef:
    """Reference to a metavariable by name, resolved per fact evaluation."""
    name: str

    def __repr__(self) -> str:
        return f"metavar({self.name!r})"


class Metavariable:
    """
    Opaque placeholder value bound for one fact evaluation.

    Identity is the only property it has: two metavariables are never equal,
    even with the same name, unless they are the same object.
    """

    __slots__ = ("name", "_evaluation_id")

    def __init__(self, name: str, evaluation_id: str) -> None:
        self.name = name
        self._evaluation_id = evaluation_id

    def __repr__(self) -> str:
        return f"...{self.name}..."

    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)


def metavar(name: str) -> MetavarRef:
    """
    Declare a metavariable reference.

    Usable anywhere a value is declared: provided clause arguments and return
    values, expected values, and call() arguments.

    Example:
        >>> cell = metavar("cell")
        >>> provided(is_alive, cell, returns=False)
    """
    # "...cell..." and "cell" name the same metavariable
    stripped = name.strip(".") if isinstance(name, str) else ""
    if not stripped:
        raise ValueError(f"metavariable name must be a non-empty string, got {name!r}")
    return MetavarRef(stripped)
