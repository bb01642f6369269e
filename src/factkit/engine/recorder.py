"""
factkit Call Recorder

Per-clause trigger counters and the call log of one stub binding.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CallRecord:
    """
    One call routed through a stub.

    trigger_count is the selected clause's count after this call.
    """
    function_id: str
    clause_index: int
    args: tuple[Any, ...]
    kwargs: dict[str, Any]
    trigger_count: int


@dataclass
class CallRecorder:
    """Trigger counts for the clauses of one stub binding."""
    function_id: str
    clause_count: int
    records: list[CallRecord] = field(default_factory=list)
    _counts: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self._counts:
            self._counts = [0] * self.clause_count

    def record(self, clause_index: int, args: tuple[Any, ...], kwargs: dict[str, Any]) -> CallRecord:
        self._counts[clause_index] += 1
        record = CallRecord(
            function_id=self.function_id,
            clause_index=clause_index,
            args=args,
            kwargs=dict(kwargs),
            trigger_count=self._counts[clause_index],
        )
        self.records.append(record)
        return record

    def count(self, clause_index: int) -> int:
        return self._counts[clause_index]

    @property
    def counts(self) -> tuple[int, ...]:
        return tuple(self._counts)

    @property
    def total_calls(self) -> int:
        return len(self.records)
