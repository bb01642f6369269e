"""
Test helpers for factkit.

Modules:
- assertions: FactResult verification helpers
"""
from .assertions import (
    assert_aborted_with,
    assert_failed_assertions,
    assert_passed,
    assert_unsatisfied,
)

__all__ = [
    "assert_aborted_with",
    "assert_failed_assertions",
    "assert_passed",
    "assert_unsatisfied",
]
