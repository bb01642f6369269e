"""
factkit Exception Hierarchy

Domain-specific exceptions for fact evaluation.
All exceptions include error codes for tracking and logging.

Exception codes follow the pattern: FK_<CATEGORY>_<SPECIFIC>

Fatal errors (subclasses of FatalFactError) abort the body of the fact that
raised them. The evaluator catches them at the fact boundary, restores mocks,
and reports them in FactResult.fatal_error; they never escape evaluate_fact().
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class FactKitError(Exception):
    """
    Base exception for all factkit errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (FK_*)
        details: Additional context about the error
        fact_name: Name of the fact being evaluated, if known
    """
    message: str
    code: str = "FK_INTERNAL_ERROR"
    details: dict[str, Any] = field(default_factory=dict)
    fact_name: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.fact_name:
            parts.append(f"(fact: {self.fact_name})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging/reports."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.fact_name:
            result["fact_name"] = self.fact_name
        return result


# =============================================================================
# Fatal Errors (abort the current fact)
# =============================================================================

@dataclass
class FatalFactError(FactKitError):
    """An error that aborts the remaining body of the current fact."""
    code: str = "FK_FATAL"

    @property
    def kind(self) -> str:
        return type(self).__name__


@dataclass
class UnexpectedCall(FatalFactError):
    """A mocked function was called with arguments matching no provided clause."""
    code: str = "FK_UNEXPECTED_CALL"


@dataclass
class UndefinedFunctionCalled(FatalFactError):
    """A placeholder function was called while no stub shadowed it."""
    code: str = "FK_UNDEFINED_FUNCTION"


@dataclass
class MalformedDeclaration(FatalFactError):
    """A fact declaration is structurally invalid and cannot be executed."""
    code: str = "FK_MALFORMED_DECLARATION"


@dataclass
class FactBodyError(FatalFactError):
    """The fact body raised an ordinary exception."""
    code: str = "FK_BODY_ERROR"


@dataclass
class StubLeakError(FatalFactError):
    """Code under test installed a stub and left it active."""
    code: str = "FK_STUB_LEAK"


# =============================================================================
# Mock Scope Errors
# =============================================================================

@dataclass
class MockScopeError(FactKitError):
    """Stub bindings were released out of LIFO order."""
    code: str = "FK_MOCK_SCOPE"


# =============================================================================
# Checker Registry Errors
# =============================================================================

@dataclass
class CheckerRegistrationError(FactKitError):
    """A checker name is already registered."""
    code: str = "FK_CHECKER_REGISTRATION"


@dataclass
class UnknownCheckerError(FactKitError):
    """Requested checker is not registered."""
    code: str = "FK_UNKNOWN_CHECKER"


# =============================================================================
# Fact Pack Errors
# =============================================================================

@dataclass
class FactPackLoadError(FactKitError):
    """Failed to load a fact pack from file."""
    code: str = "FK_PACK_LOAD_ERROR"


@dataclass
class FactPackValidationError(FactKitError):
    """Fact pack schema validation or reference resolution failed."""
    code: str = "FK_PACK_VALIDATION_ERROR"


@dataclass
class FactPackVersionMismatch(FactKitError):
    """Fact pack schema version is incompatible."""
    code: str = "FK_PACK_VERSION_MISMATCH"
