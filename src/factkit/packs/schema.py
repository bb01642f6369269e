"""
factkit Fact Pack Schemas

Pydantic models for validating fact pack YAML/JSON files.

A fact pack declares facts as plain structured literals. The loader turns
them into FactDefinitions.

Schema versioning:
- schema_version field tracks breaking changes
- Loaders reject packs with a different major version (unless configured not to)

Value forms (anywhere a value is expected in args, kwargs, expected, returns):
- plain literal:      3, "abc", [1, 2]
- metavariable:       {metavar: cell}
- registered checker: {checker: in_any_order, args: [[1, 2, 3]]}
- imported object:    {function: "tests.fixtures.sweet:is_odd"}
- exact reference:    {exactly: "tests.fixtures.sweet:inc"}
"""
from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator


# =============================================================================
# Schema Version
# =============================================================================

SCHEMA_VERSION = "1.0.0"


# =============================================================================
# Value Forms
# =============================================================================

class MetavarValueSchema(BaseModel):
    """A metavariable reference."""
    metavar: str = Field(..., min_length=1, description="Metavariable name")

    model_config = {"extra": "forbid"}


class CheckerValueSchema(BaseModel):
    """A checker looked up in the checker registry."""
    checker: str = Field(..., min_length=1, description="Registered checker name")
    args: list[Any] = Field(default_factory=list, description="Factory arguments")
    kwargs: dict[str, Any] = Field(default_factory=dict, description="Factory keyword arguments")

    model_config = {"extra": "forbid"}


class FunctionValueSchema(BaseModel):
    """An imported object, usually a predicate."""
    function: str = Field(..., min_length=1, description="'module:attr' or dotted path")

    model_config = {"extra": "forbid"}


class ExactlyValueSchema(BaseModel):
    """An exact-reference check on an imported object."""
    exactly: str = Field(..., min_length=1, description="'module:attr' or dotted path")

    model_config = {"extra": "forbid"}


VALUE_FORMS: dict[str, type[BaseModel]] = {
    "metavar": MetavarValueSchema,
    "checker": CheckerValueSchema,
    "function": FunctionValueSchema,
    "exactly": ExactlyValueSchema,
}


# =============================================================================
# Declaration Schemas
# =============================================================================

class TimesSchema(BaseModel):
    """Call-count bounds for a provided clause."""
    at_least: Optional[int] = Field(None, ge=0, description="Minimum trigger count")
    at_most: Optional[int] = Field(None, ge=0, description="Maximum trigger count")

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def validate_bounds(self) -> "TimesSchema":
        if self.at_least is None and self.at_most is None:
            raise ValueError("times needs 'at_least' and/or 'at_most'")
        if (
            self.at_least is not None
            and self.at_most is not None
            and self.at_least > self.at_most
        ):
            raise ValueError(f"at_least ({self.at_least}) exceeds at_most ({self.at_most})")
        return self


class CheckSchema(BaseModel):
    """Schema for one assertion: call(args) => expected."""
    call: str = Field(..., min_length=1, description="Function to call ('module:attr' or dotted path)")
    args: list[Any] = Field(default_factory=list, description="Positional arguments")
    kwargs: dict[str, Any] = Field(default_factory=dict, description="Keyword arguments")
    expected: Any = Field(..., description="Expected value, predicate, or checker")
    description: Optional[str] = Field(None, description="Label for reports")

    model_config = {"extra": "forbid"}


class ProvidedSchema(BaseModel):
    """Schema for one provided clause: function(args) => returns."""
    function: str = Field(..., min_length=1, description="Mockable function id or import path")
    args: list[Any] = Field(default_factory=list, description="Positional argument matchers")
    kwargs: dict[str, Any] = Field(default_factory=dict, description="Keyword argument matchers")
    returns: Any = Field(None, description="Literal return value")
    times: Optional[Union[int, TimesSchema]] = Field(None, description="Call-count expectation")
    description: Optional[str] = Field(None, description="Human-readable note")

    model_config = {"extra": "forbid"}

    @field_validator("times", mode="before")
    @classmethod
    def validate_times(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("times must be a count, not a boolean")
        if isinstance(v, int) and v < 0:
            raise ValueError("times must not be negative")
        return v


class FactSchema(BaseModel):
    """Schema for one fact."""
    name: str = Field(..., min_length=1, description="Fact name")
    description: Optional[str] = Field(None, description="Longer description")
    checks: list[CheckSchema] = Field(default_factory=list, description="Assertions, top to bottom")
    provided: list[ProvidedSchema] = Field(default_factory=list, description="Provided clauses")
    bindings: dict[str, Any] = Field(default_factory=dict, description="Shared named values")
    tags: list[str] = Field(default_factory=list, description="Free-form labels")

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def validate_structure(self) -> "FactSchema":
        if not self.checks:
            raise ValueError(f"Fact '{self.name}' has no checks")
        return self


class FactPackSchema(BaseModel):
    """
    Root schema for a fact pack file.
    """
    schema_version: str = Field(SCHEMA_VERSION, description="Schema version")
    name: str = Field(..., min_length=1, description="Pack name")
    description: Optional[str] = Field(None, description="Pack description")
    facts: list[FactSchema] = Field(..., min_length=1, description="Facts in the pack")

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def validate_unique_names(self) -> "FactPackSchema":
        seen: set[str] = set()
        for fact_schema in self.facts:
            if fact_schema.name in seen:
                raise ValueError(f"Duplicate fact name: '{fact_schema.name}'")
            seen.add(fact_schema.name)
        return self


# =============================================================================
# Validation Functions
# =============================================================================

def validate_fact_pack(data: dict[str, Any]) -> FactPackSchema:
    """
    Validate a fact pack dictionary against the schema.

    Args:
        data: Dictionary loaded from YAML/JSON

    Returns:
        Validated FactPackSchema

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return FactPackSchema.model_validate(data)


def check_schema_version(data: dict[str, Any]) -> bool:
    """
    Check if a fact pack's schema version is compatible.

    Only the major version has to match.
    """
    pack_version = str(data.get("schema_version", SCHEMA_VERSION))
    return pack_version.split(".")[0] == SCHEMA_VERSION.split(".")[0]
