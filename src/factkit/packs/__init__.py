"""
factkit Fact Packs

Schema validation and loading for fact packs.

Fact packs are YAML or JSON files declaring facts as plain data: checks
(call + expected) and provided clauses against mockable functions.

Usage:
    from factkit.packs import load_fact_pack, FactPackLoader

    definitions = load_fact_pack("path/to/facts.yaml")

    # A loader with its own checker registry
    registry = CheckerRegistry.with_defaults()
    registry.register("positive", lambda n: n > 0)
    loader = FactPackLoader(checkers=registry)
    definitions = loader.load("path/to/facts.yaml")
"""
from __future__ import annotations

from .loader import (
    FactPackLoader,
    convert_value,
    import_object,
    load_fact_pack,
    load_fact_pack_from_string,
    resolve_mockable,
)
from .schema import (
    SCHEMA_VERSION,
    CheckerValueSchema,
    CheckSchema,
    ExactlyValueSchema,
    FactPackSchema,
    FactSchema,
    FunctionValueSchema,
    MetavarValueSchema,
    ProvidedSchema,
    TimesSchema,
    check_schema_version,
    validate_fact_pack,
)

__all__ = [
    # Version
    "SCHEMA_VERSION",
    # Loader
    "FactPackLoader",
    "load_fact_pack",
    "load_fact_pack_from_string",
    "convert_value",
    "import_object",
    "resolve_mockable",
    # Validation
    "validate_fact_pack",
    "check_schema_version",
    # Schemas (for advanced usage)
    "FactPackSchema",
    "FactSchema",
    "CheckSchema",
    "ProvidedSchema",
    "TimesSchema",
    "MetavarValueSchema",
    "CheckerValueSchema",
    "FunctionValueSchema",
    "ExactlyValueSchema",
]
