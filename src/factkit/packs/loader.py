"""
factkit Fact Pack Loader

Loads and validates fact packs from YAML or JSON files.

Converts Pydantic schema models to FactDefinitions. Function references are
imported ('module:attr' or dotted paths); provided-clause targets must be
mockable functions.
"""
from __future__ import annotations

import importlib
import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from ..config import FACTKIT_STRICT_PACK_VERSION
from ..exceptions import (
    FactKitError,
    FactPackLoadError,
    FactPackValidationError,
    FactPackVersionMismatch,
)
from ..engine.mock_registry import Mockable, get_mockable
from ..models import (
    Assertion,
    CheckerRegistry,
    FactDefinition,
    MetavarRef,
    PredicateCheck,
    ProvidedClause,
    default_registry,
    exactly,
)
from ..models.fact import DeferredCall
from .schema import (
    SCHEMA_VERSION,
    VALUE_FORMS,
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

logger = logging.getLogger(__name__)


# =============================================================================
# Reference Resolution
# =============================================================================

def import_object(path: str) -> Any:
    """
    Import an object from 'package.module:attr.sub' or 'package.module.attr'.

    Raises:
        ValueError: If the module or attribute cannot be found
    """
    if ":" in path:
        module_name, _, attr_path = path.partition(":")
    else:
        module_name, _, attr_path = path.rpartition(".")
    if not module_name or not attr_path:
        raise ValueError(f"'{path}' is not an import path")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ValueError(f"Cannot import module '{module_name}': {e}") from e

    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError as e:
            raise ValueError(f"'{module_name}' has no attribute '{attr_path}'") from e
    return obj


def resolve_mockable(path: str) -> Mockable:
    """
    Find a mockable by function id, falling back to importing it.

    Raises:
        ValueError: If the reference is not a mockable function
    """
    mock = get_mockable(path)
    if mock is not None:
        return mock
    obj = import_object(path)
    if not isinstance(obj, Mockable):
        raise ValueError(f"'{path}' is not a mockable function")
    return obj


# =============================================================================
# Schema to Model Converters
# =============================================================================

def _form_of(value: dict[str, Any]) -> Optional[str]:
    """Name of the value form a dict uses, if any."""
    for key in VALUE_FORMS:
        if key in value:
            if key == "checker" and set(value) <= {"checker", "args", "kwargs"}:
                return key
            if len(value) == 1:
                return key
    return None


def convert_value(value: Any, checkers: CheckerRegistry) -> Any:
    """Convert a pack value (literal or value form) to its runtime value."""
    if isinstance(value, list):
        return [convert_value(item, checkers) for item in value]
    if not isinstance(value, dict):
        return value

    form = _form_of(value)
    if form is None:
        return {key: convert_value(item, checkers) for key, item in value.items()}

    spec = VALUE_FORMS[form].model_validate(value)
    if isinstance(spec, MetavarValueSchema):
        return MetavarRef(spec.metavar.strip("."))
    if isinstance(spec, CheckerValueSchema):
        args = [convert_value(arg, checkers) for arg in spec.args]
        kwargs = {k: convert_value(v, checkers) for k, v in spec.kwargs.items()}
        return checkers.build(spec.checker, *args, **kwargs)
    if isinstance(spec, FunctionValueSchema):
        return import_object(spec.function)
    if isinstance(spec, ExactlyValueSchema):
        return exactly(import_object(spec.exactly))
    raise ValueError(f"Unsupported value form: {form}")


def _convert_times(times: Union[int, TimesSchema, None]) -> Any:
    if times is None or isinstance(times, int):
        return times
    if times.at_most is not None:
        return range(times.at_least or 0, times.at_most + 1)
    minimum = times.at_least
    return PredicateCheck(lambda count: count >= minimum, name=f"at least {minimum}")


def _convert_check(schema: CheckSchema, checkers: CheckerRegistry) -> Assertion:
    fn = import_object(schema.call)
    if not callable(fn):
        raise ValueError(f"'{schema.call}' is not callable")
    return Assertion(
        actual=DeferredCall(
            fn,
            tuple(convert_value(arg, checkers) for arg in schema.args),
            {k: convert_value(v, checkers) for k, v in schema.kwargs.items()},
        ),
        expected=convert_value(schema.expected, checkers),
        description=schema.description,
    )


def _convert_provided(schema: ProvidedSchema, checkers: CheckerRegistry) -> ProvidedClause:
    return ProvidedClause(
        target=resolve_mockable(schema.function),
        args=tuple(convert_value(arg, checkers) for arg in schema.args),
        kwargs={k: convert_value(v, checkers) for k, v in schema.kwargs.items()},
        returns=convert_value(schema.returns, checkers),
        times=_convert_times(schema.times),
        description=schema.description,
    )


def _convert_fact(schema: FactSchema, checkers: CheckerRegistry) -> FactDefinition:
    return FactDefinition(
        name=schema.name,
        assertions=tuple(_convert_check(c, checkers) for c in schema.checks),
        provided=tuple(_convert_provided(p, checkers) for p in schema.provided),
        bindings={k: convert_value(v, checkers) for k, v in schema.bindings.items()},
        description=schema.description,
        tags=frozenset(schema.tags),
    )


def _convert_fact_pack(
    schema: FactPackSchema,
    checkers: CheckerRegistry,
    path: str = "",
) -> list[FactDefinition]:
    """Convert every fact, collecting reference errors across the pack."""
    definitions = []
    errors = []
    for fact_schema in schema.facts:
        try:
            definitions.append(_convert_fact(fact_schema, checkers))
        except (ValueError, ValidationError, FactKitError) as e:
            errors.append(f"Fact '{fact_schema.name}': {e}")

    if errors:
        path_str = f" in {path}" if path else ""
        raise FactPackValidationError(
            message=f"Reference resolution failed{path_str}: {len(errors)} errors",
            details={"errors": errors, "path": path},
        )
    return definitions


# =============================================================================
# Fact Pack Loader
# =============================================================================

class FactPackLoader:
    """
    Loads fact packs from YAML or JSON files.

    Usage:
        loader = FactPackLoader()
        definitions = loader.load("path/to/facts.yaml")
        results = [evaluate_fact(d) for d in definitions]
    """

    def __init__(
        self,
        strict_version: bool = FACTKIT_STRICT_PACK_VERSION,
        checkers: Optional[CheckerRegistry] = None,
    ):
        """
        Initialize the loader.

        Args:
            strict_version: If True, reject packs with incompatible schema versions
            checkers: Registry for {checker: ...} values (default registry if None)
        """
        self.strict_version = strict_version
        self.checkers = checkers if checkers is not None else default_registry
        self._packs: dict[str, list[FactDefinition]] = {}

    def load(self, path: Union[str, Path]) -> list[FactDefinition]:
        """
        Load a fact pack from a file.

        Args:
            path: Path to YAML or JSON file

        Returns:
            FactDefinitions in file order

        Raises:
            FactPackLoadError: If file cannot be read
            FactPackValidationError: If validation fails
            FactPackVersionMismatch: If schema version incompatible
        """
        path = Path(path)

        try:
            data = self._load_file(path)
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise FactPackLoadError(
                message=f"Failed to load fact pack: {e}",
                details={"path": str(path), "error": str(e)},
            ) from e

        definitions = self.load_data(data, str(path))
        logger.debug("Loaded %d facts from %s", len(definitions), path)
        return definitions

    def load_data(self, data: Any, path: str = "") -> list[FactDefinition]:
        """Validate and convert already-parsed pack data."""
        if not isinstance(data, dict):
            raise FactPackValidationError(
                message="Fact pack must be a mapping",
                details={"path": path, "type": type(data).__name__},
            )

        if self.strict_version and not check_schema_version(data):
            pack_version = data.get("schema_version", "unknown")
            raise FactPackVersionMismatch(
                message=f"Schema version mismatch: pack has {pack_version}, expected {SCHEMA_VERSION}",
                details={
                    "pack_version": pack_version,
                    "expected_version": SCHEMA_VERSION,
                },
            )

        try:
            schema = validate_fact_pack(data)
        except ValidationError as e:
            raise FactPackValidationError(
                message=f"Fact pack validation failed: {e.error_count()} errors",
                details={"errors": e.errors(), "path": path},
            ) from e

        if schema.name in self._packs:
            raise FactPackValidationError(
                message=f"Duplicate pack name: '{schema.name}'",
                details={"pack": schema.name, "path": path},
            )

        definitions = _convert_fact_pack(schema, self.checkers, path)
        self._packs[schema.name] = definitions
        return definitions

    def _load_file(self, path: Path) -> Any:
        """Load data from YAML or JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() in {".yaml", ".yml"}:
                return yaml.safe_load(f)
            elif path.suffix.lower() == ".json":
                return json.load(f)
            else:
                content = f.read()
                try:
                    return yaml.safe_load(content)
                except yaml.YAMLError:
                    return json.loads(content)

    def get_pack(self, name: str) -> Optional[list[FactDefinition]]:
        """Get the definitions of a loaded pack by name."""
        return self._packs.get(name)

    def list_packs(self) -> list[str]:
        """List names of all loaded packs."""
        return list(self._packs.keys())


# =============================================================================
# Convenience Functions
# =============================================================================

def load_fact_pack(path: Union[str, Path]) -> list[FactDefinition]:
    """Load a fact pack from a file with a temporary loader."""
    return FactPackLoader().load(path)


def load_fact_pack_from_string(
    content: str,
    format: str = "yaml",
) -> list[FactDefinition]:
    """
    Load a fact pack from a string.

    Args:
        content: YAML or JSON string
        format: "yaml" or "json"

    Returns:
        FactDefinitions in pack order
    """
    try:
        if format.lower() == "json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise FactPackLoadError(
            message=f"Failed to parse fact pack: {e}",
            details={"format": format, "error": str(e)},
        ) from e
    return FactPackLoader().load_data(data)
