"""
Tests for factkit Fact Packs

Tests verify:
1. Packs load from YAML and JSON files and strings
2. Value forms (metavar, checker, function, exactly) convert correctly
3. Schema validation and reference resolution errors
4. Schema version compatibility
5. Loaded facts evaluate like hand-written ones
"""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from factkit import evaluate_fact
from factkit.exceptions import (
    FactPackLoadError,
    FactPackValidationError,
    FactPackVersionMismatch,
)
from factkit.models import (
    CheckerRegistry,
    DeferredCall,
    ExactReferenceCheck,
    InAnyOrderCheck,
    MetavarRef,
    matches,
    truthy,
)
from factkit.packs import (
    SCHEMA_VERSION,
    FactPackLoader,
    check_schema_version,
    convert_value,
    import_object,
    load_fact_pack,
    load_fact_pack_from_string,
    resolve_mockable,
    validate_fact_pack,
)

from tests.fixtures.sweet import g, g_adder, inc, is_odd, neighbor_count


PACKS_DIR = Path(__file__).parent / "fixtures" / "packs"


def minimal_pack(**fact_fields) -> dict:
    """A one-fact pack dictionary."""
    fact_data = {
        "name": "g-adder",
        "checks": [{"call": "tests.fixtures.sweet:g_adder", "args": [2, 3], "expected": 11}],
        "provided": [
            {"function": "tests.fixtures.sweet.g", "args": [2], "returns": 4},
            {"function": "tests.fixtures.sweet.g", "args": [3], "returns": 7},
        ],
    }
    fact_data.update(fact_fields)
    return {"schema_version": SCHEMA_VERSION, "name": "pack", "facts": [fact_data]}


# =============================================================================
# Loading Tests
# =============================================================================

class TestFactPackLoading:
    """Tests for loading packs from files and strings."""

    def test_yaml_pack_loads(self):
        definitions = load_fact_pack(PACKS_DIR / "collaborators.yaml")
        assert [d.name for d in definitions] == [
            "g-adder sums collaborator results",
            "subfunctions are called with matching arguments",
            "cells with three neighbors come alive",
        ]
        assert definitions[1].tags == frozenset({"matchers"})

    def test_yaml_pack_facts_pass(self):
        for definition in load_fact_pack(PACKS_DIR / "collaborators.yaml"):
            result = evaluate_fact(definition)
            assert result.passed, result.to_json(indent=2)

    def test_json_file(self, tmp_path):
        path = tmp_path / "pack.json"
        path.write_text(json.dumps(minimal_pack()))
        [definition] = load_fact_pack(path)
        assert evaluate_fact(definition).passed

    def test_from_string(self):
        [definition] = load_fact_pack_from_string(json.dumps(minimal_pack()), format="json")
        assert definition.assertions[0].actual.fn is g_adder
        assert definition.provided[0].target is g

    def test_loader_remembers_packs(self, tmp_path):
        path = tmp_path / "pack.yaml"
        path.write_text(json.dumps(minimal_pack()))
        loader = FactPackLoader()
        loader.load(path)
        assert loader.list_packs() == ["pack"]
        assert len(loader.get_pack("pack")) == 1
        assert loader.get_pack("other") is None

    def test_duplicate_pack_name_rejected(self):
        loader = FactPackLoader()
        loader.load_data(minimal_pack())
        with pytest.raises(FactPackValidationError) as exc_info:
            loader.load_data(minimal_pack())
        assert exc_info.value.details["pack"] == "pack"
        assert len(loader.get_pack("pack")) == 1

    def test_same_name_in_separate_loaders(self):
        assert len(FactPackLoader().load_data(minimal_pack())) == 1
        assert len(FactPackLoader().load_data(minimal_pack())) == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(FactPackLoadError) as exc_info:
            load_fact_pack(tmp_path / "nope.yaml")
        assert exc_info.value.code == "FK_PACK_LOAD_ERROR"

    def test_unparseable_string(self):
        with pytest.raises(FactPackLoadError):
            load_fact_pack_from_string("{not json", format="json")


# =============================================================================
# Value Form Tests
# =============================================================================

class TestValueForms:
    """Tests for convert_value."""

    @pytest.fixture
    def registry(self):
        return CheckerRegistry.with_defaults()

    def test_literals_unchanged(self, registry):
        assert convert_value([1, "a", {"k": None}], registry) == [1, "a", {"k": None}]

    def test_metavar(self, registry):
        assert convert_value({"metavar": "...cell..."}, registry) == MetavarRef("cell")

    def test_checker(self, registry):
        checker = convert_value({"checker": "in_any_order", "args": [[1, 2]]}, registry)
        assert isinstance(checker, InAnyOrderCheck)
        assert matches([2, 1], checker)
        assert convert_value({"checker": "truthy"}, registry) is truthy

    def test_function(self, registry):
        assert convert_value({"function": "tests.fixtures.sweet:is_odd"}, registry) is is_odd
        assert convert_value({"function": "tests.fixtures.sweet.is_odd"}, registry) is is_odd

    def test_exactly(self, registry):
        checker = convert_value({"exactly": "tests.fixtures.sweet:inc"}, registry)
        assert isinstance(checker, ExactReferenceCheck)
        assert checker.target is inc

    def test_nested_forms(self, registry):
        value = convert_value({"cells": [{"metavar": "a"}]}, registry)
        assert value == {"cells": [MetavarRef("a")]}

    def test_custom_registry(self, tmp_path):
        registry = CheckerRegistry.with_defaults()
        registry.register("positive", lambda n: n > 0)
        pack = minimal_pack(checks=[{
            "call": "tests.fixtures.sweet:g_adder",
            "args": [2, 3],
            "expected": {"checker": "positive"},
        }])
        [definition] = FactPackLoader(checkers=registry).load_data(pack)
        assert evaluate_fact(definition).passed

    @pytest.mark.parametrize("at_least,passed", [(2, True), (3, False)])
    def test_times_at_least(self, at_least, passed):
        pack = minimal_pack(
            checks=[{"call": "tests.fixtures.sweet:g_adder", "args": [2, 3], "expected": 10}],
            provided=[
                {"function": "tests.fixtures.sweet.g", "args": [{"checker": "anything"}],
                 "returns": 5, "times": {"at_least": at_least}},
            ],
        )
        [definition] = FactPackLoader().load_data(pack)
        result = evaluate_fact(definition)
        assert result.passed is passed
        assert result.expectation_results[0].trigger_count == 2
        if not passed:
            assert result.unsatisfied_expectations[0].message == (
                "(tests.fixtures.sweet.g anything) should be called at least 3 times, was called 2."
            )

    def test_times_range(self):
        pack = minimal_pack(provided=[
            {"function": "tests.fixtures.sweet.g", "args": [2], "returns": 4, "times": {"at_most": 1}},
            {"function": "tests.fixtures.sweet.g", "args": [3], "returns": 7, "times": 1},
        ])
        [definition] = FactPackLoader().load_data(pack)
        assert definition.provided[0].times == range(0, 2)
        assert evaluate_fact(definition).passed


# =============================================================================
# Reference Resolution Tests
# =============================================================================

class TestReferences:
    """Tests for import paths and mockable targets."""

    def test_import_object(self):
        assert import_object("tests.fixtures.sweet:g_adder") is g_adder
        assert import_object("tests.fixtures.sweet.g_adder") is g_adder

    @pytest.mark.parametrize("path", ["nomodule", "tests.fixtures.sweet:missing", "no.such.module:x"])
    def test_bad_import_paths(self, path):
        with pytest.raises(ValueError):
            import_object(path)

    def test_resolve_mockable_by_id(self):
        assert resolve_mockable("tests.fixtures.sweet.neighbor_count") is neighbor_count

    def test_resolve_plain_function_rejected(self):
        with pytest.raises(ValueError):
            resolve_mockable("tests.fixtures.sweet.inc")

    def test_unresolvable_references_reported_together(self):
        pack = minimal_pack(
            checks=[{"call": "tests.fixtures.sweet:missing", "expected": 1}],
            provided=[{"function": "tests.fixtures.sweet.inc", "args": [1]}],
        )
        with pytest.raises(FactPackValidationError) as exc_info:
            FactPackLoader().load_data(pack)
        assert exc_info.value.code == "FK_PACK_VALIDATION_ERROR"
        assert len(exc_info.value.details["errors"]) == 1
        assert "g-adder" in exc_info.value.details["errors"][0]

    def test_unknown_checker_reported(self):
        pack = minimal_pack(checks=[{
            "call": "tests.fixtures.sweet:g_adder", "args": [2, 3], "expected": {"checker": "nope"},
        }])
        with pytest.raises(FactPackValidationError):
            FactPackLoader().load_data(pack)


# =============================================================================
# Schema Validation Tests
# =============================================================================

class TestSchemaValidation:
    """Tests for pydantic schema validation."""

    def test_valid_pack(self):
        schema = validate_fact_pack(minimal_pack())
        assert schema.facts[0].checks[0].args == [2, 3]

    def test_unknown_field_rejected(self):
        pack = minimal_pack()
        pack["facts"][0]["surprise"] = True
        with pytest.raises(FactPackValidationError) as exc_info:
            FactPackLoader().load_data(pack)
        assert exc_info.value.details["errors"]

    def test_fact_without_checks_rejected(self):
        with pytest.raises(FactPackValidationError):
            FactPackLoader().load_data(minimal_pack(checks=[]))

    def test_empty_pack_rejected(self):
        with pytest.raises(FactPackValidationError):
            FactPackLoader().load_data({"name": "empty", "facts": []})

    def test_duplicate_fact_names_rejected(self):
        pack = minimal_pack()
        pack["facts"].append(dict(pack["facts"][0]))
        with pytest.raises(FactPackValidationError):
            FactPackLoader().load_data(pack)

    @pytest.mark.parametrize("times", [-1, True, {}, {"at_least": 3, "at_most": 1}])
    def test_invalid_times_rejected(self, times):
        pack = minimal_pack(provided=[
            {"function": "tests.fixtures.sweet.g", "args": [2], "returns": 4, "times": times},
        ])
        with pytest.raises(FactPackValidationError):
            FactPackLoader().load_data(pack)

    def test_non_mapping_rejected(self):
        with pytest.raises(FactPackValidationError):
            FactPackLoader().load_data(["not", "a", "pack"])

    def test_deferred_call_built(self):
        [definition] = FactPackLoader().load_data(minimal_pack())
        actual = definition.assertions[0].actual
        assert isinstance(actual, DeferredCall)
        assert actual.args == (2, 3)


# =============================================================================
# Version Tests
# =============================================================================

class TestSchemaVersion:
    """Tests for schema version compatibility."""

    def test_same_major_compatible(self):
        assert check_schema_version({"schema_version": "1.4.2"})
        assert check_schema_version({})

    def test_other_major_incompatible(self):
        assert not check_schema_version({"schema_version": "2.0.0"})

    def test_strict_loader_rejects(self):
        pack = minimal_pack()
        pack["schema_version"] = "2.0.0"
        with pytest.raises(FactPackVersionMismatch) as exc_info:
            FactPackLoader(strict_version=True).load_data(pack)
        assert exc_info.value.details["pack_version"] == "2.0.0"

    def test_lenient_loader_accepts(self):
        pack = minimal_pack()
        pack["schema_version"] = "2.0.0"
        assert len(FactPackLoader(strict_version=False).load_data(pack)) == 1
