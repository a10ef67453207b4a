"""
Tests for the operator registry.
"""

from __future__ import annotations

import pytest

from ruleweave.errors import OperatorRegistrationError, UnknownOperatorError
from ruleweave.operators.base import BaseOperator, OperatorCategory, OperatorContext, OperatorMetadata
from ruleweave.operators.comparison import EqualsOperator
from ruleweave.operators.registry import (
    NEGATIONS,
    OperatorRegistry,
    get_operator_registry,
    register_custom_operator,
    reset_registry,
)


class EvenOperator(BaseOperator):
    metadata = OperatorMetadata(
        name="even",
        display_name="Is Even",
        category=OperatorCategory.NUMERIC,
        description="Checks if the field value is an even integer",
        accepted_field_types=("number",),
        expected_value_type="void",
        requires_value=False,
    )

    def check(self, context: OperatorContext) -> bool:
        return context.field_value % 2 == 0


class TestRegistration:
    """Test registering and removing operators."""

    def test_register_returns_name(self):
        registry = OperatorRegistry()
        assert registry.register(EqualsOperator) == "equals"
        assert "equals" in registry
        assert len(registry) == 1

    def test_duplicate_raises(self):
        registry = OperatorRegistry()
        registry.register(EqualsOperator)
        with pytest.raises(OperatorRegistrationError, match="equals"):
            registry.register(EqualsOperator)

    def test_override_replaces(self):
        registry = OperatorRegistry()
        registry.register(EqualsOperator)
        registry.register(EqualsOperator, override=True)
        assert len(registry) == 1

    def test_factory_callable(self):
        registry = OperatorRegistry()
        registry.register(lambda: EvenOperator())
        assert registry.require("even").evaluate(OperatorContext(4)) is True

    def test_non_operator_rejected(self):
        registry = OperatorRegistry()
        with pytest.raises(TypeError):
            registry.register(dict)

    def test_unregister(self):
        registry = OperatorRegistry()
        registry.register(EqualsOperator)
        assert registry.unregister("equals") is True
        assert registry.unregister("equals") is False
        assert registry.get("equals") is None

    def test_empty_registry_is_falsy_but_usable(self):
        registry = OperatorRegistry()
        assert not registry
        assert registry.get_operator_names() == []


class TestLookup:
    """Test lookups against the built-in operators."""

    def test_get_returns_fresh_instance(self, registry):
        assert registry.get("equals") is not registry.get("equals")

    def test_require_unknown(self, registry):
        with pytest.raises(UnknownOperatorError) as exc_info:
            registry.require("Equals")
        assert str(exc_info.value) == (
            "Invalid operator: Equals. Please provide a valid operator. "
            "The operator is case-sensitive."
        )

    def test_get_by_category(self, registry):
        names = registry.get_by_category(OperatorCategory.COMPARISON)
        assert "equals" in names
        assert registry.get_by_category("comparison") == names

    def test_get_by_field_type(self, registry):
        names = registry.get_by_field_type("array")
        assert "contains" in names
        assert "equals" not in names

    def test_get_negated_operator(self, registry):
        assert registry.get_negated_operator("greater-than") == "less-than-or-equals"
        assert registry.get_negated_operator("date-after") == "date-before-or-equals"
        assert registry.get_negated_operator("uuid") is None

    def test_negation_requires_registration(self):
        registry = OperatorRegistry()
        registry.register(EqualsOperator)
        assert registry.get_negated_operator("equals") is None

    def test_export_metadata(self, registry):
        exported = registry.export_metadata()
        assert exported["equals"]["category"] == "comparison"
        assert isinstance(exported["equals"]["accepted_field_types"], list)

    def test_stats(self, registry):
        stats = registry.get_stats()
        assert stats["registered"] == len(registry)
        assert stats["categories"]["persian"] == 4
        assert stats["negatable"] == len(NEGATIONS)


class TestBuiltins:
    """Test the built-in operator set."""

    def test_metadata_complete(self, registry):
        """Every operator has a name, display name and description."""
        for name, meta in registry.get_all().items():
            assert meta.name == name
            assert meta.display_name
            assert meta.description

    def test_negations_are_symmetric(self):
        for name, negated in NEGATIONS.items():
            assert NEGATIONS[negated] == name


class TestGlobalRegistry:
    """Test the lazily created global registry."""

    def test_lazy_singleton(self):
        first = get_operator_registry()
        assert first is get_operator_registry()
        assert "equals" in first

    def test_reset(self):
        first = get_operator_registry()
        reset_registry()
        assert get_operator_registry() is not first

    def test_register_custom_operator(self):
        assert register_custom_operator(EvenOperator) == "even"
        assert get_operator_registry().has("even")
