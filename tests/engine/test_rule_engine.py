"""
Tests for the RuleEngine facade.
"""

from __future__ import annotations

import pytest

from ruleweave.builder import Builder, RuleBuilder
from ruleweave.core.config import RuleweaveSettings
from ruleweave.engine import RuleEngine, get_rule_engine, reset_rule_engine
from ruleweave.errors import RuleError, RuleTypeError

ADULT_RULE = {
    "conditions": {
        "and": [{"field": "age", "operator": "greater-than-or-equals", "value": 18}],
        "result": {"value": "adult"},
    },
    "default": {"value": "minor"},
}

INVALID_RULE = {"conditions": {"and": [{"field": "age", "operator": "older-than", "value": 18}]}}


class TestEvaluate:
    """Test evaluation through the engine."""

    def test_evaluate(self, engine):
        assert engine.evaluate(ADULT_RULE, {"age": 30}).value == "adult"
        assert engine.evaluate(ADULT_RULE, {"age": 10}).value == "minor"

    def test_check_is_passed(self, engine):
        assert engine.check_is_passed(ADULT_RULE, {"age": 30}) is True
        assert engine.check_is_passed(ADULT_RULE, [{"age": 30}, {"age": 10}]) is False

    def test_check_is_passed_list_rule(self, engine):
        rule = {
            "conditions": [
                {"and": [{"field": "age", "operator": "greater-than", "value": 18}]},
                {"and": [{"field": "age", "operator": "less-than", "value": 65}]},
            ]
        }
        assert engine.check_is_passed(rule, {"age": 30}) is True
        assert engine.check_is_passed(rule, {"age": 70}) is False

    def test_get_evaluate_result(self, engine):
        assert engine.get_evaluate_result(ADULT_RULE, {"age": 30}) == "adult"
        assert engine.get_evaluate_result(ADULT_RULE, [{"age": 30}, {"age": 1}]) == ["adult", "minor"]

    def test_evaluate_multiple(self, engine):
        other = {"conditions": {"or": [{"field": "age", "operator": "equals", "value": 99}]}}
        results = engine.evaluate_multiple([ADULT_RULE, other], {"age": 30})
        assert [r.is_passed for r in results] == [True, False]

    def test_evaluate_first(self, engine):
        table = {
            "conditions": [
                {"and": [{"field": "score", "operator": "min", "value": 90}], "result": "A"},
                {"and": [{"field": "score", "operator": "min", "value": 80}], "result": "B"},
            ],
            "default": "C",
        }
        assert engine.evaluate_first(table, {"score": 85}).value == "B"
        assert engine.evaluate_first(table, {"score": 10}).value == "C"


class TestValidationGate:
    """Test validation before evaluation."""

    def test_invalid_rule_raises(self, engine):
        with pytest.raises(RuleError) as exc_info:
            engine.evaluate(INVALID_RULE, {"age": 30})
        assert exc_info.value.is_valid is False
        assert exc_info.value.element == INVALID_RULE["conditions"]["and"][0]

    def test_trusted_rule_skips_validation(self, engine):
        result = engine.evaluate(INVALID_RULE, {"age": 30}, trust_rule=True)
        assert result.is_passed is False
        assert result.error.startswith("Invalid operator: older-than.")

    def test_trust_setting(self, registry):
        engine = RuleEngine(registry=registry, settings=RuleweaveSettings(trust_rules=True))
        assert engine.evaluate(INVALID_RULE, {"age": 30}).is_passed is False

    def test_trust_from_environment(self, monkeypatch, registry):
        from ruleweave.core.config import reset_settings

        monkeypatch.setenv("RULEWEAVE_TRUST_RULES", "true")
        reset_settings()
        engine = RuleEngine(registry=registry)
        assert engine.check_is_passed(INVALID_RULE, {"age": 30}) is False

    def test_error_to_dict(self, engine):
        with pytest.raises(RuleError) as exc_info:
            engine.evaluate({"conditions": []}, {})
        assert exc_info.value.to_dict() == {
            "is_valid": False,
            "error": {
                "message": "The conditions property must contain at least one condition.",
                "element": {"conditions": []},
            },
        }

    def test_validate(self, engine):
        assert engine.validate(ADULT_RULE).is_valid
        assert not engine.validate(INVALID_RULE).is_valid


class TestMutations:
    """Test mutations applied before evaluation."""

    def test_mutation_applied(self, engine):
        rule = {"conditions": {"and": [{"field": "country", "operator": "equals", "value": "US"}]}}
        data = {"country": "us"}
        assert engine.check_is_passed(rule, data) is False
        engine.add_mutation("country", lambda value, criteria: value.upper())
        assert engine.check_is_passed(rule, data) is True
        assert data == {"country": "us"}

    def test_remove_mutation(self, engine):
        rule = {"conditions": {"and": [{"field": "n", "operator": "equals", "value": 2}]}}
        engine.add_mutation("n", lambda value, criteria: value * 2)
        assert engine.check_is_passed(rule, {"n": 1})
        engine.remove_mutation("n").clear_mutation_cache()
        assert not engine.check_is_passed(rule, {"n": 1})

    def test_chaining(self, engine):
        assert engine.add_mutation("a", lambda v, d: v) is engine


class TestIntrospect:
    """Test introspection through the engine."""

    def test_introspect(self, engine):
        result = engine.introspect(ADULT_RULE)
        assert result.results[0].result.value == "adult"
        assert result.default.value == "minor"

    def test_invalid_rule(self, engine):
        with pytest.raises(RuleError):
            engine.introspect(INVALID_RULE)

    def test_not_granular(self, engine):
        with pytest.raises(RuleTypeError):
            engine.introspect({"conditions": {"and": []}})


class TestBuilders:
    """Test builder factories."""

    def test_builder_uses_engine_validator(self, engine):
        builder = engine.builder()
        assert isinstance(builder, Builder)
        builder.add(builder.condition("and", [builder.constraint("age", "older-than", 1)]))
        with pytest.raises(RuleError):
            builder.build(validate=True)

    def test_type_safe_builder(self, engine):
        builder = engine.type_safe_builder(["age"])
        assert isinstance(builder, RuleBuilder)
        rule = builder.field("age").operator("greater-than").value(18).build()
        assert engine.check_is_passed(rule, {"age": 30})


class TestGlobalEngine:
    """Test the shared engine."""

    def test_singleton(self):
        assert get_rule_engine() is get_rule_engine()

    def test_reset(self):
        first = get_rule_engine()
        reset_rule_engine()
        assert get_rule_engine() is not first

    def test_uses_global_registry(self):
        from ruleweave.operators.registry import get_operator_registry

        assert get_rule_engine().registry is get_operator_registry()
