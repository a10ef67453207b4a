"""
Tests for rule structure validation.
"""

from __future__ import annotations

import pytest

from ruleweave.engine.validator import LIST_VALUE_OPERATORS, RuleValidator
from ruleweave.models import Condition, Constraint, Rule


@pytest.fixture
def validator(registry):
    return RuleValidator(registry)


AGE_CHECK = {"field": "age", "operator": "greater-than", "value": 18}


class TestRuleShape:
    """Test top-level rule checks."""

    def test_valid_rule(self, validator):
        result = validator.validate({"conditions": {"and": [AGE_CHECK]}})
        assert result.is_valid
        assert result.to_dict() == {"is_valid": True}

    @pytest.mark.parametrize("rule", [None, "rule", [AGE_CHECK], 42])
    def test_not_an_object(self, validator, rule):
        result = validator.validate(rule)
        assert result.is_valid is False
        assert result.message == "The rule must be a valid JSON object."

    @pytest.mark.parametrize("rule", [{}, {"conditions": []}, {"conditions": {}}, {"conditions": [{}]}])
    def test_no_conditions(self, validator, rule):
        result = validator.validate(rule)
        assert result.is_valid is False
        assert result.message == "The conditions property must contain at least one condition."

    def test_dataclass_rule(self, validator):
        rule = Rule(conditions=Condition("and", [Constraint("age", "greater-than", 18)]))
        assert validator.validate(rule).is_valid


class TestConditionShape:
    """Test condition checks."""

    def test_not_a_condition(self, validator):
        result = validator.validate({"conditions": [AGE_CHECK]})
        assert result.is_valid is False
        assert result.message == "Invalid condition structure."
        assert result.element == AGE_CHECK

    def test_multiple_combinators(self, validator):
        condition = {"and": [], "or": []}
        result = validator.validate({"conditions": condition})
        assert result.message == 'A condition cannot have more than one "and", "or", or "none" property.'
        assert result.element == condition

    def test_children_must_be_list(self, validator):
        result = validator.validate({"conditions": {"or": AGE_CHECK}})
        assert result.message == "The condition 'or' should be iterable."

    def test_bad_node(self, validator):
        result = validator.validate({"conditions": {"and": [AGE_CHECK, "age > 18"]}})
        assert result.message == "Each node should be a condition or constraint."
        assert result.element == "age > 18"

    def test_nested_problem_reported(self, validator):
        bad = {"field": "age", "operator": "older-than", "value": 18}
        result = validator.validate({"conditions": {"or": [{"and": [AGE_CHECK, bad]}]}})
        assert result.is_valid is False
        assert result.element == bad

    def test_empty_groups_are_valid(self, validator):
        assert validator.validate({"conditions": [{"and": []}, {"or": []}, {"none": []}]}).is_valid


class TestConstraintShape:
    """Test constraint checks."""

    def test_field_must_be_string(self, validator):
        result = validator.validate_constraint({"field": 1, "operator": "equals", "value": 1})
        assert result.message == 'Constraint "field" must be of type string.'

    def test_unknown_operator_lists_valid(self, validator, registry):
        result = validator.validate_constraint({"field": "a", "operator": "Equals", "value": 1})
        assert result.message.startswith('Constraint "operator" with value Equals is invalid. Valid operators are ')
        assert ",".join(registry.get_operator_names()) in result.message

    @pytest.mark.parametrize("operator", LIST_VALUE_OPERATORS)
    def test_list_operators_need_list(self, validator, operator):
        result = validator.validate_constraint({"field": "a", "operator": operator, "value": "x"})
        assert result.is_valid is False
        assert result.message.startswith('Constraint "value" must be an array if the "operator" is in ')

    def test_invalid_regex(self, validator):
        """A bad pattern makes the rule invalid without raising."""
        result = validator.validate_constraint({"field": "a", "operator": "matches", "value": "[a-"})
        assert result.is_valid is False
        assert result.message.startswith('Constraint "value" must be a valid regular expression')

    def test_valid_regex(self, validator):
        assert validator.validate_constraint({"field": "a", "operator": "matches", "value": "/^a+$/"}).is_valid

    def test_failure_to_dict(self, validator):
        constraint = {"field": 1, "operator": "equals"}
        data = validator.validate({"conditions": {"and": [constraint]}}).to_dict()
        assert data == {
            "is_valid": False,
            "error": {"message": 'Constraint "field" must be of type string.', "element": constraint},
        }

    def test_uses_registry(self):
        from ruleweave.operators.registry import OperatorRegistry

        validator = RuleValidator(OperatorRegistry())
        assert not validator.validate({"conditions": {"and": [AGE_CHECK]}}).is_valid
