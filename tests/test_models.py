"""
Tests for rule tree models and errors.
"""

from __future__ import annotations

import copy
import pickle

import pytest

from ruleweave.core.constants import MISSING, ConditionType
from ruleweave.errors import RuleError, RuleTypeError
from ruleweave.models import (
    Condition,
    Constraint,
    EvaluationResult,
    ResultPayload,
    Rule,
    RuleValidationResult,
    get_conditions,
    is_condition,
    is_constraint,
    is_granular,
    parse_node,
)

RULE = {
    "conditions": [
        {
            "or": [
                {"field": "country", "operator": "in", "value": ["US", "CA"]},
                {"and": [{"field": "vip", "operator": "truthy"}]},
            ],
            "result": {"value": "ship", "message": "Shipping to $.country"},
        }
    ],
    "default": {"value": "hold"},
}


class TestMissing:
    """Test the MISSING sentinel."""

    def test_singleton_and_falsy(self):
        assert not MISSING
        assert repr(MISSING) == "MISSING"
        assert copy.deepcopy(MISSING) is MISSING

    def test_pickle(self):
        assert pickle.loads(pickle.dumps(MISSING)) is MISSING


class TestShapeHelpers:
    """Test node classification helpers."""

    def test_classification(self):
        assert is_condition({"and": []})
        assert not is_condition({"field": "a", "operator": "exists"})
        assert is_constraint({"field": "a", "operator": "exists"})
        assert not is_constraint({"field": "a"})
        assert is_constraint(Constraint("a", "exists"))

    def test_get_conditions(self):
        assert get_conditions({"conditions": {"and": []}}) == [{"and": []}]
        assert get_conditions({}) == []

    def test_is_granular(self):
        assert is_granular(RULE)
        assert not is_granular({"conditions": [{"and": []}]})
        assert not is_granular({"conditions": []})

    def test_parse_node_rejects_garbage(self):
        with pytest.raises(RuleTypeError, match="condition or constraint"):
            parse_node({"value": 1})


class TestRuleModels:
    """Test parsing and serialization."""

    def test_from_dict(self):
        rule = Rule.from_dict(RULE)
        condition = rule.condition_list[0]
        assert condition.type is ConditionType.OR
        assert condition.constraints == [Constraint("country", "in", ["US", "CA"])]
        assert condition.conditions[0].nodes == [Constraint("vip", "truthy")]
        assert condition.result == ResultPayload("ship", "Shipping to $.country")
        assert rule.default == ResultPayload("hold")
        assert rule.is_granular

    def test_to_dict_round_trip(self):
        assert Rule.from_dict(RULE).to_dict() == RULE

    def test_single_condition_keeps_shape(self):
        rule = Rule.from_dict({"conditions": {"none": []}})
        assert isinstance(rule.conditions, Condition)
        assert rule.to_dict() == {"conditions": {"none": []}}

    def test_constraint_without_value(self):
        constraint = Constraint.from_dict({"field": "a", "operator": "exists"})
        assert constraint.value is MISSING
        assert not constraint.has_value
        assert constraint.to_dict() == {"field": "a", "operator": "exists"}

    def test_null_value_kept(self):
        constraint = Constraint.from_dict({"field": "a", "operator": "equals", "value": None})
        assert constraint.has_value
        assert constraint.to_dict()["value"] is None

    @pytest.mark.parametrize(
        "data,match",
        [
            ("rule", "valid JSON object"),
            ({}, "at least one condition"),
            ({"conditions": {"and": [], "or": []}}, "exactly one"),
            ({"conditions": {"and": {}}}, "should be iterable"),
            ({"conditions": [{"field": "a", "operator": "exists"}]}, "Top-level nodes must be conditions"),
        ],
    )
    def test_malformed(self, data, match):
        with pytest.raises(RuleTypeError, match=match):
            Rule.from_dict(data)


class TestResultPayload:
    """Test result payload parsing."""

    @pytest.mark.parametrize(
        "data,expected",
        [
            ("gold", ResultPayload("gold")),
            (0, ResultPayload(0)),
            ({"value": 5}, ResultPayload(5)),
            ({"value": 5, "message": "m"}, ResultPayload(5, "m")),
            ({"tier": "gold"}, ResultPayload({"tier": "gold"})),
            ({}, ResultPayload({})),
        ],
    )
    def test_from_dict(self, data, expected):
        assert ResultPayload.from_dict(data) == expected

    def test_to_dict(self):
        assert ResultPayload(1).to_dict() == {"value": 1}
        assert ResultPayload(1, "m").to_dict() == {"value": 1, "message": "m"}


class TestResults:
    """Test evaluation and validation results."""

    def test_evaluation_result(self):
        result = EvaluationResult(is_passed=True, value="x")
        assert result
        assert not EvaluationResult(is_passed=False)
        assert result.to_dict() == {"is_passed": True, "value": "x"}

    def test_evaluation_result_from_dict(self):
        result = EvaluationResult.from_dict({"isPassed": True, "value": 1, "message": "m"})
        assert result == EvaluationResult(True, 1, "m")

    def test_validation_result(self):
        assert RuleValidationResult.ok().to_dict() == {"is_valid": True}
        failed = RuleValidationResult.fail("bad", {"x": 1})
        assert failed.to_dict() == {"is_valid": False, "error": {"message": "bad", "element": {"x": 1}}}

    def test_rule_error_from_result(self):
        error = RuleError.from_result(RuleValidationResult.fail("bad", [1]))
        assert str(error) == "bad"
        assert error.element == [1]
        assert error.is_valid is False
