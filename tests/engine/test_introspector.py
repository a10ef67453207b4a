"""
Tests for rule introspection.
"""

from __future__ import annotations

import pytest

from ruleweave.engine.introspector import Introspector
from ruleweave.errors import RuleTypeError
from ruleweave.models import Condition, Constraint, ResultPayload

ADULT = {"field": "age", "operator": "greater-than", "value": 18}
IN_US = {"field": "country", "operator": "equals", "value": "US"}
ADMIN = {"field": "role", "operator": "equals", "value": "admin"}
STAFF = {"field": "role", "operator": "equals", "value": "staff"}
BANNED = {"field": "banned", "operator": "equals", "value": True}


@pytest.fixture
def introspector():
    return Introspector()


def options(introspector, data):
    return introspector.options(Condition.from_dict(data))


class TestIntrospect:
    """Test grouping of criteria by result."""

    def test_groups_by_result(self, introspector):
        rule = {
            "conditions": [
                {"and": [ADULT, IN_US], "result": "eligible"},
                {"or": [ADMIN, STAFF], "result": "eligible"},
                {"none": [BANNED], "result": {"value": "review", "message": "Check manually"}},
            ],
            "default": "rejected",
        }
        result = introspector.introspect(rule)

        assert [r.result.value for r in result.results] == ["eligible", "review"]
        assert result.results[0].options == [[ADULT, IN_US], [ADMIN], [STAFF]]
        assert result.results[1].options == [[{**BANNED, "operator": "not-equals"}]]
        assert result.results[1].result.message == "Check manually"
        assert result.default == ResultPayload("rejected")

    def test_to_dict(self, introspector):
        rule = {"conditions": {"and": [ADULT], "result": {"value": 1}}}
        assert introspector.introspect(rule).to_dict() == {
            "results": [{"result": {"value": 1}, "options": [[ADULT]]}]
        }

    @pytest.mark.parametrize(
        "rule",
        [
            {"conditions": {"and": [ADULT]}},
            {"conditions": [{"and": [ADULT], "result": 1}, {"or": [ADMIN]}]},
        ],
    )
    def test_requires_granular_rule(self, introspector, rule):
        with pytest.raises(RuleTypeError, match="not granular"):
            introspector.introspect(rule)


class TestOptions:
    """Test expansion into disjunctive normal form."""

    def test_constraint(self, introspector):
        assert introspector.options(Constraint.from_dict(ADULT)) == [[ADULT]]

    def test_and_of_ors(self, introspector):
        data = {"and": [{"or": [ADMIN, STAFF]}, {"or": [ADULT, IN_US]}]}
        assert options(introspector, data) == [
            [ADMIN, ADULT],
            [ADMIN, IN_US],
            [STAFF, ADULT],
            [STAFF, IN_US],
        ]

    def test_none_negates_each_child(self, introspector):
        assert options(introspector, {"none": [ADULT, IN_US]}) == [
            [
                {**ADULT, "operator": "less-than-or-equals"},
                {**IN_US, "operator": "not-equals"},
            ]
        ]

    def test_none_of_and_uses_de_morgan(self, introspector):
        assert options(introspector, {"none": [{"and": [ADULT, IN_US]}]}) == [
            [{**ADULT, "operator": "less-than-or-equals"}],
            [{**IN_US, "operator": "not-equals"}],
        ]

    def test_double_negation(self, introspector):
        assert options(introspector, {"none": [{"none": [ADMIN]}]}) == [[ADMIN]]

    def test_operator_without_counterpart(self, introspector):
        uuid = {"field": "id", "operator": "uuid"}
        assert options(introspector, {"none": [uuid]}) == [[{**uuid, "negated": True}]]

    def test_empty_groups(self, introspector):
        """An empty and matches anything, an empty or matches nothing."""
        assert options(introspector, {"and": []}) == [[]]
        assert options(introspector, {"none": []}) == [[]]
        assert options(introspector, {"or": []}) == []
