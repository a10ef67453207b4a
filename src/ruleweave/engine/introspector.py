"""
Rule Introspection.

For a granular rule (every top-level condition carries a result) works out
which input shapes lead to each result. Each condition tree is expanded into
disjunctive normal form: a list of options, each option a list of
constraints that must all hold. `none` nodes are pushed down as negations,
using the registry's negation table for the operator counterpart.
"""

from __future__ import annotations

from collections.abc import Mapping
from itertools import product
from typing import Any

from ..core.constants import ConditionType
from ..core.logging import get_logger
from ..errors import RuleTypeError
from ..models import (
    Condition,
    Constraint,
    CriteriaRange,
    IntrospectionResult,
    Rule,
)
from ..operators.base import canonical_json
from ..operators.registry import NEGATIONS

logger = get_logger(__name__)

Option = list[dict[str, Any]]


def _negate(constraint: Constraint) -> dict[str, Any]:
    """Constraint dict with its operator flipped, or marked negated when it has no counterpart."""
    data = constraint.to_dict()
    counterpart = NEGATIONS.get(constraint.operator)
    if counterpart is not None:
        data["operator"] = counterpart
    else:
        data["negated"] = True
    return data


def _conjoin(groups: list[list[Option]]) -> list[Option]:
    """AND of several DNFs: every combination of one option from each."""
    options: list[Option] = [[]]
    for group in groups:
        options = [left + right for left, right in product(options, group)]
    return options


def _disjoin(groups: list[list[Option]]) -> list[Option]:
    """OR of several DNFs: all their options side by side."""
    return [option for group in groups for option in group]


class Introspector:
    """Derives criteria ranges from granular rules."""

    def introspect(self, rule: Rule | Mapping[str, Any]) -> IntrospectionResult:
        """
        Introspect a granular rule.

        Raises:
            RuleTypeError: If the rule is not granular
        """
        parsed = Rule.from_dict(rule)
        if not parsed.is_granular:
            raise RuleTypeError(
                "The provided rule is not granular. A granular rule is required for Introspection"
            )

        ranges: dict[str, CriteriaRange] = {}
        for condition in parsed.condition_list:
            result = condition.result
            key = canonical_json(result.to_dict())
            logger.debug(f"Introspecting result {key}")

            if key not in ranges:
                ranges[key] = CriteriaRange(result=result)
            ranges[key].options.extend(self.options(condition))

        return IntrospectionResult(results=list(ranges.values()), default=parsed.default)

    def options(self, node: Condition | Constraint, negated: bool = False) -> list[Option]:
        """
        Expand a node into disjunctive normal form.

        An empty `and` (or `none`) yields one empty option, satisfied by any
        input; an empty `or` yields no option at all.
        """
        if isinstance(node, Constraint):
            return [[_negate(node) if negated else node.to_dict()]]

        if node.type == ConditionType.NONE:
            # none(a, b) is and(not a, not b); negated it becomes or(a, b)
            children = [self.options(child, not negated) for child in node.nodes]
            return _disjoin(children) if negated else _conjoin(children)

        children = [self.options(child, negated) for child in node.nodes]
        is_and = node.type == ConditionType.AND
        # De Morgan: negation swaps and with or
        if is_and != negated:
            return _conjoin(children)
        return _disjoin(children)
