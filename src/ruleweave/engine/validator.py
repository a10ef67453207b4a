"""
Rule structure validation.

Checks the shape of a rule before it is evaluated: a mapping with at least
one condition, conditions with exactly one combinator holding a list, nodes
that are conditions or constraints, and constraints whose operator exists and
whose value fits the operators that need a list or a regex. The first
problem found is reported together with the offending element.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from ..core.constants import CONDITION_KEYS
from ..core.logging import get_logger
from ..models import (
    Condition,
    Constraint,
    Rule,
    RuleValidationResult,
    condition_type,
    is_condition,
    is_constraint,
)
from ..operators.pattern import compile_pattern
from ..operators.registry import OperatorRegistry, get_operator_registry

logger = get_logger(__name__)

LIST_VALUE_OPERATORS = (
    "in",
    "not-in",
    "contains-any",
    "not-contains-any",
    "contains-all",
    "not-contains-all",
)

REGEX_OPERATORS = ("matches", "not-matches")


def _as_dict(node: Any) -> Any:
    if isinstance(node, (Rule, Condition, Constraint)):
        return node.to_dict()
    return node


class RuleValidator:
    """Structural validator for rule trees in dict or dataclass form."""

    def __init__(self, registry: OperatorRegistry | None = None) -> None:
        self._registry = registry

    @property
    def registry(self) -> OperatorRegistry:
        if self._registry is not None:
            return self._registry
        return get_operator_registry()

    def validate(self, rule: Any) -> RuleValidationResult:
        """
        Validate a rule.

        Args:
            rule: Rule dataclass or its JSON shape

        Returns:
            RuleValidationResult, invalid with the first problem found
        """
        rule = _as_dict(rule)
        if not isinstance(rule, Mapping):
            return RuleValidationResult.fail("The rule must be a valid JSON object.", rule)

        raw = rule.get("conditions")
        conditions = raw if isinstance(raw, list) else ([] if raw is None else [raw])
        if not conditions or (isinstance(conditions[0], Mapping) and not conditions[0]):
            return RuleValidationResult.fail(
                "The conditions property must contain at least one condition.", rule
            )

        for condition in conditions:
            result = self.validate_condition(condition)
            if not result.is_valid:
                return result
        return RuleValidationResult.ok()

    def validate_condition(self, condition: Any) -> RuleValidationResult:
        """Validate a condition and, recursively, its children."""
        condition = _as_dict(condition)
        if not is_condition(condition):
            return RuleValidationResult.fail("Invalid condition structure.", condition)

        if sum(1 for key in CONDITION_KEYS if key in condition) > 1:
            return RuleValidationResult.fail(
                'A condition cannot have more than one "and", "or", or "none" property.',
                condition,
            )

        ctype = condition_type(condition)
        children = condition[ctype.value]
        if not isinstance(children, list):
            return RuleValidationResult.fail(
                f"The condition '{ctype.value}' should be iterable.", condition
            )

        for node in children:
            if is_condition(node):
                result = self.validate_condition(node)
            elif is_constraint(node):
                result = self.validate_constraint(node)
            else:
                return RuleValidationResult.fail(
                    "Each node should be a condition or constraint.", node
                )
            if not result.is_valid:
                return result

        return RuleValidationResult.ok()

    def validate_constraint(self, constraint: Any) -> RuleValidationResult:
        """Validate a single constraint."""
        constraint = _as_dict(constraint)
        field = constraint.get("field")
        operator = constraint.get("operator")
        value = constraint.get("value")

        if not isinstance(field, str):
            return RuleValidationResult.fail(
                'Constraint "field" must be of type string.', constraint
            )

        if not isinstance(operator, str) or not self.registry.has(operator):
            valid = ",".join(self.registry.get_operator_names())
            logger.debug(f"Rule references unknown operator: {operator}")
            return RuleValidationResult.fail(
                f'Constraint "operator" with value {operator} is invalid. '
                f"Valid operators are {valid}",
                constraint,
            )

        if operator in LIST_VALUE_OPERATORS and not isinstance(value, list):
            return RuleValidationResult.fail(
                'Constraint "value" must be an array if the "operator" is in '
                + ",".join(LIST_VALUE_OPERATORS),
                constraint,
            )

        if operator in REGEX_OPERATORS and not self._is_compilable(value):
            return RuleValidationResult.fail(
                'Constraint "value" must be a valid regular expression if the "operator" is in '
                + ",".join(REGEX_OPERATORS),
                constraint,
            )

        return RuleValidationResult.ok()

    @staticmethod
    def _is_compilable(pattern: Any) -> bool:
        if not isinstance(pattern, str):
            return False
        try:
            compile_pattern(pattern)
        except re.error:
            return False
        return True
