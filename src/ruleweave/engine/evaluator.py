"""
Rule Evaluator.

Walks a condition tree against a data object:

    and   fails on the first failing child, passes when all pass (empty: pass)
    or    passes on the first passing child, fails when none do (empty: fail)
    none  fails on the first passing child, passes otherwise (empty: pass)

A passing condition reports the payload of the innermost matching child
condition that carries one, else its own. Constraint problems (unknown
operator, invalid operator input) fail the constraint with `error` set and
never raise out of evaluation.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..core.constants import SELF_REFERENCE_MARKER, ConditionType
from ..core.logging import get_logger
from ..errors import UnknownOperatorError
from ..models import (
    Condition,
    Constraint,
    EvaluationResult,
    ResultPayload,
    Rule,
)
from ..operators.base import OperatorContext
from ..operators.registry import OperatorRegistry, get_operator_registry
from ..paths import resolve_property, resolve_text_path_expressions

logger = get_logger(__name__)

RuleInput = Rule | Mapping[str, Any]


def _has_expressions(text: str | None) -> bool:
    return isinstance(text, str) and SELF_REFERENCE_MARKER in text


class Evaluator:
    """
    Evaluates rules against data.

    Usage:
        evaluator = Evaluator()
        result = evaluator.evaluate(rule, {"age": 30})
        if result.is_passed:
            ...
    """

    def __init__(self, registry: OperatorRegistry | None = None) -> None:
        self._registry = registry

    @property
    def registry(self) -> OperatorRegistry:
        if self._registry is not None:
            return self._registry
        return get_operator_registry()

    # =========================================================================
    # Public API
    # =========================================================================

    def evaluate(self, rule: RuleInput, data: Any) -> EvaluationResult | list[Any]:
        """
        Evaluate a rule.

        A rule holding a single condition yields one result; a list of
        conditions yields one result per condition. Data given as a list is
        evaluated item by item.

        Raises:
            RuleTypeError: If the rule is malformed
        """
        parsed = Rule.from_dict(rule)
        if isinstance(data, list):
            return [self._evaluate_rule(parsed, item) for item in data]
        return self._evaluate_rule(parsed, data)

    def evaluate_first(self, rule: RuleInput, data: Any) -> EvaluationResult | list[EvaluationResult]:
        """
        Evaluate a granular rule decision-table style.

        Returns the result of the first passing top-level condition, or a
        failing result carrying the rule default when none passes.
        """
        parsed = Rule.from_dict(rule)
        if isinstance(data, list):
            return [self._evaluate_first(parsed, item) for item in data]
        return self._evaluate_first(parsed, data)

    def evaluate_condition(self, condition: Condition | Mapping[str, Any], data: Any) -> EvaluationResult:
        """Evaluate a single condition node without top-level defaults."""
        if not isinstance(condition, Condition):
            condition = Condition.from_dict(condition)
        return self._condition(condition, data)

    def evaluate_constraint(self, constraint: Constraint | Mapping[str, Any], data: Any) -> EvaluationResult:
        """Evaluate a single constraint."""
        if not isinstance(constraint, Constraint):
            constraint = Constraint.from_dict(constraint)
        return self._constraint(constraint, data)

    # =========================================================================
    # Rule Level
    # =========================================================================

    def _evaluate_rule(self, rule: Rule, data: Any) -> EvaluationResult | list[EvaluationResult]:
        if isinstance(rule.conditions, list):
            return [self._finalize(self._condition(c, data), rule.default, data) for c in rule.conditions]
        return self._finalize(self._condition(rule.conditions, data), rule.default, data)

    def _evaluate_first(self, rule: Rule, data: Any) -> EvaluationResult:
        last_message: str | None = None
        last_error: str | None = None
        for condition in rule.condition_list:
            result = self._condition(condition, data)
            if result.is_passed:
                return self._finalize(result, rule.default, data)
            last_message = result.message or last_message
            last_error = result.error or last_error

        failed = EvaluationResult(is_passed=False, message=last_message, error=last_error)
        return self._finalize(failed, rule.default, data)

    def _finalize(self, result: EvaluationResult, default: ResultPayload | None, data: Any) -> EvaluationResult:
        """Fill in the top-level value and message of a condition result."""
        if result.is_passed:
            value = True if result.value is None else result.value
            message = result.message
        else:
            value = default.value if default is not None else False
            message = result.message or (default.message if default is not None else None)

        if _has_expressions(message):
            message = resolve_text_path_expressions(message, data)
        return EvaluationResult(
            is_passed=result.is_passed, value=value, message=message, error=result.error
        )

    # =========================================================================
    # Conditions
    # =========================================================================

    def _condition(self, condition: Condition, data: Any) -> EvaluationResult:
        if condition.type == ConditionType.AND:
            return self._all(condition, data)
        if condition.type == ConditionType.OR:
            return self._any(condition, data)
        return self._none(condition, data)

    def _node(self, node: Condition | Constraint, data: Any) -> EvaluationResult:
        if isinstance(node, Condition):
            return self._condition(node, data)
        return self._constraint(node, data)

    @staticmethod
    def _passed(condition: Condition, inner: EvaluationResult | None = None) -> EvaluationResult:
        """A passing result carrying the innermost payload available."""
        if inner is not None and inner.value is not None:
            return EvaluationResult(is_passed=True, value=inner.value, message=inner.message)
        payload = condition.result
        if payload is None:
            return EvaluationResult(is_passed=True)
        return EvaluationResult(is_passed=True, value=payload.value, message=payload.message)

    def _all(self, condition: Condition, data: Any) -> EvaluationResult:
        inner: EvaluationResult | None = None
        for node in condition.nodes:
            result = self._node(node, data)
            if not result.is_passed:
                return EvaluationResult(is_passed=False, message=result.message, error=result.error)
            if inner is None and isinstance(node, Condition) and result.value is not None:
                inner = result
        return self._passed(condition, inner)

    def _any(self, condition: Condition, data: Any) -> EvaluationResult:
        message: str | None = None
        error: str | None = None
        for node in condition.nodes:
            result = self._node(node, data)
            if result.is_passed:
                return self._passed(condition, result if isinstance(node, Condition) else None)
            message = result.message or message
            error = result.error or error
        return EvaluationResult(is_passed=False, message=message, error=error)

    def _none(self, condition: Condition, data: Any) -> EvaluationResult:
        for node in condition.nodes:
            result = self._node(node, data)
            # An errored child is never a clean failure to negate
            if result.error:
                return EvaluationResult(is_passed=False, message=result.message, error=result.error)
            if result.is_passed:
                return EvaluationResult(is_passed=False, message=result.message)
        return self._passed(condition)

    # =========================================================================
    # Constraints
    # =========================================================================

    def _constraint(self, constraint: Constraint, data: Any) -> EvaluationResult:
        field_value = resolve_property(constraint.field, data)
        constraint_value = self.resolve_constraint_value(constraint.value, data)

        operator = self.registry.get(constraint.operator)
        if operator is None:
            error = str(UnknownOperatorError(constraint.operator))
            logger.error(error, extra={"operator": constraint.operator, "field": constraint.field})
            return EvaluationResult(is_passed=False, message=error, error=error)

        context = OperatorContext(
            field_value=field_value,
            constraint_value=constraint_value,
            criteria=data,
            field_path=constraint.field,
        )

        validation = operator.validate(context)
        if not validation.is_valid:
            error = validation.error or f"Validation failed for operator: {constraint.operator}"
            logger.debug(f"Constraint on {constraint.field} is invalid: {error}")
            return EvaluationResult(is_passed=False, message=error, error=error)

        is_passed = operator.evaluate(context)
        return EvaluationResult(
            is_passed=is_passed,
            value=None,
            message=self._format_message(constraint, operator, context, data),
        )

    def _format_message(
        self, constraint: Constraint, operator: Any, context: OperatorContext, data: Any
    ) -> str | None:
        if not constraint.message:
            return None

        format_message = getattr(operator, "format_message", None)
        message = format_message(constraint.message, context) if format_message else constraint.message
        if not _has_expressions(message):
            return message

        # `$.self.value` and `$.self.input` refer to the constraint being checked
        scope = dict(data) if isinstance(data, Mapping) else {}
        scope["self"] = {"value": constraint.value, "input": context.field_value}
        return resolve_text_path_expressions(message, scope)

    @staticmethod
    def resolve_constraint_value(value: Any, data: Any) -> Any:
        """
        Resolve self-references in a constraint value.

        Strings containing `$.` (alone or inside a list) are read from the data.
        """
        if isinstance(value, list):
            return [
                resolve_property(item, data) if _has_expressions(item) else item for item in value
            ]
        if _has_expressions(value):
            return resolve_property(value, data)
        return value


__all__ = ["Evaluator"]
