"""
Comparison operators.

Equality is strict: values of different kinds never compare equal, so the
string "30" is not equal to the number 30. Arrays and objects are compared
structurally, dates by instant.
"""

from __future__ import annotations

from typing import Any

from ..core.constants import MISSING
from .base import (
    BaseOperator,
    NegatedOperator,
    OperatorCategory,
    OperatorContext,
    OperatorMetadata,
    canonical_json,
    is_array,
    is_date,
    is_number,
    is_number_pair,
    is_object,
    is_string,
    negated_metadata,
    value_kind,
)
from .date_time import parse_date


def values_equal(left: Any, right: Any) -> bool:
    """
    Strict equality shared by the comparison and array operators.

    MISSING never equals anything, None only equals None, and bool is kept
    apart from int.
    """
    if left is MISSING or right is MISSING:
        return False
    if left is None or right is None:
        return left is right
    if value_kind(left) != value_kind(right):
        return False
    if is_date(left):
        return parse_date(left) == parse_date(right)
    if is_array(left) or is_object(left):
        try:
            return canonical_json(left) == canonical_json(right)
        except (TypeError, ValueError):
            return False
    return left == right


def _is_ordered(value: Any) -> bool:
    return is_number(value) or is_string(value) or is_date(value)


def _ordered_pair(context: OperatorContext) -> tuple[Any, Any] | None:
    """Return comparable operands, or None when their kinds differ."""
    left, right = context.field_value, context.constraint_value
    if not _is_ordered(left) or not _is_ordered(right):
        return None
    if value_kind(left) != value_kind(right):
        return None
    if is_date(left):
        return parse_date(left), parse_date(right)
    return left, right


class EqualsOperator(BaseOperator):
    metadata = OperatorMetadata(
        name="equals",
        display_name="Equals",
        category=OperatorCategory.COMPARISON,
        description="Checks if the field value equals the provided value",
        accepted_field_types=("any",),
        expected_value_type="any",
        requires_value=True,
        is_negatable=True,
        example='{"field": "age", "operator": "equals", "value": 25}',
    )

    def check(self, context: OperatorContext) -> bool:
        return values_equal(context.field_value, context.constraint_value)


class NotEqualsOperator(NegatedOperator):
    positive = EqualsOperator
    metadata = negated_metadata(
        EqualsOperator,
        "not-equals",
        "Not Equals",
        "Checks if the field value does not equal the provided value",
        '{"field": "status", "operator": "not-equals", "value": "inactive"}',
    )


class _OrderedOperator(BaseOperator):
    """Guards for operators that order numbers, strings or dates."""

    def is_valid_field_type(self, value: Any) -> bool:
        return _is_ordered(value)

    def is_valid_constraint_type(self, value: Any) -> bool:
        return _is_ordered(value)


def _ordered_metadata(name: str, display: str, description: str, example: str) -> OperatorMetadata:
    return OperatorMetadata(
        name=name,
        display_name=display,
        category=OperatorCategory.COMPARISON,
        description=description,
        accepted_field_types=("number", "string", "date"),
        expected_value_type="number",
        requires_value=True,
        is_negatable=True,
        example=example,
    )


class GreaterThanOperator(_OrderedOperator):
    metadata = _ordered_metadata(
        "greater-than",
        "Greater Than",
        "Checks if the field value is greater than the provided value",
        '{"field": "age", "operator": "greater-than", "value": 18}',
    )

    def check(self, context: OperatorContext) -> bool:
        pair = _ordered_pair(context)
        return pair is not None and pair[0] > pair[1]


class LessThanOperator(_OrderedOperator):
    metadata = _ordered_metadata(
        "less-than",
        "Less Than",
        "Checks if the field value is less than the provided value",
        '{"field": "price", "operator": "less-than", "value": 100}',
    )

    def check(self, context: OperatorContext) -> bool:
        pair = _ordered_pair(context)
        return pair is not None and pair[0] < pair[1]


class GreaterThanOrEqualsOperator(_OrderedOperator):
    metadata = _ordered_metadata(
        "greater-than-or-equals",
        "Greater Than or Equals",
        "Checks if the field value is greater than or equal to the provided value",
        '{"field": "score", "operator": "greater-than-or-equals", "value": 60}',
    )

    def check(self, context: OperatorContext) -> bool:
        pair = _ordered_pair(context)
        return pair is not None and pair[0] >= pair[1]


class LessThanOrEqualsOperator(_OrderedOperator):
    metadata = _ordered_metadata(
        "less-than-or-equals",
        "Less Than or Equals",
        "Checks if the field value is less than or equal to the provided value",
        '{"field": "quantity", "operator": "less-than-or-equals", "value": 10}',
    )

    def check(self, context: OperatorContext) -> bool:
        pair = _ordered_pair(context)
        return pair is not None and pair[0] <= pair[1]


class InOperator(BaseOperator):
    metadata = OperatorMetadata(
        name="in",
        display_name="In",
        category=OperatorCategory.COMPARISON,
        description="Checks if the field value is one of the provided values",
        accepted_field_types=("any",),
        expected_value_type="array",
        requires_value=True,
        is_negatable=True,
        example='{"field": "country", "operator": "in", "value": ["US", "CA", "UK"]}',
    )

    def is_valid_constraint_type(self, value: Any) -> bool:
        return is_array(value)

    def check(self, context: OperatorContext) -> bool:
        options = context.constraint_value
        if not is_array(options):
            return False
        return any(values_equal(context.field_value, option) for option in options)


class NotInOperator(NegatedOperator):
    positive = InOperator
    metadata = negated_metadata(
        InOperator,
        "not-in",
        "Not In",
        "Checks if the field value is none of the provided values",
        '{"field": "role", "operator": "not-in", "value": ["banned", "suspended"]}',
    )


class BetweenOperator(BaseOperator):
    """Inclusive numeric range; the constraint is [min, max]."""

    metadata = OperatorMetadata(
        name="between",
        display_name="Between",
        category=OperatorCategory.COMPARISON,
        description="Checks if the field value is between two values (inclusive)",
        accepted_field_types=("number",),
        expected_value_type="range",
        requires_value=True,
        is_negatable=True,
        example='{"field": "age", "operator": "between", "value": [18, 65]}',
    )

    def is_valid_field_type(self, value: Any) -> bool:
        return is_number(value)

    def is_valid_constraint_type(self, value: Any) -> bool:
        return is_number_pair(value)

    def validate_value(self, context: OperatorContext) -> str | None:
        bounds = context.constraint_value
        if is_number_pair(bounds) and bounds[0] > bounds[1]:
            return "Minimum value cannot be greater than maximum value"
        return None

    def check(self, context: OperatorContext) -> bool:
        value, bounds = context.field_value, context.constraint_value
        if not is_number(value) or not is_number_pair(bounds):
            return False
        return bounds[0] <= value <= bounds[1]


class NotBetweenOperator(NegatedOperator):
    positive = BetweenOperator
    metadata = negated_metadata(
        BetweenOperator,
        "not-between",
        "Not Between",
        "Checks if the field value is outside two values",
        '{"field": "temperature", "operator": "not-between", "value": [0, 100]}',
    )


COMPARISON_OPERATORS: list[type[BaseOperator]] = [
    EqualsOperator,
    NotEqualsOperator,
    GreaterThanOperator,
    LessThanOperator,
    GreaterThanOrEqualsOperator,
    LessThanOrEqualsOperator,
    InOperator,
    NotInOperator,
    BetweenOperator,
    NotBetweenOperator,
]
