"""
Numeric operators.

`numeric` and `number` also accept numeric strings; the rest need an actual
number (never a bool).
"""

from __future__ import annotations

import math
from typing import Any

from .base import (
    BaseOperator,
    NegatedOperator,
    OperatorCategory,
    OperatorContext,
    OperatorMetadata,
    is_nan,
    is_number,
    is_number_pair,
    is_string,
    negated_metadata,
)


def _parse_float(text: str) -> float | None:
    if not text.strip():
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _is_finite(value: int | float) -> bool:
    # Ints are exact and unbounded; math.isfinite overflows on huge ones
    return isinstance(value, int) or math.isfinite(value)


def is_numeric(value: Any) -> bool:
    """A finite number, or a string holding one."""
    if is_number(value):
        return _is_finite(value)
    if is_string(value):
        parsed = _parse_float(value)
        return parsed is not None and math.isfinite(parsed)
    return False


def is_number_like(value: Any) -> bool:
    """Any number except NaN (infinity included), or a string holding one."""
    if is_number(value):
        return not is_nan(value)
    if is_string(value):
        parsed = _parse_float(value)
        return parsed is not None and not math.isnan(parsed)
    return False


def is_integral(value: Any) -> bool:
    if not is_number(value):
        return False
    return isinstance(value, int) or (math.isfinite(value) and value.is_integer())


def _metadata(
    name: str,
    display: str,
    description: str,
    field: str,
    accepted: tuple[str, ...] = ("number",),
    category: OperatorCategory = OperatorCategory.NUMERIC,
) -> OperatorMetadata:
    return OperatorMetadata(
        name=name,
        display_name=display,
        category=category,
        description=description,
        accepted_field_types=accepted,
        expected_value_type="void",
        requires_value=False,
        is_negatable=False,
        example=f'{{"field": "{field}", "operator": "{name}"}}',
    )


def _negated(positive: type[BaseOperator], name: str, display: str, description: str, field: str) -> OperatorMetadata:
    return negated_metadata(
        positive, name, display, description, f'{{"field": "{field}", "operator": "{name}"}}'
    )


class _NumberFieldOperator(BaseOperator):
    def is_valid_field_type(self, value: Any) -> bool:
        return is_number(value)


# =============================================================================
# Number Kinds
# =============================================================================


class NumericOperator(BaseOperator):
    metadata = _metadata(
        "numeric",
        "Is Numeric",
        "Checks if the field value is a finite number or a numeric string",
        "quantity",
        accepted=("any",),
        category=OperatorCategory.TYPE,
    )

    def check(self, context: OperatorContext) -> bool:
        return is_numeric(context.field_value)


class NotNumericOperator(NegatedOperator):
    positive = NumericOperator
    metadata = _negated(
        NumericOperator, "not-numeric", "Is Not Numeric", "Checks if the field value is not numeric", "label"
    )


class NumberOperator(BaseOperator):
    metadata = _metadata(
        "number",
        "Is Number",
        "Checks if the field value is a number or a string convertible to one",
        "age",
        accepted=("any",),
        category=OperatorCategory.TYPE,
    )

    def check(self, context: OperatorContext) -> bool:
        return is_number_like(context.field_value)


class NotNumberOperator(NegatedOperator):
    positive = NumberOperator
    metadata = _negated(
        NumberOperator, "not-number", "Is Not Number", "Checks if the field value is not a number", "name"
    )


class IntegerOperator(_NumberFieldOperator):
    metadata = _metadata(
        "integer",
        "Is Integer",
        "Checks if the field value is an integer",
        "count",
        category=OperatorCategory.TYPE,
    )

    def check(self, context: OperatorContext) -> bool:
        return is_integral(context.field_value)


class NotIntegerOperator(NegatedOperator):
    positive = IntegerOperator
    metadata = _negated(
        IntegerOperator, "not-integer", "Is Not Integer", "Checks if the field value is not an integer", "price"
    )


class FloatOperator(_NumberFieldOperator):
    metadata = _metadata(
        "float",
        "Is Float",
        "Checks if the field value is a number with a fractional part",
        "price",
        category=OperatorCategory.TYPE,
    )

    def check(self, context: OperatorContext) -> bool:
        value = context.field_value
        return isinstance(value, float) and math.isfinite(value) and not value.is_integer()


class NotFloatOperator(NegatedOperator):
    positive = FloatOperator
    metadata = _negated(
        FloatOperator, "not-float", "Is Not Float", "Checks if the field value has no fractional part", "count"
    )


# =============================================================================
# Sign
# =============================================================================


class PositiveOperator(_NumberFieldOperator):
    metadata = _metadata("positive", "Is Positive", "Checks if the field value is greater than zero", "balance")

    def check(self, context: OperatorContext) -> bool:
        value = context.field_value
        return is_number(value) and value > 0


class NotPositiveOperator(NegatedOperator):
    positive = PositiveOperator
    metadata = _negated(
        PositiveOperator, "not-positive", "Is Not Positive", "Checks if the field value is zero or less", "debt"
    )


class NegativeOperator(_NumberFieldOperator):
    metadata = _metadata("negative", "Is Negative", "Checks if the field value is less than zero", "delta")

    def check(self, context: OperatorContext) -> bool:
        value = context.field_value
        return is_number(value) and value < 0


class NotNegativeOperator(NegatedOperator):
    positive = NegativeOperator
    metadata = _negated(
        NegativeOperator, "not-negative", "Is Not Negative", "Checks if the field value is zero or more", "stock"
    )


class ZeroOperator(_NumberFieldOperator):
    metadata = _metadata("zero", "Is Zero", "Checks if the field value is exactly zero", "remaining")

    def check(self, context: OperatorContext) -> bool:
        value = context.field_value
        return is_number(value) and value == 0


class NotZeroOperator(NegatedOperator):
    positive = ZeroOperator
    metadata = _negated(
        ZeroOperator, "not-zero", "Is Not Zero", "Checks if the field value is not zero", "divisor"
    )


# =============================================================================
# Bounds
# =============================================================================


class _BoundOperator(_NumberFieldOperator):
    def is_valid_constraint_type(self, value: Any) -> bool:
        return is_number(value)


def _bound_metadata(name: str, display: str, description: str, example: str) -> OperatorMetadata:
    return OperatorMetadata(
        name=name,
        display_name=display,
        category=OperatorCategory.NUMERIC,
        description=description,
        accepted_field_types=("number",),
        expected_value_type="number",
        requires_value=True,
        is_negatable=True,
        example=example,
    )


class MinOperator(_BoundOperator):
    metadata = _bound_metadata(
        "min",
        "Minimum",
        "Checks if the field value is at least the specified minimum",
        '{"field": "age", "operator": "min", "value": 18}',
    )

    def check(self, context: OperatorContext) -> bool:
        value, bound = context.field_value, context.constraint_value
        return is_number(value) and is_number(bound) and value >= bound


class NotMinOperator(NegatedOperator):
    positive = MinOperator
    metadata = negated_metadata(
        MinOperator,
        "not-min",
        "Not Minimum",
        "Checks if the field value is below the specified minimum",
        '{"field": "score", "operator": "not-min", "value": 50}',
    )


class MaxOperator(_BoundOperator):
    metadata = _bound_metadata(
        "max",
        "Maximum",
        "Checks if the field value is at most the specified maximum",
        '{"field": "discount", "operator": "max", "value": 50}',
    )

    def check(self, context: OperatorContext) -> bool:
        value, bound = context.field_value, context.constraint_value
        return is_number(value) and is_number(bound) and value <= bound


class NotMaxOperator(NegatedOperator):
    positive = MaxOperator
    metadata = negated_metadata(
        MaxOperator,
        "not-max",
        "Not Maximum",
        "Checks if the field value is above the specified maximum",
        '{"field": "weight", "operator": "not-max", "value": 100}',
    )


class NumberBetweenOperator(_NumberFieldOperator):
    metadata = OperatorMetadata(
        name="number-between",
        display_name="Number Between",
        category=OperatorCategory.NUMERIC,
        description="Checks if the field value is between two numbers (inclusive)",
        accepted_field_types=("number",),
        expected_value_type="array",
        requires_value=True,
        is_negatable=True,
        example='{"field": "score", "operator": "number-between", "value": [0, 100]}',
    )

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


class NotNumberBetweenOperator(NegatedOperator):
    positive = NumberBetweenOperator
    metadata = negated_metadata(
        NumberBetweenOperator,
        "not-number-between",
        "Not Number Between",
        "Checks if the field value is outside two numbers",
        '{"field": "temperature", "operator": "not-number-between", "value": [-10, 40]}',
    )


NUMERIC_OPERATORS: list[type[BaseOperator]] = [
    NumericOperator,
    NotNumericOperator,
    NumberOperator,
    NotNumberOperator,
    IntegerOperator,
    NotIntegerOperator,
    FloatOperator,
    NotFloatOperator,
    PositiveOperator,
    NotPositiveOperator,
    NegativeOperator,
    NotNegativeOperator,
    ZeroOperator,
    NotZeroOperator,
    MinOperator,
    NotMinOperator,
    MaxOperator,
    NotMaxOperator,
    NumberBetweenOperator,
    NotNumberBetweenOperator,
]
