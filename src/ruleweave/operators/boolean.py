"""
Boolean operators: boolean encodings and truthiness.
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
    is_nan,
    is_number,
    is_string,
    negated_metadata,
)


def is_falsy(value: Any) -> bool:
    """
    Falsy in the JSON sense: false, 0, "", null, missing or NaN.

    Empty arrays and objects are truthy.
    """
    if value is None or value is MISSING or value is False:
        return True
    if is_number(value):
        return value == 0 or is_nan(value)
    if is_string(value):
        return value == ""
    return False


def _metadata(
    name: str,
    display: str,
    description: str,
    field: str,
    accepted: tuple[str, ...] = ("any",),
    category: OperatorCategory = OperatorCategory.TYPE,
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


class BooleanOperator(BaseOperator):
    metadata = _metadata("boolean", "Is Boolean", "Checks if the field value is a boolean", "isActive")

    def check(self, context: OperatorContext) -> bool:
        return isinstance(context.field_value, bool)


class NotBooleanOperator(NegatedOperator):
    positive = BooleanOperator
    metadata = _negated(
        BooleanOperator, "not-boolean", "Is Not Boolean", "Checks if the field value is not a boolean", "status"
    )


class BooleanStringOperator(BaseOperator):
    metadata = _metadata(
        "boolean-string",
        "Is Boolean String",
        'Checks if the field value is the string "true" or "false"',
        "enabled",
        accepted=("string",),
    )

    def is_valid_field_type(self, value: Any) -> bool:
        return is_string(value)

    def check(self, context: OperatorContext) -> bool:
        return is_string(context.field_value) and context.field_value in ("true", "false")


class NotBooleanStringOperator(NegatedOperator):
    positive = BooleanStringOperator
    metadata = _negated(
        BooleanStringOperator,
        "not-boolean-string",
        "Is Not Boolean String",
        'Checks if the field value is neither "true" nor "false"',
        "label",
    )


class BooleanNumberOperator(BaseOperator):
    metadata = _metadata(
        "boolean-number",
        "Is Boolean Number",
        "Checks if the field value is the number 0 or 1",
        "flag",
        accepted=("number",),
    )

    def is_valid_field_type(self, value: Any) -> bool:
        return is_number(value)

    def check(self, context: OperatorContext) -> bool:
        value = context.field_value
        return is_number(value) and value in (0, 1)


class NotBooleanNumberOperator(NegatedOperator):
    positive = BooleanNumberOperator
    metadata = _negated(
        BooleanNumberOperator,
        "not-boolean-number",
        "Is Not Boolean Number",
        "Checks if the field value is a number other than 0 or 1",
        "count",
    )


class BooleanNumberStringOperator(BaseOperator):
    metadata = _metadata(
        "boolean-number-string",
        "Is Boolean Number String",
        'Checks if the field value is the string "0" or "1"',
        "active",
        accepted=("string",),
    )

    def is_valid_field_type(self, value: Any) -> bool:
        return is_string(value)

    def check(self, context: OperatorContext) -> bool:
        return is_string(context.field_value) and context.field_value in ("0", "1")


class NotBooleanNumberStringOperator(NegatedOperator):
    positive = BooleanNumberStringOperator
    metadata = _negated(
        BooleanNumberStringOperator,
        "not-boolean-number-string",
        "Is Not Boolean Number String",
        'Checks if the field value is neither "0" nor "1"',
        "code",
    )


class TruthyOperator(BaseOperator):
    metadata = _metadata(
        "truthy",
        "Is Truthy",
        "Checks if the field value is truthy",
        "hasAccess",
        category=OperatorCategory.BOOLEAN,
    )

    def check(self, context: OperatorContext) -> bool:
        return not is_falsy(context.field_value)


class NotTruthyOperator(NegatedOperator):
    positive = TruthyOperator
    metadata = _negated(
        TruthyOperator, "not-truthy", "Is Not Truthy", "Checks if the field value is not truthy", "disabled"
    )


class FalsyOperator(BaseOperator):
    metadata = _metadata(
        "falsy",
        "Is Falsy",
        "Checks if the field value is falsy",
        "isDeleted",
        category=OperatorCategory.BOOLEAN,
    )

    def check(self, context: OperatorContext) -> bool:
        return is_falsy(context.field_value)


class NotFalsyOperator(NegatedOperator):
    positive = FalsyOperator
    metadata = _negated(
        FalsyOperator, "not-falsy", "Is Not Falsy", "Checks if the field value is not falsy", "name"
    )


BOOLEAN_OPERATORS: list[type[BaseOperator]] = [
    BooleanOperator,
    NotBooleanOperator,
    BooleanStringOperator,
    NotBooleanStringOperator,
    BooleanNumberOperator,
    NotBooleanNumberOperator,
    BooleanNumberStringOperator,
    NotBooleanNumberStringOperator,
    TruthyOperator,
    NotTruthyOperator,
    FalsyOperator,
    NotFalsyOperator,
]
