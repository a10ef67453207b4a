"""
Operator Strategy Protocol and Base Classes.

An operator is a named predicate with metadata. The engine builds an
OperatorContext per constraint, asks the operator to validate it and, if
valid, to evaluate it. evaluate() is fail-closed: wrong types, None, NaN or
MISSING yield False, and an exception escaping a concrete operator is logged
and turned into False at this boundary.
"""

from __future__ import annotations

import json
import math
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, Protocol, runtime_checkable

from ..core.constants import MISSING
from ..core.logging import get_logger

logger = get_logger(__name__)


class OperatorCategory(str, Enum):
    """Operator families, used for lookup and catalog grouping."""

    COMPARISON = "comparison"
    STRING = "string"
    NUMERIC = "numeric"
    ARRAY = "array"
    DATE_TIME = "date_time"
    TYPE = "type"
    EXISTENCE = "existence"
    BOOLEAN = "boolean"
    PATTERN = "pattern"
    PERSIAN = "persian"


# Semantic field types an operator may accept
FIELD_TYPES = ("string", "number", "boolean", "date", "array", "object", "any", "time")

# Value types an operator may expect; field types plus regex/range/void
VALUE_TYPES = FIELD_TYPES + ("regex", "range", "void")


# =============================================================================
# Value Classification
# =============================================================================


def is_number(value: Any) -> bool:
    """int or float, never bool."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def is_object(value: Any) -> bool:
    return isinstance(value, Mapping)


def is_date(value: Any) -> bool:
    return isinstance(value, (datetime, date))


def is_nan(value: Any) -> bool:
    return isinstance(value, float) and math.isnan(value)


def is_number_pair(value: Any) -> bool:
    """A two-element list of numbers, the shape of a range constraint."""
    return is_array(value) and len(value) == 2 and all(is_number(v) for v in value)


def value_kind(value: Any) -> str:
    """
    Classify a runtime value into the semantic type names used in metadata.

    None and MISSING map to "any"; unknown objects to "object".
    """
    if value is None or value is MISSING:
        return "any"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if is_string(value):
        return "string"
    if is_date(value):
        return "date"
    if is_array(value):
        return "array"
    return "object"


def canonical_json(value: Any) -> str:
    """Order-independent serialization used for structural equality."""
    return json.dumps(value, sort_keys=True, default=str)


def _to_json(value: Any) -> str:
    if value is MISSING:
        return ""
    return json.dumps(value, default=str, ensure_ascii=False)


# =============================================================================
# Metadata, Context and Validation
# =============================================================================


@dataclass(frozen=True)
class OperatorMetadata:
    """Immutable descriptor of an operator."""

    name: str
    display_name: str
    category: OperatorCategory
    description: str
    accepted_field_types: tuple[str, ...] = ("any",)
    expected_value_type: str = "void"
    requires_value: bool = True
    is_negatable: bool = False
    example: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        data = asdict(self)
        data["category"] = self.category.value
        data["accepted_field_types"] = list(self.accepted_field_types)
        return data


@dataclass
class OperatorContext:
    """Inputs to one operator call. Built per constraint, never stored."""

    field_value: Any
    constraint_value: Any = MISSING
    criteria: Any = None
    field_path: str | None = None


@dataclass
class ValidationResult:
    """Outcome of validating an operator context."""

    is_valid: bool
    error: str | None = None
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def ok(cls, warnings: list[str] | None = None) -> ValidationResult:
        return cls(is_valid=True, warnings=warnings or [])

    @classmethod
    def fail(cls, error: str) -> ValidationResult:
        return cls(is_valid=False, error=error)


# =============================================================================
# Strategy Protocol
# =============================================================================


@runtime_checkable
class OperatorStrategy(Protocol):
    """
    Protocol every operator satisfies.

    Custom operators may implement it directly; subclassing BaseOperator is
    the usual route.
    """

    @property
    def metadata(self) -> OperatorMetadata:
        """Static descriptor; metadata.name is the registry key."""
        ...

    def validate(self, context: OperatorContext) -> ValidationResult:
        """Check the context before evaluation."""
        ...

    def evaluate(self, context: OperatorContext) -> bool:
        """Run the predicate. Must not raise."""
        ...


# =============================================================================
# Base Operator
# =============================================================================


class BaseOperator(ABC):
    """
    Base class for operators.

    Subclasses set `metadata` and implement `check`. Type guards and
    `validate_value` are optional hooks picked up by the default validate().
    """

    metadata: ClassVar[OperatorMetadata]

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def category(self) -> OperatorCategory:
        return self.metadata.category

    def is_valid_field_type(self, value: Any) -> bool:
        """Field type guard; accepts anything unless overridden."""
        return True

    def is_valid_constraint_type(self, value: Any) -> bool:
        """Constraint type guard; accepts anything unless overridden."""
        return True

    def validate_value(self, context: OperatorContext) -> str | None:
        """Operator-specific semantic check; return an error message or None."""
        return None

    def validate(self, context: OperatorContext) -> ValidationResult:
        """
        Validate a context.

        Checks, in order: a required value is present, the field passes the
        field guard, a present value passes the constraint guard, then the
        operator-specific hook.
        """
        meta = self.metadata
        display = meta.display_name

        if meta.requires_value and context.constraint_value is MISSING:
            return ValidationResult.fail(f'Operator "{display}" requires a value')

        if not self.is_valid_field_type(context.field_value):
            expected = ", ".join(meta.accepted_field_types)
            return ValidationResult.fail(
                f'Invalid field type for operator "{display}". Expected one of: {expected}'
            )

        if context.constraint_value is not MISSING and not self.is_valid_constraint_type(
            context.constraint_value
        ):
            return ValidationResult.fail(
                f'Invalid value type for operator "{display}". '
                f"Expected: {meta.expected_value_type}"
            )

        error = self.validate_value(context)
        if error:
            return ValidationResult.fail(error)
        return ValidationResult.ok()

    @abstractmethod
    def check(self, context: OperatorContext) -> bool:
        """The predicate itself."""
        ...

    def evaluate(self, context: OperatorContext) -> bool:
        """Run the predicate, failing closed on any exception."""
        try:
            return bool(self.check(context))
        except Exception as e:
            logger.debug(f"Operator {self.metadata.name} failed closed: {e}")
            return False

    def get_negated(self) -> BaseOperator | None:
        """Return the registered counterpart from the negation table, if any."""
        from .registry import get_operator_registry

        registry = get_operator_registry()
        negated = registry.get_negated_operator(self.metadata.name)
        return registry.get(negated) if negated else None

    def format_message(self, template: str, context: OperatorContext) -> str:
        """
        Substitute {{field}}, {{value}} and {{fieldValue}} in a message.

        Values are JSON-encoded; an absent field path renders as "field".
        """
        return (
            template.replace("{{field}}", context.field_path or "field")
            .replace("{{value}}", _to_json(context.constraint_value))
            .replace("{{fieldValue}}", _to_json(context.field_value))
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.metadata.name!r}>"


class NegatedOperator(BaseOperator):
    """
    Operator defined as the inverse of another.

    Guards and semantic validation come from the positive operator; the
    validation messages use this operator's own display name. Inputs that
    fail the positive operator's guards evaluate to False on both sides.
    """

    positive: ClassVar[type[BaseOperator]]

    def __init__(self) -> None:
        self._positive = self.positive()

    def is_valid_field_type(self, value: Any) -> bool:
        return self._positive.is_valid_field_type(value)

    def is_valid_constraint_type(self, value: Any) -> bool:
        return self._positive.is_valid_constraint_type(value)

    def validate_value(self, context: OperatorContext) -> str | None:
        return self._positive.validate_value(context)

    def check(self, context: OperatorContext) -> bool:
        # Inputs the positive operator rejects fail closed here too
        if not self._accepts(context):
            return False
        return not self._positive.evaluate(context)

    def _accepts(self, context: OperatorContext) -> bool:
        positive = self._positive
        if not positive.is_valid_field_type(context.field_value):
            return False
        if context.constraint_value is MISSING:
            return not positive.metadata.requires_value
        return positive.is_valid_constraint_type(context.constraint_value)


def negated_metadata(
    positive: type[BaseOperator],
    name: str,
    display_name: str,
    description: str,
    example: str | None = None,
    **overrides: Any,
) -> OperatorMetadata:
    """Derive a negated operator's metadata from its positive counterpart."""
    return replace(
        positive.metadata,
        name=name,
        display_name=display_name,
        description=description,
        example=example,
        **overrides,
    )
