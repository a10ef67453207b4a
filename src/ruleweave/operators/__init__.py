"""
Ruleweave Operators.

Built-in operator families and the registry that serves them by name.
"""

from .base import (
    BaseOperator,
    NegatedOperator,
    OperatorCategory,
    OperatorContext,
    OperatorMetadata,
    OperatorStrategy,
    ValidationResult,
    negated_metadata,
)
from .catalog import (
    CompatibleOperator,
    OperatorSuggestion,
    export_catalog,
    export_catalog_json,
    get_compatible_operators,
    get_suggestions,
)
from .comparison import values_equal
from .date_time import parse_date, parse_time
from .registry import (
    NEGATIONS,
    OperatorRegistry,
    get_operator_registry,
    initialize_operators,
    register_builtin_operators,
    register_custom_operator,
    register_custom_operators,
    reset_registry,
)
from .strings import like_to_regex

__all__ = [
    # Base
    "BaseOperator",
    "NegatedOperator",
    "OperatorCategory",
    "OperatorContext",
    "OperatorMetadata",
    "OperatorStrategy",
    "ValidationResult",
    "negated_metadata",
    # Registry
    "NEGATIONS",
    "OperatorRegistry",
    "get_operator_registry",
    "initialize_operators",
    "register_builtin_operators",
    "register_custom_operator",
    "register_custom_operators",
    "reset_registry",
    # Catalog
    "CompatibleOperator",
    "OperatorSuggestion",
    "export_catalog",
    "export_catalog_json",
    "get_compatible_operators",
    "get_suggestions",
    # Helpers
    "like_to_regex",
    "parse_date",
    "parse_time",
    "values_equal",
]
