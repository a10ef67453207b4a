"""
Ruleweave - JSON Rule Evaluation Engine

Evaluates JSON-shaped rules (nested and/or/none conditions over named
operators) against data objects.

Usage:
    from ruleweave import get_rule_engine

    rule = {
        "conditions": {
            "and": [
                {"field": "age", "operator": "between", "value": [18, 65]},
                {"field": "email", "operator": "like", "value": "%@example.com"},
            ]
        }
    }
    result = get_rule_engine().evaluate(rule, {"age": 30, "email": "jo@example.com"})
    result.is_passed  # True

Package structure:
    ruleweave/
    ├── core/           # Settings, logging, constants
    ├── operators/      # Operator families, registry, catalog
    ├── engine/         # Validator, evaluator, mutator, introspector, facade
    ├── models.py       # Rule and result dataclasses
    ├── paths.py        # Field path resolution
    ├── builder.py      # Rule builders
    └── loader.py       # YAML/JSON rule files
"""

__version__ = "0.1.0"

from .builder import Builder, RuleBuilder
from .core import MISSING, get_logger, get_settings, reset_settings
from .engine import (
    Evaluator,
    Introspector,
    Mutator,
    RuleEngine,
    RuleValidator,
    get_rule_engine,
    reset_rule_engine,
)
from .errors import (
    OperatorRegistrationError,
    RuleError,
    RuleLoadError,
    RuleTypeError,
    RuleweaveError,
    UnknownOperatorError,
)
from .loader import RuleLoader
from .models import (
    Condition,
    Constraint,
    CriteriaRange,
    EvaluationResult,
    IntrospectionResult,
    ResultPayload,
    Rule,
    RuleValidationResult,
)
from .operators import (
    BaseOperator,
    NegatedOperator,
    OperatorCategory,
    OperatorContext,
    OperatorMetadata,
    OperatorRegistry,
    ValidationResult,
    export_catalog,
    get_operator_registry,
    initialize_operators,
    register_custom_operator,
    register_custom_operators,
    reset_registry,
)
from .paths import resolve_property

__all__ = [
    "__version__",
    # Engine
    "Evaluator",
    "Introspector",
    "Mutator",
    "RuleEngine",
    "RuleValidator",
    "get_rule_engine",
    "reset_rule_engine",
    # Builders and loading
    "Builder",
    "RuleBuilder",
    "RuleLoader",
    # Models
    "Condition",
    "Constraint",
    "CriteriaRange",
    "EvaluationResult",
    "IntrospectionResult",
    "ResultPayload",
    "Rule",
    "RuleValidationResult",
    # Operators
    "BaseOperator",
    "NegatedOperator",
    "OperatorCategory",
    "OperatorContext",
    "OperatorMetadata",
    "OperatorRegistry",
    "ValidationResult",
    "export_catalog",
    "get_operator_registry",
    "initialize_operators",
    "register_custom_operator",
    "register_custom_operators",
    "reset_registry",
    # Errors
    "OperatorRegistrationError",
    "RuleError",
    "RuleLoadError",
    "RuleTypeError",
    "RuleweaveError",
    "UnknownOperatorError",
    # Utilities
    "MISSING",
    "get_logger",
    "get_settings",
    "reset_settings",
    "resolve_property",
]
