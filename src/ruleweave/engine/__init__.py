"""
Ruleweave Engine.

Rule validation, evaluation, mutation and introspection, plus the RuleEngine
facade tying them together.
"""

from .evaluator import Evaluator
from .introspector import Introspector
from .mutator import Mutator
from .rule_engine import RuleEngine, get_rule_engine, reset_rule_engine
from .validator import RuleValidator

__all__ = [
    "Evaluator",
    "Introspector",
    "Mutator",
    "RuleEngine",
    "RuleValidator",
    "get_rule_engine",
    "reset_rule_engine",
]
