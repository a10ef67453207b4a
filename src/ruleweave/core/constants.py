"""
Ruleweave Constants

Shared constants and sentinels used by the resolver, operators and engine.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# =============================================================================
# Missing Value Sentinel
#
# Distinguishes "the path does not exist" / "no value was given" from an
# explicit None in the data. Only the existence operators treat the two
# differently.
# =============================================================================


class _MissingType:
    """Singleton marker for an absent value."""

    _instance: _MissingType | None = None

    def __new__(cls) -> _MissingType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _MissingType:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _MissingType:
        return self

    def __reduce__(self) -> str:
        return "MISSING"


MISSING: Any = _MissingType()


def is_missing(value: Any) -> bool:
    """Check whether a value is the MISSING sentinel."""
    return value is MISSING


# =============================================================================
# Condition Types
# =============================================================================


class ConditionType(str, Enum):
    """Boolean combinator held by a condition node."""

    AND = "and"  # every child passes
    OR = "or"  # at least one child passes
    NONE = "none"  # no child passes


CONDITION_KEYS = tuple(t.value for t in ConditionType)

# Marker used to detect self-references and text path expressions
SELF_REFERENCE_MARKER = "$."
