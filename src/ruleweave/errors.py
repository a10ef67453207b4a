"""
Ruleweave Errors.

Domain-specific exceptions for rule construction, validation and loading.
Evaluation itself never raises for bad input; these errors are reserved for
configuration-time problems.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import RuleValidationResult


class RuleweaveError(Exception):
    """Base exception for ruleweave operations."""

    pass


class OperatorRegistrationError(RuleweaveError):
    """Raised when an operator name is registered twice without override."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f'Operator "{name}" is already registered. Use override=True to replace.'
        )


class UnknownOperatorError(RuleweaveError):
    """Raised when configuration refers to an operator that is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Invalid operator: {name}. Please provide a valid operator. "
            "The operator is case-sensitive."
        )


class RuleError(RuleweaveError):
    """Raised when a rule fails structural validation."""

    def __init__(
        self,
        message: str,
        element: Any = None,
        is_valid: bool = False,
    ):
        self.message = message
        self.element = element
        self.is_valid = is_valid
        super().__init__(message)

    @classmethod
    def from_result(cls, result: RuleValidationResult) -> RuleError:
        """Build an error from a failed validation result."""
        return cls(result.message or "Invalid rule", result.element, result.is_valid)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "is_valid": self.is_valid,
            "error": {"message": self.message, "element": self.element},
        }


class RuleTypeError(RuleweaveError):
    """Raised when a rule has the wrong shape for the requested operation."""

    pass


class RuleLoadError(RuleweaveError):
    """Raised when a rule file cannot be read or parsed."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to load rule file {self.path}: {reason}")
