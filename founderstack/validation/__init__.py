"""Advisory validation of intent fields."""

from founderstack.validation.validator import (
    IntentValidator,
    ValidationIssue,
    ValidationResult,
)

__all__ = ["IntentValidator", "ValidationIssue", "ValidationResult"]
