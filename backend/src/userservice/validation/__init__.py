"""Rule-driven validation of user candidates.

Usage:
    from userservice.validation import ValidationEngine

    result = ValidationEngine().validate(candidate, rule_store, user_store)
    if not result.valid:
        raise ValidationFailure(result.violations)
"""

from userservice.validation.engine import (
    DEFAULT_EMAIL_PATTERN,
    SPECIAL_CHARACTERS,
    ValidationEngine,
)
from userservice.validation.types import (
    EMAIL_ALREADY_REGISTERED,
    ValidationResult,
    Violation,
)

__all__ = [
    "DEFAULT_EMAIL_PATTERN",
    "EMAIL_ALREADY_REGISTERED",
    "SPECIAL_CHARACTERS",
    "ValidationEngine",
    "ValidationResult",
    "Violation",
]
