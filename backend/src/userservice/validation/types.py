"""Core types for the validation engine."""

from dataclasses import dataclass, field
from typing import Any

from userservice.errors import VIOLATION_DELIMITER


@dataclass(frozen=True)
class Violation:
    """A single failed validation rule.

    Attributes:
        message: Human-readable message
        code: Machine-readable code (e.g., "PASSWORD_TOO_SHORT")
        field: Candidate field this violation relates to, or None
    """

    message: str
    code: str
    field: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "field": self.field,
        }


@dataclass
class ValidationResult:
    """Result of validating a candidate.

    Attributes:
        violations: Violations in evaluation order (never deduplicated)
    """

    violations: list[Violation] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.violations

    @property
    def codes(self) -> list[str]:
        return [v.code for v in self.violations]

    def joined_message(self) -> str:
        """Join all violation messages into one report string."""
        return VIOLATION_DELIMITER.join(v.message for v in self.violations)

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [v.to_dict() for v in self.violations],
        }


# Reported both by the engine's uniqueness check and by stores when the
# UNIQUE constraint on email rejects a concurrent write
EMAIL_ALREADY_REGISTERED = Violation(
    message="Email already registered",
    code="EMAIL_ALREADY_REGISTERED",
    field="email",
)
