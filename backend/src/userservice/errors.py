"""Error taxonomy for the user service.

Every failure the core can raise derives from UserServiceError so the
presentation layer can map them to transport outcomes in one place:

- ValidationFailure: one or more rule violations (client error)
- NotFoundError: referenced record does not exist
- RuleConflictError: a rule key is already configured
- ConfigurationError: a stored rule value cannot be interpreted
- StoreFailure: the persistence collaborator failed
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from userservice.validation.types import Violation


# Delimiter used when violations are surfaced as a single report string
VIOLATION_DELIMITER = " | "


class UserServiceError(Exception):
    """Base class for all user service errors."""

    pass


class ValidationFailure(UserServiceError):
    """Candidate data broke one or more validation rules.

    Attributes:
        violations: Ordered violations, in evaluation order
    """

    def __init__(self, violations: list[Violation]):
        self.violations = list(violations)
        super().__init__(self.message)

    @property
    def message(self) -> str:
        return VIOLATION_DELIMITER.join(v.message for v in self.violations)


class DuplicateEmailError(ValidationFailure):
    """The store rejected a write because the email is already taken."""

    pass


class NotFoundError(UserServiceError):
    """A referenced record does not exist."""

    pass


class UserNotFoundError(NotFoundError):
    """No user exists with the given id."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User '{user_id}' not found")


class RuleNotFoundError(NotFoundError):
    """No validation rule exists with the given key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Validation rule '{key}' not found")


class RuleConflictError(UserServiceError):
    """A validation rule with the given key already exists."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Validation rule '{key}' already exists")


class ConfigurationError(UserServiceError):
    """A stored rule value cannot be interpreted.

    This is an operator data-entry mistake, not a user input mistake.
    """

    def __init__(self, key: str, value: str | None, reason: str):
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(
            f"Invalid value {value!r} for validation rule '{key}': {reason}"
        )


class StoreFailure(UserServiceError):
    """The persistence layer is unavailable or failed unexpectedly."""

    pass
