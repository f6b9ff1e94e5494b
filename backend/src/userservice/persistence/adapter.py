"""Store protocols: shared interfaces for the user and rule stores."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from userservice.rules.types import ValidationRule
from userservice.users.types import User


@runtime_checkable
class RuleLookup(Protocol):
    """Point lookup of a rule by exact key.

    Absence means "not configured", never an error.
    """

    def find_by_key(self, key: str) -> ValidationRule | None: ...


@runtime_checkable
class EmailLookup(Protocol):
    """Lookup of a user by email, used by the uniqueness check."""

    def find_by_email(self, email: str) -> User | None: ...


@runtime_checkable
class UserStore(EmailLookup, Protocol):
    """Interface all user stores must implement."""

    def find_by_id(self, id: str) -> User | None: ...

    def find_all(self) -> list[User]: ...

    def exists_by_id(self, id: str) -> bool: ...

    def save(self, user: User) -> User: ...

    def delete_by_id(self, id: str) -> bool: ...


@runtime_checkable
class RuleStore(RuleLookup, Protocol):
    """Interface all rule stores must implement."""

    def list(self) -> list[ValidationRule]: ...

    def create(self, rule: ValidationRule) -> ValidationRule: ...

    def update(
        self, key: str, value: str, description: str | None = None
    ) -> ValidationRule | None: ...

    def delete(self, key: str) -> bool: ...

    def seed_missing(self, rules: list[ValidationRule]) -> list[str]: ...
