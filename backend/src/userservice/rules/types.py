"""Validation rule types.

Rules are stored as untyped key/value rows. The recognized keys form a
closed set; each key has a kind that decides how its value is read:

- integer: value parses as a non-negative int (length rules)
- pattern: value compiles as a regular expression
- flag: presence-only, any value enables the check
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any


class RuleKey(str, Enum):
    """Rule keys consumed by the validation engine."""

    NAME_MIN_LENGTH = "name.min.length"
    EMAIL_REGEX = "email.regex"
    PASSWORD_MIN_LENGTH = "password.min.length"
    PASSWORD_PATTERN = "password.pattern"
    PASSWORD_REQUIRE_NUMBER = "password.require.number"
    PASSWORD_REQUIRE_LOWERCASE = "password.require.lowercase"
    PASSWORD_REQUIRE_UPPERCASE = "password.require.uppercase"
    PASSWORD_REQUIRE_SPECIAL = "password.require.special"
    PASSWORD_NO_SPACES = "password.no.spaces"
    PASSWORD_REQUIRE_NO_SPACES = "password.require.no.spaces"


class RuleKind(str, Enum):
    INTEGER = "integer"
    PATTERN = "pattern"
    FLAG = "flag"


RULE_KINDS: dict[str, RuleKind] = {
    RuleKey.NAME_MIN_LENGTH.value: RuleKind.INTEGER,
    RuleKey.EMAIL_REGEX.value: RuleKind.PATTERN,
    RuleKey.PASSWORD_MIN_LENGTH.value: RuleKind.INTEGER,
    RuleKey.PASSWORD_PATTERN.value: RuleKind.PATTERN,
    RuleKey.PASSWORD_REQUIRE_NUMBER.value: RuleKind.FLAG,
    RuleKey.PASSWORD_REQUIRE_LOWERCASE.value: RuleKind.FLAG,
    RuleKey.PASSWORD_REQUIRE_UPPERCASE.value: RuleKind.FLAG,
    RuleKey.PASSWORD_REQUIRE_SPECIAL.value: RuleKind.FLAG,
    RuleKey.PASSWORD_NO_SPACES.value: RuleKind.FLAG,
    RuleKey.PASSWORD_REQUIRE_NO_SPACES.value: RuleKind.FLAG,
}


@dataclass
class ValidationRule:
    """A stored validation rule row."""

    key: str
    value: str
    description: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def kind(self) -> RuleKind | None:
        """Kind of a recognized key, None for keys the engine ignores."""
        return RULE_KINDS.get(self.key)

    def to_dict(self) -> dict[str, Any]:
        """Convert to API response dict."""
        return {
            "key": self.key,
            "value": self.value,
            "description": self.description,
            "kind": self.kind.value if self.kind else None,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


# =============================================================================
# Tagged rule values
# =============================================================================


@dataclass(frozen=True)
class IntegerRule:
    key: str
    value: int


@dataclass(frozen=True)
class PatternRule:
    key: str
    pattern: re.Pattern

    def matches(self, value: str) -> bool:
        """Whole-string match."""
        return self.pattern.fullmatch(value) is not None


@dataclass(frozen=True)
class FlagRule:
    key: str


ResolvedRule = IntegerRule | PatternRule | FlagRule
