"""Resolution of raw rule rows into tagged rule values.

Rule values are stored as strings. The resolver reads each key at most once
per instance and turns it into an IntegerRule, PatternRule or FlagRule.
A value that cannot be interpreted raises ConfigurationError instead of
silently passing or rejecting the candidate.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from userservice.errors import ConfigurationError
from userservice.rules.types import (
    FlagRule,
    IntegerRule,
    PatternRule,
    ResolvedRule,
    RuleKey,
    RuleKind,
    ValidationRule,
)

if TYPE_CHECKING:
    from userservice.persistence.adapter import RuleLookup

logger = logging.getLogger(__name__)


def unescape_pattern(value: str) -> str:
    """Collapse escaped backslashes as stored by form/JSON based editors."""
    return value.replace("\\\\", "\\")


def parse_rule(rule: ValidationRule) -> ResolvedRule | None:
    """Interpret a stored rule according to its key's kind.

    Args:
        rule: The stored rule row

    Returns:
        The tagged value, or None for keys the engine does not consume

    Raises:
        ConfigurationError: If the value does not fit the key's kind
    """
    kind = rule.kind
    if kind is None:
        return None

    if kind == RuleKind.INTEGER:
        try:
            value = int(rule.value.strip())
        except (AttributeError, ValueError):
            raise ConfigurationError(rule.key, rule.value, "expected an integer")
        if value < 0:
            raise ConfigurationError(rule.key, rule.value, "must not be negative")
        return IntegerRule(key=rule.key, value=value)

    if kind == RuleKind.PATTERN:
        source = rule.value or ""
        if rule.key == RuleKey.EMAIL_REGEX.value:
            source = unescape_pattern(source)
        try:
            pattern = re.compile(source)
        except re.error as e:
            raise ConfigurationError(rule.key, rule.value, f"invalid regular expression ({e})")
        return PatternRule(key=rule.key, pattern=pattern)

    return FlagRule(key=rule.key)


class RuleResolver:
    """Reads and interprets rules from a lookup, one lookup per key."""

    def __init__(self, lookup: RuleLookup):
        self._lookup = lookup
        self._resolved: dict[str, ResolvedRule | None] = {}

    def integer(self, key: RuleKey) -> IntegerRule | None:
        resolved = self._resolve(key)
        return resolved if isinstance(resolved, IntegerRule) else None

    def pattern(self, key: RuleKey) -> PatternRule | None:
        resolved = self._resolve(key)
        return resolved if isinstance(resolved, PatternRule) else None

    def flag(self, *keys: RuleKey) -> FlagRule | None:
        """Return the first configured flag among the given (alias) keys."""
        for key in keys:
            resolved = self._resolve(key)
            if isinstance(resolved, FlagRule):
                return resolved
        return None

    def _resolve(self, key: RuleKey) -> ResolvedRule | None:
        if key.value in self._resolved:
            return self._resolved[key.value]

        rule = self._lookup.find_by_key(key.value)
        if rule is None:
            resolved = None
        else:
            try:
                resolved = parse_rule(rule)
            except ConfigurationError as e:
                logger.error("Validation rule misconfigured: %s", e)
                raise

        self._resolved[key.value] = resolved
        return resolved
