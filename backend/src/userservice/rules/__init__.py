"""Validation rules: stored key/value rows and their typed interpretation."""

from userservice.rules.loader import (
    RuleConfigLoader,
    RuleFileError,
    SchemaIssue,
    validate_rules_file,
)
from userservice.rules.resolver import RuleResolver, parse_rule
from userservice.rules.types import (
    RULE_KINDS,
    FlagRule,
    IntegerRule,
    PatternRule,
    RuleKey,
    RuleKind,
    ValidationRule,
)

__all__ = [
    "RULE_KINDS",
    "FlagRule",
    "IntegerRule",
    "PatternRule",
    "RuleConfigLoader",
    "RuleFileError",
    "RuleKey",
    "RuleKind",
    "RuleResolver",
    "SchemaIssue",
    "ValidationRule",
    "parse_rule",
    "validate_rules_file",
]
