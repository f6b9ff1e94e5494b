"""Persistence layer - store protocols and SQL-backed stores."""

from userservice.persistence.adapter import EmailLookup, RuleLookup, RuleStore, UserStore
from userservice.persistence.config import DatabaseConfig, create_db_engine
from userservice.persistence.rules import SQLRuleStore
from userservice.persistence.users import SQLUserStore

__all__ = [
    "DatabaseConfig",
    "EmailLookup",
    "RuleLookup",
    "RuleStore",
    "SQLRuleStore",
    "SQLUserStore",
    "UserStore",
    "create_db_engine",
]
