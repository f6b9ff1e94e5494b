"""Initialize user service components.

Shared by the API lifespan and the CLI so both wire stores and services
the same way.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.engine import Engine

from userservice.auth import PasswordService, TokenService
from userservice.config import Settings
from userservice.persistence import SQLRuleStore, SQLUserStore, create_db_engine
from userservice.rules.loader import RuleConfigLoader
from userservice.services import UserService

logger = logging.getLogger(__name__)


@dataclass
class UserServiceComponents:
    """Container for all initialized components."""

    engine: Engine
    user_store: SQLUserStore
    rule_store: SQLRuleStore
    user_service: UserService

    def close(self) -> None:
        self.engine.dispose()


def seed_rules(rule_store: SQLRuleStore, settings: Settings) -> list[str]:
    """Insert seed rules from the configured YAML file that are not set yet.

    Raises:
        RuleFileError: If the seed file is malformed
    """
    if settings.rules_path is None:
        return []
    rules = RuleConfigLoader(settings.rules_path).load()
    return rule_store.seed_missing(rules)


def initialize_components(settings: Settings) -> UserServiceComponents:
    """Create the database engine, stores and the user service."""
    engine = create_db_engine(settings.database)
    user_store = SQLUserStore(engine)
    rule_store = SQLRuleStore(engine)

    user_service = UserService(
        users=user_store,
        rules=rule_store,
        password_service=PasswordService(rounds=settings.bcrypt_rounds),
        token_service=TokenService(settings.secret_key, ttl=settings.token_ttl),
    )

    logger.info(
        "User service initialized (%s database)",
        "sqlite" if settings.database.is_sqlite else "postgresql",
    )
    return UserServiceComponents(
        engine=engine,
        user_store=user_store,
        rule_store=rule_store,
        user_service=user_service,
    )
