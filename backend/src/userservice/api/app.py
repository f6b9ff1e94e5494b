"""FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from userservice.api.errors import register_exception_handlers
from userservice.api.health import create_health_router
from userservice.api.rules import create_rules_router
from userservice.api.users import create_users_router
from userservice.bootstrap import UserServiceComponents, initialize_components, seed_rules
from userservice.config import Settings
from userservice.errors import ConfigurationError
from userservice.rules.loader import RuleFileError

logger = logging.getLogger(__name__)

# Global instances (initialized on startup)
settings: Settings | None = None
components: UserServiceComponents | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize on startup, cleanup on shutdown."""
    global settings, components

    settings = Settings.from_env()
    components = initialize_components(settings)

    # Seed missing rules (a bad seed file is reported, not fatal)
    if settings.seed_rules:
        try:
            seed_rules(components.rule_store, settings)
        except RuleFileError as e:
            for issue in e.issues:
                logger.error("Rule seed error: %s", issue)
            logger.warning(
                "Rule seeding skipped. Run 'userservice rules check' for details."
            )
        except ConfigurationError as e:
            logger.error("Rule seed error: %s", e)
            logger.warning(
                "Rule seeding skipped. Run 'userservice rules check' for details."
            )

    yield

    # Cleanup
    if components:
        components.close()
    components = None


def _get_user_service():
    return components.user_service if components else None


def _get_user_store():
    return components.user_store if components else None


def _get_rule_store():
    return components.rule_store if components else None


app = FastAPI(title="User Service API", lifespan=lifespan)

register_exception_handlers(app)
app.include_router(create_users_router(get_user_service=_get_user_service))
app.include_router(create_rules_router(get_rule_store=_get_rule_store))
app.include_router(create_health_router(get_user_store=_get_user_store))
