"""Database CLI commands."""

import click

from userservice.bootstrap import initialize_components, seed_rules
from userservice.config import Settings


@click.group()
def db():
    """Database commands."""
    pass


@db.command()
@click.option(
    "--no-seed",
    is_flag=True,
    default=False,
    help="Create tables without seeding validation rules.",
)
def init(no_seed: bool):
    """Create the user and validation rule tables."""
    settings = Settings.from_env()
    components = initialize_components(settings)
    try:
        click.echo("Tables ready: users, phones, validation_config")
        if no_seed:
            return
        inserted = seed_rules(components.rule_store, settings)
        if inserted:
            click.echo(f"Seeded {len(inserted)} rule(s): {', '.join(inserted)}")
        else:
            click.echo("No rules seeded.")
    finally:
        components.close()
