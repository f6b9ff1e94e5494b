"""User service CLI entry point."""

import click


@click.group()
def cli():
    """User service CLI: validation rules and database setup."""
    pass


# Register subcommand groups
from userservice.cli.db_cmd import db  # noqa: E402
from userservice.cli.rules_cmd import rules  # noqa: E402

cli.add_command(db)
cli.add_command(rules)
