"""Validation rule CLI commands: list, get, set, delete, seed, check."""

from pathlib import Path

import click

from userservice.bootstrap import initialize_components
from userservice.config import Settings
from userservice.errors import ConfigurationError
from userservice.rules.loader import (
    RuleConfigLoader,
    RuleFileError,
    SchemaIssue,
    validate_rules_file,
)
from userservice.rules.resolver import parse_rule
from userservice.rules.types import ValidationRule


def _open_rule_store():
    settings = Settings.from_env()
    return settings, initialize_components(settings)


def _format_rule(rule: ValidationRule) -> str:
    line = f"{rule.key} = {rule.value}"
    if rule.kind is None:
        line += click.style("  (unrecognized key)", fg="yellow")
    if rule.description:
        line += f"  # {rule.description}"
    return line


@click.group()
def rules():
    """Validation rule commands."""
    pass


@rules.command("list")
def list_rules():
    """List all configured rules."""
    _, components = _open_rule_store()
    try:
        configured = components.rule_store.list()
    finally:
        components.close()

    if not configured:
        click.echo("No validation rules configured.")
        return
    for rule in configured:
        click.echo(_format_rule(rule))


@rules.command()
@click.argument("key")
def get(key: str):
    """Show a single rule."""
    _, components = _open_rule_store()
    try:
        rule = components.rule_store.find_by_key(key)
    finally:
        components.close()

    if rule is None:
        click.echo(f"Error: Validation rule '{key}' not found", err=True)
        raise SystemExit(1)
    click.echo(_format_rule(rule))


@rules.command("set")
@click.argument("key")
@click.argument("value")
@click.option("--description", "-d", default=None, help="Human-readable description.")
def set_rule(key: str, value: str, description: str | None):
    """Create or replace a rule."""
    _, components = _open_rule_store()
    store = components.rule_store
    try:
        if store.find_by_key(key) is None:
            store.create(ValidationRule(key=key, value=value, description=description))
            action = "Created"
        else:
            store.update(key, value, description)
            action = "Updated"
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    finally:
        components.close()

    click.echo(f"{action} {key} = {value}")


@rules.command()
@click.argument("key")
def delete(key: str):
    """Remove a rule. The check it configures is skipped afterwards."""
    _, components = _open_rule_store()
    try:
        deleted = components.rule_store.delete(key)
    finally:
        components.close()

    if not deleted:
        click.echo(f"Error: Validation rule '{key}' not found", err=True)
        raise SystemExit(1)
    click.echo(f"Deleted {key}")


@rules.command()
@click.argument(
    "path",
    required=False,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
def seed(path: Path | None):
    """Insert rules from a seed file that are not configured yet.

    PATH defaults to USERSERVICE_RULES_PATH or config/validation_rules.yaml.
    """
    settings, components = _open_rule_store()
    seed_path = path or settings.rules_path
    try:
        seeds = RuleConfigLoader(seed_path).load()
        inserted = components.rule_store.seed_missing(seeds)
    except RuleFileError as e:
        for issue in e.issues:
            click.echo(click.style(str(issue), fg="red"), err=True)
        raise SystemExit(1)
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    finally:
        components.close()

    if inserted:
        click.echo(f"Seeded {len(inserted)} rule(s): {', '.join(inserted)}")
    else:
        click.echo("All rules already configured. Nothing seeded.")


@rules.command()
@click.argument(
    "path",
    required=False,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
def check(path: Path | None):
    """Validate a seed file against the rule file schema and rule kinds."""
    seed_path = path or Settings.from_env().rules_path
    if not seed_path.exists():
        click.echo(f"Error: Rule file not found at {seed_path}", err=True)
        raise SystemExit(1)

    issues = validate_rules_file(seed_path)
    if not issues:
        # Schema-valid values must also fit their key's kind
        for rule in RuleConfigLoader(seed_path).load():
            try:
                parse_rule(rule)
            except ConfigurationError as e:
                issues.append(SchemaIssue(file=seed_path, message=e.reason, path=rule.key))

    for issue in issues:
        click.echo(click.style(str(issue), fg="red"))

    if issues:
        click.echo(f"\n{len(issues)} error(s) found.")
        raise SystemExit(1)
    click.echo(click.style("Rule file is valid.", fg="green"))
