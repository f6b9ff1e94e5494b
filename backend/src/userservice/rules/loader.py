"""Load validation rule seeds from YAML.

A seed file lists the rules a fresh database should start with:

    rules:
      - key: password.min.length
        value: "8"
        description: Minimum password length

Files are checked against the bundled JSON Schema before any rule is read.
PyYAML reads unquoted numbers and booleans as such; values are normalised
back to strings since rules are stored untyped.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

from userservice.errors import UserServiceError
from userservice.rules.types import ValidationRule

logger = logging.getLogger(__name__)

_SCHEMA_PATH = Path(__file__).parent / "schemas" / "rules.schema.json"


@dataclass
class SchemaIssue:
    """A single validation finding for a rule seed file."""

    file: Path
    message: str
    path: str = ""

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"[ERROR] {self.file}{loc}: {self.message}"


class RuleFileError(UserServiceError):
    """A rule seed file could not be parsed or failed schema validation."""

    def __init__(self, path: Path, issues: list[SchemaIssue]):
        self.path = path
        self.issues = issues
        super().__init__(
            f"Invalid rule file {path}: " + "; ".join(i.message for i in issues)
        )


def _load_schema() -> dict[str, Any]:
    with _SCHEMA_PATH.open() as fh:
        return json.load(fh)


def _json_path(error: ValidationError) -> str:
    """Convert a jsonschema ValidationError path to a readable string."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def validate_rules_file(yaml_path: Path) -> list[SchemaIssue]:
    """Validate a rule seed file against the bundled schema.

    Returns:
        A list of SchemaIssue objects (empty on success).
    """
    try:
        with yaml_path.open() as fh:
            raw = yaml.safe_load(fh)
    except OSError as exc:
        return [SchemaIssue(file=yaml_path, message=f"Cannot read file: {exc}")]
    except yaml.YAMLError as exc:
        return [SchemaIssue(file=yaml_path, message=f"YAML parse error: {exc}")]

    if raw is None:
        return [SchemaIssue(file=yaml_path, message="File is empty or contains only whitespace")]

    validator = Draft202012Validator(_load_schema())
    return [
        SchemaIssue(file=yaml_path, message=error.message, path=_json_path(error))
        for error in sorted(validator.iter_errors(raw), key=lambda e: list(e.path))
    ]


class RuleConfigLoader:
    """Loads validation rule seeds from a YAML file."""

    def __init__(self, rules_path: Path):
        self.rules_path = rules_path

    def load(self) -> list[ValidationRule]:
        """Load and schema-check the seed file.

        A missing file yields no rules.

        Raises:
            RuleFileError: If the file is malformed
        """
        if not self.rules_path.exists():
            logger.info("No rule seed file at %s", self.rules_path)
            return []

        issues = validate_rules_file(self.rules_path)
        if issues:
            raise RuleFileError(self.rules_path, issues)

        with self.rules_path.open() as fh:
            data = yaml.safe_load(fh)

        return [
            ValidationRule(
                key=entry["key"],
                value=_stringify(entry["value"]),
                description=entry.get("description"),
            )
            for entry in data["rules"]
        ]
