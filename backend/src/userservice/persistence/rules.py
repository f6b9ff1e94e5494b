"""SQL-backed validation rule store.

Uses a `validation_config` table of key/value rows. Values of recognized
keys are checked with the rule resolver before they are written, so an
operator typo is rejected at write time rather than on the next
registration.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from userservice.errors import RuleConflictError, StoreFailure
from userservice.rules.resolver import parse_rule
from userservice.rules.types import ValidationRule

logger = logging.getLogger(__name__)


class SQLRuleStore:
    """Manages validation rules. Dialect-neutral via SQLAlchemy Core."""

    def __init__(self, engine: Engine):
        self._engine = engine
        self._ensure_table()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _connect(self) -> Iterator[Connection]:
        try:
            with self._engine.connect() as conn:
                yield conn
        except SQLAlchemyError as e:
            logger.error("Rule store failure: %s", e)
            raise StoreFailure(f"Rule store unavailable: {e}") from e

    def _ensure_table(self) -> None:
        """Create the validation_config table if it doesn't exist."""
        with self._connect() as conn:
            conn.execute(text("""
                CREATE TABLE IF NOT EXISTS validation_config (
                    config_key      TEXT PRIMARY KEY,
                    config_value    TEXT NOT NULL,
                    description     TEXT,
                    created_at      TEXT,
                    updated_at      TEXT
                )
            """))
            conn.commit()

    def _row_to_rule(self, row: Any) -> ValidationRule:
        """Convert a database row (Mapping) to a ValidationRule."""
        return ValidationRule(
            key=row["config_key"],
            value=row["config_value"],
            description=row["description"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _insert(self, conn: Connection, rule: ValidationRule) -> None:
        now = datetime.now(UTC).isoformat()
        conn.execute(
            text("""
                INSERT INTO validation_config
                    (config_key, config_value, description, created_at, updated_at)
                VALUES
                    (:key, :value, :description, :created_at, :updated_at)
            """),
            {
                "key": rule.key,
                "value": rule.value,
                "description": rule.description,
                "created_at": rule.created_at or now,
                "updated_at": rule.updated_at or now,
            },
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def find_by_key(self, key: str) -> ValidationRule | None:
        """Get a rule by exact key."""
        with self._connect() as conn:
            row = conn.execute(
                text("SELECT * FROM validation_config WHERE config_key = :key"),
                {"key": key},
            ).mappings().fetchone()

        if not row:
            return None
        return self._row_to_rule(row)

    def list(self) -> list[ValidationRule]:
        """List all rules ordered by key."""
        with self._connect() as conn:
            rows = conn.execute(
                text("SELECT * FROM validation_config ORDER BY config_key")
            ).mappings().fetchall()
        return [self._row_to_rule(row) for row in rows]

    def create(self, rule: ValidationRule) -> ValidationRule:
        """Insert a new rule.

        Raises:
            RuleConflictError: If the key already exists
            ConfigurationError: If the value does not fit the key's kind
        """
        parse_rule(rule)
        if self.find_by_key(rule.key) is not None:
            raise RuleConflictError(rule.key)

        with self._connect() as conn:
            try:
                self._insert(conn, rule)
            except IntegrityError as e:
                # Another writer inserted the key after the existence check
                raise RuleConflictError(rule.key) from e
            conn.commit()

        logger.info("Validation rule created: %s", rule.key)
        return self.find_by_key(rule.key)  # type: ignore[return-value]

    def update(
        self, key: str, value: str, description: str | None = None
    ) -> ValidationRule | None:
        """Replace a rule's value and description. Returns None if unknown.

        Raises:
            ConfigurationError: If the value does not fit the key's kind
        """
        parse_rule(ValidationRule(key=key, value=value))
        if self.find_by_key(key) is None:
            return None

        with self._connect() as conn:
            conn.execute(
                text("""
                    UPDATE validation_config
                    SET config_value = :value, description = :description,
                        updated_at = :updated_at
                    WHERE config_key = :key
                """),
                {
                    "key": key,
                    "value": value,
                    "description": description,
                    "updated_at": datetime.now(UTC).isoformat(),
                },
            )
            conn.commit()

        logger.info("Validation rule updated: %s", key)
        return self.find_by_key(key)

    def delete(self, key: str) -> bool:
        """Delete a rule. Returns True if deleted."""
        with self._connect() as conn:
            result = conn.execute(
                text("DELETE FROM validation_config WHERE config_key = :key"),
                {"key": key},
            )
            conn.commit()
            deleted = result.rowcount > 0

        if deleted:
            logger.info("Validation rule deleted: %s", key)
        return deleted

    def seed_missing(self, rules: list[ValidationRule]) -> list[str]:
        """Insert rules whose keys are not configured yet.

        Existing rows are left alone so operator edits survive restarts.

        Returns:
            Keys that were inserted
        """
        for rule in rules:
            parse_rule(rule)

        inserted: list[str] = []
        with self._connect() as conn:
            existing = {
                row[0]
                for row in conn.execute(text("SELECT config_key FROM validation_config"))
            }
            for rule in rules:
                if rule.key in existing:
                    continue
                self._insert(conn, rule)
                existing.add(rule.key)
                inserted.append(rule.key)
            conn.commit()

        if inserted:
            logger.info("Seeded validation rules: %s", ", ".join(inserted))
        return inserted

    def ping(self) -> None:
        with self._connect() as conn:
            conn.execute(text("SELECT 1"))
