"""Application settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from userservice.persistence.config import DatabaseConfig

DEV_SECRET_KEY = "dev-secret-key-change-in-production"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def resolve_base_path() -> Path:
    """Project root: the parent of backend/ when run from there, else cwd."""
    cwd = Path.cwd()
    if cwd.name == "backend":
        return cwd.parent
    return cwd


@dataclass
class Settings:
    """Runtime configuration.

    Attributes:
        database: Database connection configuration
        secret_key: Key used to sign user tokens
        token_ttl: Token lifetime in seconds
        rules_path: YAML file with rule seeds
        seed_rules: Whether missing rules are seeded on startup
        bcrypt_rounds: bcrypt work factor for password hashes
    """

    database: DatabaseConfig
    secret_key: str = DEV_SECRET_KEY
    token_ttl: int = 3600
    rules_path: Path | None = None
    seed_rules: bool = True
    bcrypt_rounds: int = 12

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> Settings:
        """Create settings from USERSERVICE_* environment variables."""
        base_path = base_path or resolve_base_path()

        rules_path = os.environ.get("USERSERVICE_RULES_PATH")
        return cls(
            database=DatabaseConfig.from_env(base_path),
            secret_key=os.environ.get("USERSERVICE_SECRET_KEY", DEV_SECRET_KEY),
            token_ttl=int(os.environ.get("USERSERVICE_TOKEN_TTL", "3600")),
            rules_path=Path(rules_path) if rules_path else base_path / "config" / "validation_rules.yaml",
            seed_rules=_env_flag("USERSERVICE_SEED_RULES", True),
            bcrypt_rounds=int(os.environ.get("USERSERVICE_BCRYPT_ROUNDS", "12")),
        )
