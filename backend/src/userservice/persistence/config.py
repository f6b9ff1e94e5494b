"""Database configuration and engine factory."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool


@dataclass
class DatabaseConfig:
    """Database connection configuration.

    Supports sqlite:/// and postgresql:// URL schemes.
    """

    url: str

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> DatabaseConfig:
        """Create config from environment variables.

        Resolution order:
        1. DATABASE_URL env var (standard)
        2. USERSERVICE_DB_PATH env var (converted to sqlite:/// URL)
        3. Default: sqlite:///{base_path}/data/userservice.db
        """
        url = os.environ.get("DATABASE_URL")
        if url:
            return cls(url=url)

        db_path = os.environ.get("USERSERVICE_DB_PATH")
        if db_path:
            return cls(url=f"sqlite:///{db_path}")

        if base_path:
            return cls(url=f"sqlite:///{base_path / 'data' / 'userservice.db'}")

        return cls(url="sqlite:///userservice.db")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_postgresql(self) -> bool:
        return self.url.startswith("postgresql")

    @property
    def is_memory(self) -> bool:
        return self.is_sqlite and self.sqlite_path in ("", ":memory:")

    @property
    def sqlite_path(self) -> str:
        """Filesystem path of a sqlite:/// URL ("" for in-memory)."""
        return self.url.replace("sqlite:///", "").replace("sqlite://", "")

    @property
    def sqlalchemy_url(self) -> str:
        """URL suitable for SQLAlchemy engine creation.

        Ensures postgresql:// URLs use the psycopg (v3) driver.
        """
        if self.url.startswith("postgresql://"):
            return self.url.replace("postgresql://", "postgresql+psycopg://", 1)
        return self.url


def create_db_engine(config: DatabaseConfig) -> Engine:
    """Create a SQLAlchemy engine for the configured database.

    In-memory SQLite databases share a single connection so every store
    sees the same tables.

    Raises:
        ValueError: For unsupported URL schemes.
    """
    if config.is_memory:
        return create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    if config.is_sqlite:
        path = config.sqlite_path
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(
            config.sqlalchemy_url,
            connect_args={"check_same_thread": False},
        )

    if config.is_postgresql:
        return create_engine(config.sqlalchemy_url, pool_pre_ping=True)

    raise ValueError(f"Unsupported database URL scheme: {config.url}")
