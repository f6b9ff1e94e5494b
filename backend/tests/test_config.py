"""Tests for settings and database configuration."""

from pathlib import Path

import pytest

from userservice.config import DEV_SECRET_KEY, Settings
from userservice.persistence import DatabaseConfig, create_db_engine

ENV_VARS = [
    "DATABASE_URL",
    "USERSERVICE_DB_PATH",
    "USERSERVICE_SECRET_KEY",
    "USERSERVICE_TOKEN_TTL",
    "USERSERVICE_RULES_PATH",
    "USERSERVICE_SEED_RULES",
    "USERSERVICE_BCRYPT_ROUNDS",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestDatabaseConfig:
    def test_database_url_wins(self, clean_env):
        clean_env.setenv("DATABASE_URL", "postgresql://u:p@localhost/users")
        clean_env.setenv("USERSERVICE_DB_PATH", "/tmp/ignored.db")

        config = DatabaseConfig.from_env(Path("/srv"))

        assert config.is_postgresql
        assert config.sqlalchemy_url == "postgresql+psycopg://u:p@localhost/users"

    def test_db_path(self, clean_env, tmp_path):
        clean_env.setenv("USERSERVICE_DB_PATH", str(tmp_path / "x.db"))

        config = DatabaseConfig.from_env()

        assert config.url == f"sqlite:///{tmp_path / 'x.db'}"
        assert config.sqlite_path == str(tmp_path / "x.db")

    def test_default_under_base_path(self, clean_env):
        config = DatabaseConfig.from_env(Path("/srv/app"))

        assert config.url == "sqlite:////srv/app/data/userservice.db"

    def test_memory(self):
        assert DatabaseConfig(url="sqlite:///:memory:").is_memory
        assert DatabaseConfig(url="sqlite://").is_memory
        assert not DatabaseConfig(url="sqlite:///a.db").is_memory

    def test_engine_creates_parent_directory(self, tmp_path):
        target = tmp_path / "nested" / "dir" / "users.db"

        engine = create_db_engine(DatabaseConfig(url=f"sqlite:///{target}"))
        engine.dispose()

        assert target.parent.is_dir()

    def test_unsupported_scheme(self):
        with pytest.raises(ValueError):
            create_db_engine(DatabaseConfig(url="mysql://localhost/users"))


class TestSettings:
    """Tests for Settings.from_env()."""

    def test_defaults(self, clean_env):
        settings = Settings.from_env(Path("/srv/app"))

        assert settings.secret_key == DEV_SECRET_KEY
        assert settings.token_ttl == 3600
        assert settings.rules_path == Path("/srv/app/config/validation_rules.yaml")
        assert settings.seed_rules is True
        assert settings.bcrypt_rounds == 12

    def test_overrides(self, clean_env, tmp_path):
        clean_env.setenv("USERSERVICE_SECRET_KEY", "s" * 32)
        clean_env.setenv("USERSERVICE_TOKEN_TTL", "60")
        clean_env.setenv("USERSERVICE_RULES_PATH", str(tmp_path / "rules.yaml"))
        clean_env.setenv("USERSERVICE_SEED_RULES", "false")
        clean_env.setenv("USERSERVICE_BCRYPT_ROUNDS", "4")

        settings = Settings.from_env(tmp_path)

        assert settings.secret_key == "s" * 32
        assert settings.token_ttl == 60
        assert settings.rules_path == tmp_path / "rules.yaml"
        assert settings.seed_rules is False
        assert settings.bcrypt_rounds == 4

    def test_base_path_from_backend_dir(self, clean_env, tmp_path):
        backend = tmp_path / "backend"
        backend.mkdir()
        clean_env.chdir(backend)

        settings = Settings.from_env()

        assert settings.rules_path == tmp_path / "config" / "validation_rules.yaml"
