"""Integration tests for the HTTP API."""

from datetime import datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text

from userservice.api import app as app_module
from userservice.errors import StoreFailure

SEED_FILE = Path(__file__).parent.parent.parent / "config" / "validation_rules.yaml"


@pytest.fixture
def client(tmp_path, monkeypatch):
    """Create test client backed by a fresh SQLite database."""
    # Always use a per-test SQLite DB, even if DATABASE_URL is set for live testing
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("USERSERVICE_DB_PATH", str(tmp_path / "test.db"))
    monkeypatch.setenv("USERSERVICE_RULES_PATH", str(SEED_FILE))
    monkeypatch.setenv("USERSERVICE_SEED_RULES", "1")
    monkeypatch.setenv("USERSERVICE_BCRYPT_ROUNDS", "4")

    with TestClient(app_module.app) as client:
        yield client


def user_payload(**overrides):
    payload = {
        "name": "Juan Rodriguez",
        "email": "juan@rodriguez.org",
        "password": "Password123@",
        "phones": [{"number": "1234567", "cityCode": "1", "countryCode": "57"}],
    }
    payload.update(overrides)
    return payload


def create_user(client, **overrides):
    """Helper to create a user and return its JSON."""
    response = client.post("/api/users", json=user_payload(**overrides))
    assert response.status_code == 201
    return response.json()


class TestCreateUser:
    """Tests for POST /api/users."""

    def test_create_user(self, client):
        response = client.post("/api/users", json=user_payload())

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Juan Rodriguez"
        assert data["email"] == "juan@rodriguez.org"
        assert data["isActive"] is True
        assert data["token"]
        assert data["created"] == data["modified"] == data["lastLogin"]
        assert data["phones"] == [{"number": "1234567", "cityCode": "1", "countryCode": "57"}]
        assert "password" not in data
        assert "passwordHash" not in data

    def test_seeded_password_rules_apply(self, client):
        """The shipped seed rules reject a weak password with both violations."""
        response = client.post("/api/users", json=user_payload(password="short"))

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_FAILED"
        assert body["message"] == (
            "Password must be at least 8 characters"
            " | Password does not match the required format"
        )
        assert [e["code"] for e in body["errors"]] == [
            "PASSWORD_TOO_SHORT",
            "PASSWORD_PATTERN_MISMATCH",
        ]

    def test_missing_fields(self, client):
        response = client.post("/api/users", json={"name": "Juan Rodriguez"})

        assert response.status_code == 400
        assert [e["code"] for e in response.json()["errors"]] == ["REQUIRED_FIELDS_MISSING"]

    def test_missing_phone_fields(self, client):
        response = client.post(
            "/api/users", json=user_payload(phones=[{"number": "1234567"}])
        )

        assert response.status_code == 400
        assert [e["field"] for e in response.json()["errors"]] == [
            "phones[0].cityCode",
            "phones[0].countryCode",
        ]

    def test_phones_optional(self, client):
        data = create_user(client, phones=None)

        assert data["phones"] == []

    def test_duplicate_email(self, client):
        create_user(client, email="a@b.com")

        response = client.post("/api/users", json=user_payload(email="a@b.com"))

        assert response.status_code == 400
        assert response.json()["message"] == "Email already registered"
        assert len(client.get("/api/users").json()) == 1


class TestQueryUsers:
    def test_list_users(self, client):
        create_user(client, email="a@b.com")
        create_user(client, email="c@d.com")

        response = client.get("/api/users")

        assert response.status_code == 200
        assert [u["email"] for u in response.json()] == ["a@b.com", "c@d.com"]

    def test_get_user(self, client):
        created = create_user(client)

        response = client.get(f"/api/users/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created

    def test_get_unknown_user(self, client):
        response = client.get("/api/users/missing")

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_get_by_email(self, client):
        created = create_user(client)

        response = client.get("/api/users/email/juan@rodriguez.org")

        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

    def test_get_by_unknown_email(self, client):
        assert client.get("/api/users/email/nobody@example.com").status_code == 404


class TestUpdateAndDelete:
    def test_update_user(self, client):
        created = create_user(client)

        response = client.put(
            f"/api/users/{created['id']}",
            json=user_payload(name="Juan R.", password="NewPassword1!"),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Juan R."
        assert data["created"] == created["created"]
        assert data["phones"] == created["phones"]

    def test_update_invalid(self, client):
        created = create_user(client)

        response = client.put(f"/api/users/{created['id']}", json=user_payload(email="nope"))

        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "INVALID_EMAIL"

    def test_update_unknown_user(self, client):
        assert client.put("/api/users/missing", json=user_payload()).status_code == 404

    def test_delete_user(self, client):
        created = create_user(client)

        response = client.delete(f"/api/users/{created['id']}")

        assert response.status_code == 204
        assert client.get(f"/api/users/{created['id']}").status_code == 404

    def test_delete_unknown_user(self, client):
        create_user(client)

        response = client.delete("/api/users/missing")

        assert response.status_code == 404
        assert len(client.get("/api/users").json()) == 1

    def test_record_login(self, client):
        created = create_user(client)

        response = client.post(f"/api/users/{created['id']}/login")

        assert response.status_code == 200
        last_login = datetime.fromisoformat(response.json()["lastLogin"])
        assert last_login >= datetime.fromisoformat(created["lastLogin"])

    def test_record_login_unknown_user(self, client):
        assert client.post("/api/users/missing/login").status_code == 404


class TestValidationConfig:
    """Tests for /api/validation-config."""

    def test_list_seeded_rules(self, client):
        response = client.get("/api/validation-config")

        assert response.status_code == 200
        keys = [r["key"] for r in response.json()]
        assert keys == sorted(keys)
        assert {"name.min.length", "email.regex", "password.min.length", "password.pattern"} <= set(keys)

    def test_get_rule(self, client):
        response = client.get("/api/validation-config/password.min.length")

        assert response.status_code == 200
        assert response.json()["value"] == "8"
        assert response.json()["kind"] == "integer"

    def test_get_unknown_rule(self, client):
        assert client.get("/api/validation-config/missing.key").status_code == 404

    def test_create_rule_takes_effect(self, client):
        """A new rule applies to the next registration without a restart."""
        response = client.post(
            "/api/validation-config",
            json={"key": "password.require.no.spaces", "value": "true"},
        )
        assert response.status_code == 201

        response = client.post("/api/users", json=user_payload(password="Pass word123@"))

        assert response.status_code == 400
        codes = [e["code"] for e in response.json()["errors"]]
        assert "PASSWORD_CONTAINS_WHITESPACE" in codes

    def test_create_duplicate_rule(self, client):
        response = client.post(
            "/api/validation-config", json={"key": "name.min.length", "value": "5"}
        )

        assert response.status_code == 409

    def test_create_rule_with_bad_value(self, client):
        """An uninterpretable value is the caller's mistake and is not stored."""
        client.delete("/api/validation-config/password.pattern")

        response = client.post(
            "/api/validation-config", json={"key": "password.pattern", "value": "(["}
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "password.pattern"
        assert client.get("/api/validation-config/password.pattern").status_code == 404

    def test_update_rule(self, client):
        response = client.put(
            "/api/validation-config/name.min.length",
            json={"value": "20", "description": "Long names only"},
        )

        assert response.status_code == 200
        assert response.json()["value"] == "20"

        response = client.post("/api/users", json=user_payload())
        assert response.json()["errors"][0]["code"] == "NAME_TOO_SHORT"

    def test_update_rule_with_bad_value(self, client):
        response = client.put(
            "/api/validation-config/password.min.length", json={"value": "eight"}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_RULE_CONFIGURATION"

    def test_update_unknown_rule(self, client):
        response = client.put("/api/validation-config/password.require.number", json={"value": "1"})

        assert response.status_code == 404

    def test_delete_rule_disables_check(self, client):
        assert client.delete("/api/validation-config/password.pattern").status_code == 204
        assert client.delete("/api/validation-config/password.min.length").status_code == 204

        response = client.post("/api/users", json=user_payload(password="short"))

        assert response.status_code == 201

    def test_delete_unknown_rule(self, client):
        assert client.delete("/api/validation-config/missing.key").status_code == 404


class TestErrorMapping:
    def test_broken_stored_rule_is_server_error(self, client):
        """A stored rule that cannot be interpreted fails loudly with 500."""
        with app_module.components.engine.connect() as conn:
            conn.execute(text(
                "UPDATE validation_config SET config_value = 'abc' "
                "WHERE config_key = 'password.min.length'"
            ))
            conn.commit()

        response = client.post("/api/users", json=user_payload())

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "INVALID_RULE_CONFIGURATION"
        assert body["errors"][0]["field"] == "password.min.length"
        assert client.get("/api/users").json() == []

    def test_store_failure_is_unavailable(self, client, monkeypatch):
        def fail(email):
            raise StoreFailure("User store unavailable")

        monkeypatch.setattr(app_module.components.user_store, "find_by_email", fail)

        response = client.post("/api/users", json=user_payload())

        assert response.status_code == 503
        assert response.json()["code"] == "STORE_UNAVAILABLE"


class TestHealth:
    def test_database_ok(self, client):
        response = client.get("/api/health/db")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_database_down(self, client, monkeypatch):
        def fail():
            raise StoreFailure("down")

        monkeypatch.setattr(app_module.components.user_store, "ping", fail)

        response = client.get("/api/health/db")

        assert response.status_code == 503
        assert response.json()["status"] == "error"


class TestStartup:
    def test_seed_value_that_does_not_fit_its_key_is_not_fatal(
        self, tmp_path, monkeypatch, caplog
    ):
        """A schema-valid seed file with an uninterpretable value is logged and skipped."""
        seeds = tmp_path / "rules.yaml"
        seeds.write_text('rules:\n  - key: name.min.length\n    value: "abc"\n')
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("USERSERVICE_DB_PATH", str(tmp_path / "test.db"))
        monkeypatch.setenv("USERSERVICE_RULES_PATH", str(seeds))
        monkeypatch.setenv("USERSERVICE_SEED_RULES", "1")
        monkeypatch.setenv("USERSERVICE_BCRYPT_ROUNDS", "4")

        with TestClient(app_module.app) as client:
            assert client.get("/api/health/db").status_code == 200
            assert client.get("/api/validation-config").json() == []

        assert "expected an integer" in caplog.text
