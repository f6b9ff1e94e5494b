"""SQL-backed user store.

Users live in the `users` table; phones in `phones`, keyed by user id and
ordered by submission position. The store is dialect-neutral via SQLAlchemy
Core (SQLite and PostgreSQL).

Email uniqueness is enforced by a UNIQUE constraint so two concurrent
registrations cannot both persist the same address; the losing write raises
DuplicateEmailError.
"""

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from userservice.errors import DuplicateEmailError, StoreFailure
from userservice.users.types import Phone, User
from userservice.validation.types import EMAIL_ALREADY_REGISTERED

logger = logging.getLogger(__name__)


class SQLUserStore:
    """Manages users and their phones. Dialect-neutral via SQLAlchemy Core."""

    def __init__(self, engine: Engine):
        self._engine = engine
        self._ensure_tables()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _connect(self) -> Iterator[Connection]:
        """Open a connection, translating driver errors into StoreFailure."""
        try:
            with self._engine.connect() as conn:
                yield conn
        except SQLAlchemyError as e:
            logger.error("User store failure: %s", e)
            raise StoreFailure(f"User store unavailable: {e}") from e

    def _ensure_tables(self) -> None:
        """Create the users and phones tables if they don't exist."""
        with self._connect() as conn:
            conn.execute(text("""
                CREATE TABLE IF NOT EXISTS users (
                    id              TEXT PRIMARY KEY,
                    name            TEXT NOT NULL,
                    email           TEXT NOT NULL UNIQUE,
                    password_hash   TEXT NOT NULL,
                    created         TEXT NOT NULL,
                    modified        TEXT NOT NULL,
                    last_login      TEXT,
                    token           TEXT,
                    active          INTEGER NOT NULL DEFAULT 1
                )
            """))
            conn.execute(text("""
                CREATE TABLE IF NOT EXISTS phones (
                    id              TEXT PRIMARY KEY,
                    user_id         TEXT NOT NULL REFERENCES users(id),
                    position        INTEGER NOT NULL,
                    number          TEXT NOT NULL,
                    city_code       TEXT NOT NULL,
                    country_code    TEXT NOT NULL
                )
            """))
            conn.execute(text("""
                CREATE INDEX IF NOT EXISTS idx_phones_user
                ON phones(user_id, position)
            """))
            conn.commit()

    def _row_to_user(self, row: Any, phones: list[Phone]) -> User:
        """Convert a database row (Mapping) to a User."""
        return User(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            password_hash=row["password_hash"],
            created=datetime.fromisoformat(row["created"]),
            modified=datetime.fromisoformat(row["modified"]),
            last_login=datetime.fromisoformat(row["last_login"]) if row["last_login"] else None,
            token=row["token"],
            active=bool(row["active"]),
            phones=phones,
        )

    def _load_phones(self, conn: Connection, user_ids: list[str]) -> dict[str, list[Phone]]:
        """Load phones for the given users, grouped by user id in position order."""
        grouped: dict[str, list[Phone]] = {user_id: [] for user_id in user_ids}
        if not user_ids:
            return grouped

        params = {f"id{i}": user_id for i, user_id in enumerate(user_ids)}
        placeholders = ", ".join(f":{name}" for name in params)
        rows = conn.execute(
            text(
                "SELECT user_id, number, city_code, country_code FROM phones "
                f"WHERE user_id IN ({placeholders}) ORDER BY user_id, position"
            ),
            params,
        ).mappings().fetchall()

        for row in rows:
            grouped[row["user_id"]].append(
                Phone(
                    number=row["number"],
                    city_code=row["city_code"],
                    country_code=row["country_code"],
                )
            )
        return grouped

    def _find_one(self, where: str, params: dict[str, Any]) -> User | None:
        with self._connect() as conn:
            row = conn.execute(
                text(f"SELECT * FROM users WHERE {where}"), params
            ).mappings().fetchone()
            if not row:
                return None
            phones = self._load_phones(conn, [row["id"]])
        return self._row_to_user(row, phones[row["id"]])

    @staticmethod
    def _user_params(user: User) -> dict[str, Any]:
        return {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "password_hash": user.password_hash,
            "created": user.created.isoformat(),
            "modified": user.modified.isoformat(),
            "last_login": user.last_login.isoformat() if user.last_login else None,
            "token": user.token,
            "active": int(user.active),
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def find_by_id(self, id: str) -> User | None:
        """Get a user by ID."""
        return self._find_one("id = :id", {"id": id})

    def find_by_email(self, email: str) -> User | None:
        """Get a user by exact (case-sensitive) email."""
        return self._find_one("email = :email", {"email": email})

    def exists_by_id(self, id: str) -> bool:
        with self._connect() as conn:
            row = conn.execute(
                text("SELECT 1 FROM users WHERE id = :id"), {"id": id}
            ).fetchone()
        return row is not None

    def find_all(self) -> list[User]:
        """List all users, oldest first."""
        with self._connect() as conn:
            rows = conn.execute(
                text("SELECT * FROM users ORDER BY created, id")
            ).mappings().fetchall()
            phones = self._load_phones(conn, [row["id"] for row in rows])
        return [self._row_to_user(row, phones[row["id"]]) for row in rows]

    def save(self, user: User) -> User:
        """Insert or update a user and replace its phones in one transaction.

        The created timestamp is written on insert only.

        Raises:
            DuplicateEmailError: If another user already holds the email
            StoreFailure: If the database fails
        """
        params = self._user_params(user)

        with self._connect() as conn:
            exists = conn.execute(
                text("SELECT 1 FROM users WHERE id = :id"), {"id": user.id}
            ).fetchone() is not None

            try:
                if exists:
                    conn.execute(
                        text("""
                            UPDATE users
                            SET name = :name, email = :email,
                                password_hash = :password_hash,
                                modified = :modified, last_login = :last_login,
                                token = :token, active = :active
                            WHERE id = :id
                        """),
                        params,
                    )
                else:
                    conn.execute(
                        text("""
                            INSERT INTO users
                                (id, name, email, password_hash, created,
                                 modified, last_login, token, active)
                            VALUES
                                (:id, :name, :email, :password_hash, :created,
                                 :modified, :last_login, :token, :active)
                        """),
                        params,
                    )
            except IntegrityError as e:
                if "email" not in str(e.orig).lower():
                    raise
                logger.warning("Email uniqueness constraint rejected write for user %s", user.id)
                raise DuplicateEmailError([EMAIL_ALREADY_REGISTERED]) from e

            conn.execute(
                text("DELETE FROM phones WHERE user_id = :user_id"),
                {"user_id": user.id},
            )
            for position, phone in enumerate(user.phones):
                conn.execute(
                    text("""
                        INSERT INTO phones
                            (id, user_id, position, number, city_code, country_code)
                        VALUES
                            (:id, :user_id, :position, :number, :city_code, :country_code)
                    """),
                    {
                        "id": uuid.uuid4().hex,
                        "user_id": user.id,
                        "position": position,
                        "number": phone.number,
                        "city_code": phone.city_code,
                        "country_code": phone.country_code,
                    },
                )
            conn.commit()

        return self.find_by_id(user.id)  # type: ignore[return-value]

    def delete_by_id(self, id: str) -> bool:
        """Delete a user and its phones atomically. Returns True if deleted."""
        with self._connect() as conn:
            conn.execute(
                text("DELETE FROM phones WHERE user_id = :id"), {"id": id}
            )
            result = conn.execute(
                text("DELETE FROM users WHERE id = :id"), {"id": id}
            )
            conn.commit()
            return result.rowcount > 0

    def ping(self) -> None:
        """Run a trivial query; raises StoreFailure if the database is unreachable."""
        with self._connect() as conn:
            conn.execute(text("SELECT 1"))
