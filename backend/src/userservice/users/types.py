"""User and phone types."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class PhoneCandidate:
    """Phone data as submitted by a caller. Any field may be missing."""

    number: str | None = None
    city_code: str | None = None
    country_code: str | None = None


@dataclass
class UserCandidate:
    """User data as submitted by a caller, before validation."""

    name: str | None = None
    email: str | None = None
    password: str | None = None
    phones: list[PhoneCandidate] = field(default_factory=list)


@dataclass
class Phone:
    """A phone owned by exactly one user."""

    number: str
    city_code: str
    country_code: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "cityCode": self.city_code,
            "countryCode": self.country_code,
        }


@dataclass
class User:
    """A registered user.

    The password is only ever held as a bcrypt hash.
    """

    id: str
    name: str
    email: str
    password_hash: str
    created: datetime
    modified: datetime
    last_login: datetime | None = None
    token: str | None = None
    active: bool = True
    phones: list[Phone] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to API response dict. Never includes the password hash."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phones": [p.to_dict() for p in self.phones],
            "created": self.created.isoformat(),
            "modified": self.modified.isoformat(),
            "lastLogin": self.last_login.isoformat() if self.last_login else None,
            "token": self.token,
            "isActive": self.active,
        }
