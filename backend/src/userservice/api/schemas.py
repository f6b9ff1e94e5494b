"""Request bodies for the HTTP API.

Every user field is optional at this layer: missing or blank fields are
reported by the validation engine, not by request parsing.
"""

from pydantic import BaseModel, ConfigDict, Field

from userservice.rules.types import ValidationRule
from userservice.users.types import PhoneCandidate, UserCandidate


class PhoneRequest(BaseModel):
    """A phone inside a user request."""

    model_config = ConfigDict(populate_by_name=True)

    number: str | None = None
    city_code: str | None = Field(default=None, alias="cityCode")
    country_code: str | None = Field(default=None, alias="countryCode")

    def to_candidate(self) -> PhoneCandidate:
        return PhoneCandidate(
            number=self.number,
            city_code=self.city_code,
            country_code=self.country_code,
        )


class UserRequest(BaseModel):
    """Request body for creating or updating a user."""

    name: str | None = None
    email: str | None = None
    password: str | None = None
    phones: list[PhoneRequest] | None = None

    def to_candidate(self) -> UserCandidate:
        return UserCandidate(
            name=self.name,
            email=self.email,
            password=self.password,
            phones=[p.to_candidate() for p in self.phones or []],
        )


class RuleCreateRequest(BaseModel):
    """Request body for creating a validation rule."""

    key: str
    value: str
    description: str | None = None

    def to_rule(self) -> ValidationRule:
        return ValidationRule(key=self.key, value=self.value, description=self.description)


class RuleUpdateRequest(BaseModel):
    """Request body for replacing a validation rule's value."""

    value: str
    description: str | None = None
