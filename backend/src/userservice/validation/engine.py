"""Rule-driven validation of user candidates.

The engine checks a candidate against rules read from a rule lookup at call
time. Evaluation order is fixed and observable through violation order:

1. Presence gate: name, email and password must be non-blank. A failure
   short-circuits with a single violation.
2. Name: `name.min.length`
3. Email format: configured `email.regex`, else the built-in pattern
4. Email uniqueness: one lookup, only when the format passed
5. Password: `password.min.length`, `password.pattern`, then the
   presence-only `password.require.*` / `password.no.spaces` flags
6. Phones: number, city code and country code must be non-blank

Everything after the presence gate is collected into one result; there is
no early return.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from userservice.rules.resolver import RuleResolver
from userservice.rules.types import RuleKey
from userservice.users.types import PhoneCandidate, UserCandidate
from userservice.validation.types import (
    EMAIL_ALREADY_REGISTERED,
    ValidationResult,
    Violation,
)

if TYPE_CHECKING:
    from userservice.persistence.adapter import EmailLookup, RuleLookup

logger = logging.getLogger(__name__)


# Used when no `email.regex` rule is configured
DEFAULT_EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@(.+)$")

SPECIAL_CHARACTERS = "@#$%^&+=!?"

_DIGIT = re.compile(r"[0-9]")
_LOWERCASE = re.compile(r"[a-z]")
_UPPERCASE = re.compile(r"[A-Z]")
_SPECIAL = re.compile(f"[{re.escape(SPECIAL_CHARACTERS)}]")
_WHITESPACE = re.compile(r"\s")


def _is_blank(value: str | None) -> bool:
    return value is None or value.strip() == ""


class ValidationEngine:
    """Validates user candidates against dynamically configured rules.

    The engine holds no state between calls. Rules and the email lookup are
    passed on every call, so callers can validate against distinct rule sets
    concurrently.
    """

    def validate(
        self,
        candidate: UserCandidate,
        rules: RuleLookup,
        users: EmailLookup,
        exclude_user_id: str | None = None,
    ) -> ValidationResult:
        """Validate a candidate.

        Args:
            candidate: The submitted user data (never mutated)
            rules: Lookup for rule rows by key
            users: Lookup used by the email uniqueness check
            exclude_user_id: On update, the user's own id, so keeping the
                current email is not reported as a duplicate

        Returns:
            ValidationResult with violations in evaluation order

        Raises:
            ConfigurationError: If a configured rule value cannot be interpreted
        """
        logger.debug("Validating user candidate: %s", candidate.email)

        if (
            _is_blank(candidate.name)
            or _is_blank(candidate.email)
            or _is_blank(candidate.password)
        ):
            result = ValidationResult([
                Violation(
                    message="Required fields missing: name, email and password must not be blank",
                    code="REQUIRED_FIELDS_MISSING",
                )
            ])
            logger.warning("Validation failed: %s", result.joined_message())
            return result

        resolver = RuleResolver(rules)
        violations: list[Violation] = []
        violations.extend(self._check_name(candidate.name, resolver))
        violations.extend(self._check_email(candidate.email, resolver, users, exclude_user_id))
        violations.extend(self._check_password(candidate.password, resolver))
        violations.extend(self._check_phones(candidate.phones))

        result = ValidationResult(violations)
        if result.valid:
            logger.debug("Validation passed for user candidate: %s", candidate.email)
        else:
            logger.warning("Validation failed: %s", result.joined_message())
        return result

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def _check_name(self, name: str, resolver: RuleResolver) -> list[Violation]:
        min_length = resolver.integer(RuleKey.NAME_MIN_LENGTH)
        if min_length and len(name) < min_length.value:
            return [Violation(
                message=f"Name must be at least {min_length.value} characters",
                code="NAME_TOO_SHORT",
                field="name",
            )]
        return []

    def _check_email(
        self,
        email: str,
        resolver: RuleResolver,
        users: EmailLookup,
        exclude_user_id: str | None,
    ) -> list[Violation]:
        configured = resolver.pattern(RuleKey.EMAIL_REGEX)
        pattern = configured.pattern if configured else DEFAULT_EMAIL_PATTERN

        if not pattern.fullmatch(email):
            return [Violation(
                message="Email format is not valid",
                code="INVALID_EMAIL",
                field="email",
            )]

        existing = users.find_by_email(email)
        if existing is not None and existing.id != exclude_user_id:
            return [EMAIL_ALREADY_REGISTERED]

        return []

    def _check_password(self, password: str, resolver: RuleResolver) -> list[Violation]:
        violations: list[Violation] = []

        min_length = resolver.integer(RuleKey.PASSWORD_MIN_LENGTH)
        if min_length and len(password) < min_length.value:
            violations.append(Violation(
                message=f"Password must be at least {min_length.value} characters",
                code="PASSWORD_TOO_SHORT",
                field="password",
            ))

        pattern = resolver.pattern(RuleKey.PASSWORD_PATTERN)
        if pattern and not pattern.matches(password):
            violations.append(Violation(
                message="Password does not match the required format",
                code="PASSWORD_PATTERN_MISMATCH",
                field="password",
            ))

        if resolver.flag(RuleKey.PASSWORD_REQUIRE_NUMBER) and not _DIGIT.search(password):
            violations.append(Violation(
                message="Password must contain at least one number",
                code="PASSWORD_MISSING_NUMBER",
                field="password",
            ))

        if resolver.flag(RuleKey.PASSWORD_REQUIRE_LOWERCASE) and not _LOWERCASE.search(password):
            violations.append(Violation(
                message="Password must contain at least one lowercase letter",
                code="PASSWORD_MISSING_LOWERCASE",
                field="password",
            ))

        if resolver.flag(RuleKey.PASSWORD_REQUIRE_UPPERCASE) and not _UPPERCASE.search(password):
            violations.append(Violation(
                message="Password must contain at least one uppercase letter",
                code="PASSWORD_MISSING_UPPERCASE",
                field="password",
            ))

        if resolver.flag(RuleKey.PASSWORD_REQUIRE_SPECIAL) and not _SPECIAL.search(password):
            violations.append(Violation(
                message=f"Password must contain at least one special character ({SPECIAL_CHARACTERS})",
                code="PASSWORD_MISSING_SPECIAL",
                field="password",
            ))

        no_spaces = resolver.flag(
            RuleKey.PASSWORD_NO_SPACES, RuleKey.PASSWORD_REQUIRE_NO_SPACES
        )
        if no_spaces and _WHITESPACE.search(password):
            violations.append(Violation(
                message="Password must not contain spaces",
                code="PASSWORD_CONTAINS_WHITESPACE",
                field="password",
            ))

        return violations

    def _check_phones(self, phones: list[PhoneCandidate]) -> list[Violation]:
        violations: list[Violation] = []

        for position, phone in enumerate(phones, start=1):
            if _is_blank(phone.number):
                violations.append(Violation(
                    message=f"Phone {position}: number is required",
                    code="PHONE_NUMBER_REQUIRED",
                    field=f"phones[{position - 1}].number",
                ))
            if _is_blank(phone.city_code):
                violations.append(Violation(
                    message=f"Phone {position}: city code is required",
                    code="PHONE_CITY_CODE_REQUIRED",
                    field=f"phones[{position - 1}].cityCode",
                ))
            if _is_blank(phone.country_code):
                violations.append(Violation(
                    message=f"Phone {position}: country code is required",
                    code="PHONE_COUNTRY_CODE_REQUIRED",
                    field=f"phones[{position - 1}].countryCode",
                ))

        return violations
