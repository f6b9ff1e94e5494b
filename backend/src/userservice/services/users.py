"""User registration service.

Coordinates the user lifecycle:
1. Validate the candidate (ValidationEngine, rules read at call time)
2. Assign id, token and timestamps; hash the password
3. Persist through the UserStore

Validation outcomes are forwarded unchanged: the joined violation report
raised here is exactly what the engine produced.
"""

import logging
import uuid
from datetime import UTC, datetime

from userservice.auth.password import PasswordService
from userservice.auth.tokens import TokenService
from userservice.errors import UserNotFoundError, ValidationFailure
from userservice.persistence.adapter import RuleLookup, UserStore
from userservice.users.types import Phone, User, UserCandidate
from userservice.validation.engine import ValidationEngine

logger = logging.getLogger(__name__)


class UserService:
    """Create, query, update and delete registered users."""

    def __init__(
        self,
        users: UserStore,
        rules: RuleLookup,
        password_service: PasswordService,
        token_service: TokenService,
        engine: ValidationEngine | None = None,
    ):
        self.users = users
        self.rules = rules
        self.password_service = password_service
        self.token_service = token_service
        self.engine = engine or ValidationEngine()

    def _now(self) -> datetime:
        return datetime.now(UTC)

    def _validate(self, candidate: UserCandidate, exclude_user_id: str | None = None) -> None:
        result = self.engine.validate(
            candidate, self.rules, self.users, exclude_user_id=exclude_user_id
        )
        if not result.valid:
            raise ValidationFailure(result.violations)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_user(self, candidate: UserCandidate) -> User:
        """Validate and register a new user.

        Raises:
            ValidationFailure: If any rule is violated
            DuplicateEmailError: If a concurrent registration took the email
            ConfigurationError: If a stored rule cannot be interpreted
        """
        self._validate(candidate)

        now = self._now()
        user_id = str(uuid.uuid4())
        user = User(
            id=user_id,
            name=candidate.name,
            email=candidate.email,
            password_hash=self.password_service.hash(candidate.password),
            created=now,
            modified=now,
            last_login=now,
            token=self.token_service.generate_token(user_id, candidate.email),
            active=True,
            phones=[
                Phone(
                    number=p.number,
                    city_code=p.city_code,
                    country_code=p.country_code,
                )
                for p in candidate.phones
            ],
        )

        saved = self.users.save(user)
        logger.info("User created: %s", saved.id)
        return saved

    def update_user(self, user_id: str, candidate: UserCandidate) -> User:
        """Re-validate and overwrite a user's name, email and password.

        The user's own email does not count as a duplicate. Phones are kept.

        Raises:
            UserNotFoundError: If no user has this id
            ValidationFailure: If any rule is violated
        """
        user = self.users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        self._validate(candidate, exclude_user_id=user_id)

        user.name = candidate.name
        user.email = candidate.email
        user.password_hash = self.password_service.hash(candidate.password)
        user.modified = self._now()

        saved = self.users.save(user)
        logger.info("User updated: %s", user_id)
        return saved

    def delete_user(self, user_id: str) -> None:
        """Delete a user and its phones.

        Raises:
            UserNotFoundError: If no user has this id (nothing is deleted)
        """
        if not self.users.exists_by_id(user_id):
            raise UserNotFoundError(user_id)

        self.users.delete_by_id(user_id)
        logger.info("User deleted: %s", user_id)

    def update_last_login(self, user_id: str) -> User | None:
        """Stamp the user's last login (and modified) with the current time.

        Returns:
            The updated user, or None if no user has this id
        """
        user = self.users.find_by_id(user_id)
        if user is None:
            return None

        now = self._now()
        user.last_login = now
        user.modified = now
        return self.users.save(user)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_all_users(self) -> list[User]:
        return self.users.find_all()

    def get_user_by_id(self, user_id: str) -> User | None:
        return self.users.find_by_id(user_id)

    def get_user_by_email(self, email: str) -> User | None:
        return self.users.find_by_email(email)
