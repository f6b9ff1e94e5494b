"""Password hashing service using bcrypt."""

from passlib.context import CryptContext


class PasswordService:
    """Service for hashing and verifying passwords using bcrypt.

    Uses passlib's CryptContext for salted hashing with a configurable
    work factor. Plain passwords are never persisted.
    """

    def __init__(self, rounds: int = 12):
        """Initialize the password service.

        Args:
            rounds: bcrypt work factor (default 12, higher = slower + more secure)
        """
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        """Hash a password.

        Returns:
            Bcrypt hash string (includes algorithm, rounds, salt, and hash)
        """
        return self._context.hash(password)

    def verify(self, password: str, hash: str) -> bool:
        """Verify a password against a hash.

        Malformed hashes verify as False.
        """
        try:
            return self._context.verify(password, hash)
        except ValueError:
            return False
