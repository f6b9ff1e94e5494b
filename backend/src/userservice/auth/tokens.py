"""JWT issuance for registered users.

Every successful registration receives a freshly signed token. Tokens are
returned to the caller but nothing in the service requires them for
authorization yet.
"""

import time
import uuid
from dataclasses import dataclass

import jwt


class TokenError(Exception):
    """Base exception for token-related errors."""

    pass


class TokenExpiredError(TokenError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(TokenError):
    """Raised when a token is invalid or malformed."""

    pass


@dataclass
class TokenClaims:
    """Claims embedded in a user token.

    Attributes:
        user_id: The registered user's ID
        email: Email at issuance time
        token_id: Unique per issued token (jti)
        exp: Token expiration timestamp
        iat: Token issued-at timestamp
    """

    user_id: str
    email: str | None = None
    token_id: str = ""
    exp: int = 0
    iat: int = 0


class TokenService:
    """Service for generating and decoding user tokens.

    Uses HS256 with a shared secret key.
    """

    DEFAULT_TTL = 60 * 60  # 1 hour

    def __init__(self, secret_key: str, ttl: int = DEFAULT_TTL, algorithm: str = "HS256"):
        """Initialize the token service.

        Args:
            secret_key: Secret key for signing tokens (should be at least 32 chars)
            ttl: Token lifetime in seconds
            algorithm: JWT algorithm (default HS256)
        """
        self._secret_key = secret_key
        self._ttl = ttl
        self._algorithm = algorithm

    def generate_token(self, user_id: str, email: str) -> str:
        """Issue a new token for a user.

        The jti claim makes every token distinct, even for two tokens
        issued to the same user within the same second.
        """
        now = int(time.time())
        claims = {
            "sub": user_id,
            "email": email,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + self._ttl,
        }
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)

    def decode_token(self, token: str) -> TokenClaims:
        """Decode and validate a token.

        Raises:
            TokenExpiredError: If the token has expired
            InvalidTokenError: If the token is invalid or malformed
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}")

        return TokenClaims(
            user_id=payload.get("sub", ""),
            email=payload.get("email"),
            token_id=payload.get("jti", ""),
            exp=payload.get("exp", 0),
            iat=payload.get("iat", 0),
        )
