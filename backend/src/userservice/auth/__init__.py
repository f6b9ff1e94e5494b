"""Credential handling: password hashing and token issuance."""

from userservice.auth.password import PasswordService
from userservice.auth.tokens import (
    InvalidTokenError,
    TokenClaims,
    TokenError,
    TokenExpiredError,
    TokenService,
)

__all__ = [
    "InvalidTokenError",
    "PasswordService",
    "TokenClaims",
    "TokenError",
    "TokenExpiredError",
    "TokenService",
]
