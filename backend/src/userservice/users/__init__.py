"""User domain types."""

from userservice.users.types import Phone, PhoneCandidate, User, UserCandidate

__all__ = ["Phone", "PhoneCandidate", "User", "UserCandidate"]
