"""Application services."""

from userservice.services.users import UserService

__all__ = ["UserService"]
