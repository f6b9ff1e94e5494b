"""User API endpoints."""

from typing import Any, Callable

from fastapi import APIRouter, HTTPException, Response

from userservice.api.schemas import UserRequest
from userservice.errors import NotFoundError, UserNotFoundError
from userservice.services import UserService


def create_users_router(get_user_service: Callable[[], UserService | None]) -> APIRouter:
    """Create the users router.

    Args:
        get_user_service: Function returning the initialized UserService

    Returns:
        Configured APIRouter
    """
    router = APIRouter(prefix="/api/users", tags=["users"])

    def _service() -> UserService:
        service = get_user_service()
        if not service:
            raise HTTPException(500, "User service not initialized")
        return service

    @router.post("", status_code=201)
    def create_user(request: UserRequest) -> dict[str, Any]:
        """Register a new user."""
        return _service().create_user(request.to_candidate()).to_dict()

    @router.get("")
    def list_users() -> list[dict[str, Any]]:
        """List all users."""
        return [u.to_dict() for u in _service().get_all_users()]

    @router.get("/email/{email}")
    def get_user_by_email(email: str) -> dict[str, Any]:
        """Look up a user by email."""
        user = _service().get_user_by_email(email)
        if user is None:
            raise NotFoundError(f"No user with email '{email}'")
        return user.to_dict()

    @router.get("/{user_id}")
    def get_user(user_id: str) -> dict[str, Any]:
        """Get a single user."""
        user = _service().get_user_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user.to_dict()

    @router.put("/{user_id}")
    def update_user(user_id: str, request: UserRequest) -> dict[str, Any]:
        """Re-validate and overwrite a user's name, email and password."""
        return _service().update_user(user_id, request.to_candidate()).to_dict()

    @router.delete("/{user_id}", status_code=204)
    def delete_user(user_id: str) -> Response:
        """Delete a user and its phones."""
        _service().delete_user(user_id)
        return Response(status_code=204)

    @router.post("/{user_id}/login")
    def record_login(user_id: str) -> dict[str, Any]:
        """Stamp the user's last login time."""
        user = _service().update_last_login(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user.to_dict()

    return router
