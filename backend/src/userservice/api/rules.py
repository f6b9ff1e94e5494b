"""Validation rule administration endpoints.

Rule values are checked when written. A value that does not fit its key
is the operator's mistake here, so it is answered with 400 rather than
the 500 a broken stored rule produces during user validation.
"""

from typing import Any, Callable

from fastapi import APIRouter, HTTPException, Response

from userservice.api.errors import configuration_error_response
from userservice.api.schemas import RuleCreateRequest, RuleUpdateRequest
from userservice.errors import ConfigurationError, RuleNotFoundError
from userservice.persistence import SQLRuleStore


def create_rules_router(get_rule_store: Callable[[], SQLRuleStore | None]) -> APIRouter:
    """Create the validation-config router.

    Args:
        get_rule_store: Function returning the initialized rule store

    Returns:
        Configured APIRouter
    """
    router = APIRouter(prefix="/api/validation-config", tags=["validation-config"])

    def _store() -> SQLRuleStore:
        store = get_rule_store()
        if not store:
            raise HTTPException(500, "Rule store not initialized")
        return store

    @router.get("")
    def list_rules() -> list[dict[str, Any]]:
        """List all configured rules."""
        return [r.to_dict() for r in _store().list()]

    @router.get("/{key}")
    def get_rule(key: str) -> dict[str, Any]:
        """Get a single rule."""
        rule = _store().find_by_key(key)
        if rule is None:
            raise RuleNotFoundError(key)
        return rule.to_dict()

    @router.post("", status_code=201)
    def create_rule(request: RuleCreateRequest):
        """Configure a new rule."""
        try:
            rule = _store().create(request.to_rule())
        except ConfigurationError as e:
            return configuration_error_response(e, 400)
        return rule.to_dict()

    @router.put("/{key}")
    def update_rule(key: str, request: RuleUpdateRequest):
        """Replace a rule's value and description."""
        try:
            rule = _store().update(key, request.value, request.description)
        except ConfigurationError as e:
            return configuration_error_response(e, 400)
        if rule is None:
            raise RuleNotFoundError(key)
        return rule.to_dict()

    @router.delete("/{key}", status_code=204)
    def delete_rule(key: str) -> Response:
        """Remove a rule. The engine skips checks whose rule is absent."""
        if not _store().delete(key):
            raise RuleNotFoundError(key)
        return Response(status_code=204)

    return router
